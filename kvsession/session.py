"""
HTTP sessions stored in a key-value engine.

A :class:`Session` is built for each request by :func:`create_session`. The
session id travels in a signed cookie; the session's data lives in the
engine under keys of the form ``(key_space, session_id, *sub_key)``.

.. code-block:: python

   from flask import Flask, request, make_response
   from kvsession import create_session

   app = Flask('hello')

   @app.route('/')
   def hello():
       session = create_session(request, ['secret-key'])
       name = session.get('name').value
       return session.send(make_response(f'Hello {name or "anonymous"}'))

"""

import secrets
from typing import Any, Iterator, Mapping, NamedTuple, Optional, Sequence, \
    Union

from werkzeug.datastructures import Headers

from . import keys, logging
from .cookies import CookieJar, KeyStack
from .exceptions import ConfigurationError
from .headers import merge_headers
from .kv import Commit, Entry, KVStore, open_store

logger = logging.getLogger(__name__)

SubKey = Union[keys.KeyPart, Sequence[keys.KeyPart]]


class SessionOptions(NamedTuple):
    """Options for :func:`create_session`."""

    cookie_name: str = 'sid'
    """
    Cookie name that does not disclose unnecessary details about its purpose
    and the technology stack behind it.
    """

    key_space: keys.KeyPart = 'sessions'
    """The key space for storing session data."""

    store_url: Optional[str] = None
    """Engine location; see :func:`kvsession.kv.open_store`."""


DEFAULT_OPTIONS = SessionOptions()


def merge_options(options: Union[None, SessionOptions, Mapping[str, Any]]) \
        -> SessionOptions:
    """
    Apply ``options`` over :data:`DEFAULT_OPTIONS`.

    Explicit options take precedence; options that are ``None`` fall back to
    the default.
    """
    if options is None:
        return DEFAULT_OPTIONS
    if isinstance(options, SessionOptions):
        return options
    unknown = set(options) - set(SessionOptions._fields)
    if unknown:
        raise ConfigurationError(f'Unknown session options: {sorted(unknown)}')
    return DEFAULT_OPTIONS._replace(
        **{name: value for name, value in options.items() if value is not None}
    )


class Session(object):
    """
    Key-value data for one client, scoped by a cookie-borne session id.

    Only :meth:`destroy` and :meth:`refresh` change the session id; both also
    queue a new cookie.
    """

    def __init__(self, store: KVStore, session_id: str,
                 key_space: keys.KeyPart, cookie_name: str,
                 cookies: CookieJar) -> None:
        """
        Construct a new session.

        Most callers should use :func:`create_session`, which also resolves
        the session id from the request cookie.

        Parameters
        ----------
        store : :class:`.KVStore`
        session_id : str
        key_space : str, bytes, int, float or bool
        cookie_name : str
        cookies : :class:`.CookieJar`

        """
        self._store = store
        self._id = session_id
        self._key_space = keys.validate_part(key_space)
        self._cookie_name = cookie_name
        self._cookies = cookies

    @property
    def id(self) -> str:
        """The current session id."""
        return self._id

    @property
    def key_space(self) -> keys.KeyPart:
        return self._key_space

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    @property
    def _prefix(self) -> keys.Key:
        return (self._key_space, self._id)

    def _full_key(self, key: SubKey) -> keys.Key:
        return keys.full_key(self._key_space, self._id, key)

    def get(self, key: SubKey) -> Entry:
        """Get the entry for ``key``; ``value`` is ``None`` if not found."""
        return self._store.get(self._full_key(key))

    def set(self, key: SubKey, value: Any) -> Commit:
        return self._store.set(self._full_key(key), value)

    def delete(self, key: SubKey) -> None:
        self._store.delete(self._full_key(key))

    def list(self) -> Iterator[Entry]:
        """Iterate over all entries for the active session."""
        return self._store.list(self._prefix)

    def persist(self, *sources: Any) -> Headers:
        """
        Merge the session cookie into a set of response headers.

        .. code-block:: python

           return Response(body, headers=session.persist({
               'Content-Type': 'application/json',
               'Cache-Control': 'no-cache',
           }))

        See :func:`kvsession.headers.merge_headers` for accepted sources.
        """
        return merge_headers(*sources, self._cookies)

    def send(self, response: Any) -> Any:
        """Rebuild ``response`` with the session cookie in its headers."""
        return response.__class__(
            response.response,
            status=response.status,
            headers=self.persist(response)
        )

    def destroy(self) -> None:
        """
        Destroy the session.

        All session data is deleted from storage, and the session gets a new
        (anonymous) id.
        """
        old_id = self._id
        entries = list(self._store.list(self._prefix))
        for entry in entries:
            self._store.delete(entry.key)
        self._cookies.delete(self._cookie_name, path='/')
        self._update_id()
        logger.info('Destroyed session %s... (%i entries)', old_id[:8],
                    len(entries))

    def refresh(self, new_id: Optional[str] = None) -> str:
        """
        Move all session data to a new id, and return that id.

        Each entry is written under its new key before the old key is deleted,
        so an interrupted refresh may leave entries under both ids but never
        loses them. There is no rollback.

        Parameters
        ----------
        new_id : str
            Defaults to a fresh random id.

        Returns
        -------
        str

        """
        old_id = self._id
        fresh_id = new_id if new_id is not None else self.generate_id()
        if fresh_id == old_id:
            raise ValueError('New session id must differ from the current id')

        entries = list(self._store.list(self._prefix))
        for entry in entries:
            # Every part equal to the old id is replaced, wherever it occurs.
            fresh_key = tuple(fresh_id if part == old_id else part
                              for part in entry.key)
            self._store.set(fresh_key, entry.value)
            self._store.delete(entry.key)
        self._update_id(fresh_id)
        logger.info('Refreshed session %s... as %s... (%i entries)',
                    old_id[:8], fresh_id[:8], len(entries))
        return fresh_id

    def _update_id(self, value: Optional[str] = None) -> None:
        self._id = value if value is not None else self.generate_id()
        self._cookies.set(self._cookie_name, self._id, path='/',
                          signed=True, overwrite=True)

    @staticmethod
    def generate_id() -> str:
        """Generate a random 128 bit session id."""
        return secrets.token_bytes(16).hex()


def resolve_id(cookies: CookieJar, cookie_name: str) -> str:
    """
    Get the session id from the request cookie, or generate a new one.

    The id is always written back to ``cookies``, so that a new anonymous
    session is assigned its cookie on the very first response.
    """
    session_id = cookies.get(cookie_name)
    if session_id is None:
        logger.debug('No valid session cookie; generating a new id')
        session_id = Session.generate_id()
    cookies.set(cookie_name, session_id, path='/')
    return session_id


def create_session(request: Any, signature_keys: Sequence[str],
                   options: Union[None, SessionOptions,
                                  Mapping[str, Any]] = None,
                   store: Optional[KVStore] = None) -> Session:
    """
    Create a :class:`Session` for ``request``.

    Parameters
    ----------
    request : object
        Anything with a ``cookies`` mapping, e.g. :class:`flask.Request`.
    signature_keys : list
        Cookie signing secrets, newest first.
    options : :class:`SessionOptions` or dict
        Overrides for :data:`DEFAULT_OPTIONS`.
    store : :class:`.KVStore`
        Engine handle; if not given, one is obtained from
        :func:`kvsession.kv.open_store` using ``options.store_url``.

    Returns
    -------
    :class:`Session`

    Raises
    ------
    :class:`.ConfigurationError`
        Raised if ``signature_keys`` is empty or options are malformed.
    :class:`.InvalidKeyType`
        Raised if the configured key space is not a valid key part.

    """
    opts = merge_options(options)
    key_stack = KeyStack(signature_keys)
    if store is None:
        store = open_store(opts.store_url)
    cookies = CookieJar(request, key_stack)
    session_id = resolve_id(cookies, opts.cookie_name)
    return Session(store=store, session_id=session_id,
                   key_space=opts.key_space, cookie_name=opts.cookie_name,
                   cookies=cookies)
