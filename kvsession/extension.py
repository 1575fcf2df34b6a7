"""Flask integration: attach a :class:`.Session` to every request."""

from typing import List, Optional, Union

from flask import Flask, Response, g, request

from . import logging
from .exceptions import ConfigurationError
from .kv import KVStore, open_store
from .session import Session, create_session

logger = logging.getLogger(__name__)


def _signature_keys(value: Union[str, List[str], None]) -> List[str]:
    if isinstance(value, str):
        return [key.strip() for key in value.split(',') if key.strip()]
    return list(value or [])


class KVSession(object):
    """
    Loads a :class:`.Session` before each request, and persists its cookie.

    Intended for use in a Flask application factory, for example:

    .. code-block:: python

       from flask import Flask
       from kvsession import KVSession, current_session


       def create_web_app() -> Flask:
           app = Flask('someapp')
           app.config.from_pyfile('config.py')
           KVSession(app)
           app.register_blueprint(routes.blueprint)
           return app

    Views then use :func:`current_session` to read and write session data.
    """

    def __init__(self, app: Optional[Flask] = None,
                 store: Optional[KVStore] = None) -> None:
        """
        Initialize ``app``, if given.

        Parameters
        ----------
        app : :class:`Flask`
        store : :class:`.KVStore`
            Engine handle to use instead of ``KVSESSION_STORE_URL``.

        """
        self.store = store
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Set configuration defaults and register request hooks."""
        self.app = app
        app.config.setdefault('KVSESSION_COOKIE_NAME', 'sid')
        app.config.setdefault('KVSESSION_KEY_SPACE', 'sessions')
        app.config.setdefault('KVSESSION_STORE_URL', None)
        app.config.setdefault('KVSESSION_SIGNATURE_KEYS', [])
        app.extensions['kvsession'] = self
        app.before_request(self.load_session)
        app.after_request(self.persist_session)

    def _get_store(self) -> KVStore:
        if self.store is None:
            return open_store(self.app.config['KVSESSION_STORE_URL'])
        return self.store

    def load_session(self) -> None:
        """Create the session for the current request."""
        keys = _signature_keys(self.app.config['KVSESSION_SIGNATURE_KEYS'])
        if not keys:
            raise ConfigurationError('KVSESSION_SIGNATURE_KEYS is not set')
        g.kvsession = create_session(request, keys, options={
            'cookie_name': self.app.config['KVSESSION_COOKIE_NAME'],
            'key_space': self.app.config['KVSESSION_KEY_SPACE'],
        }, store=self._get_store())

    def persist_session(self, response: Response) -> Response:
        """Add the session cookie to the outgoing response."""
        session: Optional[Session] = g.get('kvsession')
        if session is None:
            return response
        return session.send(response)


def current_session() -> Session:
    """Get the :class:`.Session` for the current request."""
    session: Optional[Session] = g.get('kvsession')
    if session is None:
        raise RuntimeError('No session; is KVSession initialized on the app?')
    return session
