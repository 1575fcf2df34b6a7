"""
Signed session cookies.

Cookie values are signed as HS256 JSON web tokens. A :class:`KeyStack` holds
the signing secrets in order of preference: new cookies are always signed
with the first (newest) secret, and a cookie signed with any secret in the
stack is accepted. Rotating a secret is a matter of pushing a new one onto
the front of the stack and retiring the oldest once its cookies have aged
out.
"""

from typing import Any, List, Optional, Sequence, Tuple

import jwt
from werkzeug.http import dump_cookie

from .exceptions import ConfigurationError
from . import logging

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'
CLAIM = 'sid'


class KeyStack(object):
    """Ordered signing secrets; the first signs, any may verify."""

    def __init__(self, keys: Sequence[str]) -> None:
        if isinstance(keys, str) or not keys:
            raise ConfigurationError('At least one signing key is required')
        if not all(isinstance(key, str) and key for key in keys):
            raise ConfigurationError('Signing keys must be non-empty strings')
        self._keys: List[str] = list(keys)

    def __len__(self) -> int:
        return len(self._keys)

    def sign(self, value: str) -> str:
        """Sign ``value`` with the newest key."""
        return jwt.encode({CLAIM: value}, self._keys[0], algorithm=ALGORITHM)

    def verify(self, token: str) -> Optional[str]:
        """
        Get the value from a signed ``token``.

        Keys are tried in order, and the first one that validates the token
        wins.

        Returns
        -------
        str or None
            ``None`` if the token is malformed or was not signed by any key
            in the stack.

        """
        for index, key in enumerate(self._keys):
            try:
                payload = jwt.decode(token, key, algorithms=[ALGORITHM])
            except jwt.exceptions.InvalidSignatureError:
                continue
            except jwt.exceptions.InvalidTokenError as e:
                logger.debug('Malformed signed value: %s', e)
                return None
            value = payload.get(CLAIM)
            if not isinstance(value, str):
                return None
            if index > 0:
                logger.debug('Value verified with retired key %i', index)
            return value
        return None


class CookieJar(object):
    """
    Reads cookies from a request and collects ``Set-Cookie`` headers.

    Parameters
    ----------
    request : object
        Anything with a ``cookies`` mapping, e.g. a :class:`flask.Request`.
        ``None`` is treated as a request without cookies.
    keys : :class:`KeyStack`

    """

    def __init__(self, request: Any, keys: KeyStack) -> None:
        self._cookies = getattr(request, 'cookies', None) or {}
        self._secure = bool(getattr(request, 'is_secure', False))
        self._keys = keys
        self._pending: List[Tuple[str, str]] = []

    def get(self, name: str, signed: bool = True) -> Optional[str]:
        """Get the (verified) value of a request cookie."""
        value = self._cookies.get(name)
        if value is None or not signed:
            return value
        return self._keys.verify(value)

    def _discard(self, name: str) -> None:
        self._pending = [(n, h) for n, h in self._pending if n != name]

    def set(self, name: str, value: str, path: str = '/',
            signed: bool = True, overwrite: bool = False) -> None:
        """
        Queue a cookie for the response.

        Parameters
        ----------
        name : str
        value : str
        path : str
        signed : bool
            Sign ``value`` with the newest key in the stack.
        overwrite : bool
            Drop any cookie with the same name queued earlier.

        """
        if overwrite:
            self._discard(name)
        if signed:
            value = self._keys.sign(value)
        self._pending.append((name, dump_cookie(
            name, value, path=path, secure=self._secure, httponly=True,
            samesite='Lax'
        )))

    def delete(self, name: str, path: str = '/') -> None:
        """Queue an expired cookie, so that the client drops ``name``."""
        self._discard(name)
        self._pending.append((name, dump_cookie(
            name, '', max_age=0, expires=0, path=path, secure=self._secure,
            httponly=True, samesite='Lax'
        )))

    def to_headers(self) -> List[Tuple[str, str]]:
        """Get the queued ``Set-Cookie`` headers."""
        return [('Set-Cookie', header) for _, header in self._pending]
