"""
Key-value engines for session storage.

Use :func:`open_store` to get an engine handle. Handles are cached per URL
for the life of the process, so the per-request path never reconnects.
"""

import threading
from typing import Dict, Optional
from urllib.parse import urlparse

from ..exceptions import ConfigurationError
from .. import logging
from .base import Commit, Entry, KVStore
from .memory_store import MemoryStore
from .redis_store import RedisStore

logger = logging.getLogger(__name__)

REDIS_SCHEMES = ('redis', 'rediss', 'unix')

_handles: Dict[str, KVStore] = {}
_lock = threading.Lock()


def _open(url: Optional[str]) -> KVStore:
    scheme = urlparse(url).scheme if url else 'memory'
    if scheme == 'memory':
        logger.info('Using in-memory session store')
        return MemoryStore()
    if scheme in REDIS_SCHEMES:
        logger.info('Using Redis session store')
        return RedisStore(url)
    raise ConfigurationError(f'Unsupported store URL scheme: {scheme}')


def open_store(url: Optional[str] = None) -> KVStore:
    """
    Get the shared engine handle for ``url``.

    Parameters
    ----------
    url : str or None
        ``None``, ``''`` or ``memory://`` for the in-memory engine;
        ``redis://``, ``rediss://`` or ``unix://`` for Redis.

    Returns
    -------
    :class:`.KVStore`

    Raises
    ------
    :class:`.ConfigurationError`
        Raised if the URL scheme is not supported.

    """
    name = url or ''
    with _lock:
        if name not in _handles:
            _handles[name] = _open(url)
        return _handles[name]


def close_stores() -> None:
    """Close and forget every cached engine handle."""
    with _lock:
        for store in _handles.values():
            store.close()
        _handles.clear()
