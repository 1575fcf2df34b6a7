"""In-memory key-value engine, used when no store URL is configured."""

import threading
from copy import deepcopy
from typing import Any, Dict, Iterator, Tuple

from ..keys import Key, sort_key
from .base import Commit, Entry, KVStore


class MemoryStore(KVStore):
    """
    Ordered key-value map held in process memory.

    Values are deep-copied on write and on read, so callers never share
    mutable state with the store. Data does not survive the process.
    """

    def __init__(self) -> None:
        self._entries: Dict[tuple, Tuple[Key, Any, str]] = {}
        self._version = 0
        self._lock = threading.Lock()

    def _next_versionstamp(self) -> str:
        self._version += 1
        return f'{self._version:020x}'

    def get(self, key: Key) -> Entry:
        key = tuple(key)
        with self._lock:
            stored = self._entries.get(sort_key(key))
        if stored is None:
            return Entry(key, None, None)
        _, value, versionstamp = stored
        return Entry(key, deepcopy(value), versionstamp)

    def set(self, key: Key, value: Any) -> Commit:
        key = tuple(key)
        value = deepcopy(value)
        with self._lock:
            versionstamp = self._next_versionstamp()
            self._entries[sort_key(key)] = (key, value, versionstamp)
        return Commit(True, versionstamp)

    def delete(self, key: Key) -> None:
        with self._lock:
            self._entries.pop(sort_key(tuple(key)), None)

    def list(self, prefix: Key) -> Iterator[Entry]:
        wanted = sort_key(tuple(prefix))
        size = len(wanted)
        with self._lock:
            matches = sorted(
                index for index in self._entries
                if len(index) > size and index[:size] == wanted
            )
        for index in matches:
            with self._lock:
                stored = self._entries.get(index)
            if stored is None:      # Deleted since the scan began.
                continue
            key, value, versionstamp = stored
            yield Entry(key, deepcopy(value), versionstamp)
