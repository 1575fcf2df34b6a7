"""Interface for ordered key-value engines used as session storage."""

from abc import ABC, abstractmethod
from typing import Any, Iterator, NamedTuple, Optional

from ..keys import Key


class Entry(NamedTuple):
    """A key-value entry, or the absence of one."""

    key: Key
    value: Any
    """``None`` if there is no entry at :attr:`key`."""

    versionstamp: Optional[str]
    """Changes on every write to :attr:`key`; ``None`` if not found."""


class Commit(NamedTuple):
    """Acknowledgement of a successful write."""

    ok: bool
    versionstamp: str


class KVStore(ABC):
    """
    An ordered key-value engine.

    Keys are tuples of key parts (see :mod:`kvsession.keys`). Implementations
    must iterate prefix listings in :func:`kvsession.keys.sort_key` order.
    """

    @abstractmethod
    def get(self, key: Key) -> Entry:
        """Get the entry at ``key``; not-found is an entry with no value."""

    @abstractmethod
    def set(self, key: Key, value: Any) -> Commit:
        """Write ``value`` at ``key``, replacing any prior value."""

    @abstractmethod
    def delete(self, key: Key) -> None:
        """Remove the entry at ``key``, if there is one."""

    @abstractmethod
    def list(self, prefix: Key) -> Iterator[Entry]:
        """
        Iterate over all entries whose keys begin with ``prefix``.

        The entry at ``prefix`` itself (if any) is not included.
        """

    def close(self) -> None:
        """Release any resources held by the engine."""

    def __enter__(self) -> 'KVStore':
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
