"""
Redis-backed key-value engine.

Key tuples are stored as compact JSON arrays, with ``bytes`` parts wrapped as
``{"$bytes": "<base64>"}`` and integral floats stored as integers,
so ``1.0`` and ``1`` address the same entry. Each entry is a Redis hash holding the
JSON-encoded ``value`` and its ``versionstamp``. Versionstamps come from a
single counter key, so they increase monotonically across the whole store.

Redis has no ordered prefix scan; :meth:`RedisStore.list` uses ``SCAN`` with
a glob pattern and sorts the matching keys before fetching their values.
"""

import json
from base64 import b64decode, b64encode
from typing import Any, Iterator, List, Optional

import redis

from ..exceptions import StoreUnavailable
from ..keys import Key, KeyPart, sort_key
from .. import logging
from .base import Commit, Entry, KVStore

logger = logging.getLogger(__name__)

VERSIONSTAMP_KEY = 'kvsession:versionstamp'
"""Counter for versionstamps; never matches an encoded key."""

SCAN_COUNT = 1000
"""Hint for the number of keys Redis examines per ``SCAN`` call."""

PIPELINE_SIZE = 100
"""Number of ``HGETALL`` commands sent per round trip while listing."""

_GLOB_SPECIAL = '\\*?[]'


def _encode_part(part: KeyPart) -> Any:
    if isinstance(part, bytes):
        return {'$bytes': b64encode(part).decode('ascii')}
    if isinstance(part, float) and part.is_integer():
        return int(part)    # 1.0 and 1 address the same entry.
    return part


def _decode_part(part: Any) -> KeyPart:
    if isinstance(part, dict):
        return b64decode(part['$bytes'])
    return part


def encode_key(key: Key) -> str:
    """Encode a key tuple as a Redis key name."""
    return json.dumps([_encode_part(part) for part in key],
                      separators=(',', ':'))


def decode_key(name: Any) -> Key:
    """Decode a Redis key name produced by :func:`encode_key`."""
    if isinstance(name, bytes):
        name = name.decode('utf-8')
    return tuple(_decode_part(part) for part in json.loads(name))


def prefix_pattern(prefix: Key) -> str:
    """Get a ``SCAN MATCH`` pattern for keys strictly under ``prefix``."""
    head = encode_key(prefix)[:-1]     # Drop the closing bracket.
    for char in _GLOB_SPECIAL:
        head = head.replace(char, '\\' + char)
    if not prefix:
        return head + '*'
    return head + ',*'


def _field(data: dict, name: str) -> Any:
    return data.get(name.encode('ascii'), data.get(name))


def _as_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return str(value)


class RedisStore(KVStore):
    """
    Manages a connection to Redis.

    The :class:`redis.StrictRedis` client is thread safe and connections are
    taken from its pool when a command is executed, so one instance can be
    shared by every request in the process.
    """

    def __init__(self, url: Optional[str] = None,
                 connection: Optional[redis.StrictRedis] = None) -> None:
        """Open the connection to Redis."""
        if connection is None:
            logger.debug('New Redis connection at %s', url)
            connection = redis.StrictRedis.from_url(url)
        self.r = connection

    def _entry(self, key: Key, data: dict) -> Entry:
        if not data:
            return Entry(key, None, None)
        return Entry(key, json.loads(_field(data, 'value')),
                     _as_str(_field(data, 'versionstamp')))

    def get(self, key: Key) -> Entry:
        key = tuple(key)
        try:
            data = self.r.hgetall(encode_key(key))
        except redis.exceptions.ConnectionError as e:
            raise StoreUnavailable(f'Connection failed: {e}') from e
        return self._entry(key, data)

    def set(self, key: Key, value: Any) -> Commit:
        encoded_value = json.dumps(value)
        try:
            versionstamp = f'{self.r.incr(VERSIONSTAMP_KEY):020x}'
            self.r.hset(encode_key(tuple(key)), mapping={
                'value': encoded_value,
                'versionstamp': versionstamp
            })
        except redis.exceptions.ConnectionError as e:
            raise StoreUnavailable(f'Connection failed: {e}') from e
        return Commit(True, versionstamp)

    def delete(self, key: Key) -> None:
        try:
            self.r.delete(encode_key(tuple(key)))
        except redis.exceptions.ConnectionError as e:
            raise StoreUnavailable(f'Connection failed: {e}') from e

    def list(self, prefix: Key) -> Iterator[Entry]:
        pattern = prefix_pattern(tuple(prefix))
        try:
            # SCAN may report a key more than once.
            found = set(self.r.scan_iter(match=pattern, count=SCAN_COUNT))
        except redis.exceptions.ConnectionError as e:
            raise StoreUnavailable(f'Connection failed: {e}') from e
        keys = sorted((decode_key(name) for name in found), key=sort_key)
        logger.debug('Found %i keys matching %s', len(keys), pattern)

        for start in range(0, len(keys), PIPELINE_SIZE):
            batch: List[Key] = keys[start:start + PIPELINE_SIZE]
            pipe = self.r.pipeline(transaction=False)
            for key in batch:
                pipe.hgetall(encode_key(key))
            try:
                results = pipe.execute()
            except redis.exceptions.ConnectionError as e:
                raise StoreUnavailable(f'Connection failed: {e}') from e
            for key, data in zip(batch, results):
                if data:    # Skip keys deleted since the scan.
                    yield self._entry(key, data)

    def close(self) -> None:
        self.r.close()
