"""
Key construction for session-scoped data.

Every key written on behalf of a session has the form
``(key_space, session_id, *sub_key)``. Callers only ever supply the
``sub_key`` part, so a session can never address data outside of its own
namespace.
"""

from typing import Any, Sequence, Tuple, Union

from .exceptions import InvalidKeyType

KeyPart = Union[str, bytes, int, float, bool]
Key = Tuple[KeyPart, ...]

# Iteration order across part types: bytes < str < number < bool.
_TYPE_RANK = ((bool, 3), (bytes, 0), (str, 1), (int, 2), (float, 2))


def _rank(part: Any) -> int:
    for type_, rank in _TYPE_RANK:
        if isinstance(part, type_):
            return rank
    raise InvalidKeyType(f'Unsupported key part type: {type(part).__name__}')


def validate_part(part: Any) -> KeyPart:
    """Raise :class:`.InvalidKeyType` unless ``part`` is a usable key part."""
    _rank(part)
    return part


def normalize(sub_key: Union[KeyPart, Sequence[KeyPart]]) -> Key:
    """
    Coerce a single key part or a sequence of parts to a key tuple.

    Parameters
    ----------
    sub_key : str, bytes, int, float, bool, or a list/tuple of these

    Returns
    -------
    tuple

    Raises
    ------
    :class:`.InvalidKeyType`
        Raised if ``sub_key`` or any of its parts is not a supported type,
        or if ``sub_key`` is an empty sequence.

    """
    if isinstance(sub_key, (list, tuple)):
        if not sub_key:
            raise InvalidKeyType('A sub-key needs at least one part')
        return tuple(validate_part(part) for part in sub_key)
    return (validate_part(sub_key),)


def full_key(key_space: KeyPart, session_id: str,
             sub_key: Union[KeyPart, Sequence[KeyPart]]) -> Key:
    """Build the fully-qualified store key for a session's ``sub_key``."""
    return (key_space, session_id) + normalize(sub_key)


def sort_key(key: Sequence[KeyPart]) -> Tuple[Tuple[int, KeyPart], ...]:
    """
    Get a total ordering for ``key``.

    Parts are compared first by type and then by value, so keys of mixed part
    types can be sorted together. Two keys with equal sort keys address the
    same entry; in particular ``True`` and ``1`` are distinct parts.
    """
    return tuple((_rank(part), part) for part in key)
