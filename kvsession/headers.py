"""Merging of response headers from several sources."""

from typing import Any, Iterable, Mapping, Tuple

from werkzeug.datastructures import Headers

MULTI_VALUED = 'set-cookie'


def _pairs(source: Any) -> Iterable[Tuple[str, str]]:
    if hasattr(source, 'to_headers'):      # e.g. a CookieJar.
        source = source.to_headers()
    elif hasattr(source, 'headers') and not isinstance(source, Mapping):
        source = source.headers            # e.g. a Response.
    if isinstance(source, Headers):
        return source.items()
    if isinstance(source, Mapping):
        return source.items()
    return source


def merge_headers(*sources: Any) -> Headers:
    """
    Combine header sources into one :class:`werkzeug.datastructures.Headers`.

    Each source may be a mapping, an iterable of ``(name, value)`` pairs,
    a :class:`werkzeug.datastructures.Headers`, an object with a ``headers``
    attribute (such as a response), or an object with a ``to_headers()``
    method (such as a :class:`kvsession.cookies.CookieJar`). ``None`` is
    skipped.

    Repeated headers within one source are all kept. A later source replaces
    every earlier value for a header name it carries, except for
    ``Set-Cookie``, which is always appended.
    """
    merged = Headers()
    for source in sources:
        if source is None:
            continue
        incoming = Headers(list(_pairs(source)))
        for name in {name.lower() for name in incoming.keys()}:
            if name != MULTI_VALUED:
                merged.remove(name)
        for name, value in incoming.items():
            merged.add(name, value)
    return merged
