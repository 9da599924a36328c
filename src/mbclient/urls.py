"""URL construction for API calls.

:func:`build_url` joins the configured prefix, a relative path, and an
optional query string. Query pairs are emitted in the insertion order of
the supplied mapping; nothing is sorted.

Example::

    >>> build_url("http://localhost:3000/api/", "card", {"org": 1, "f": "all"})
    'http://localhost:3000/api/card?org=1&f=all'
"""

from __future__ import annotations

import enum
from typing import Any, Mapping, Optional
from urllib.parse import quote


def query_value(value: Any) -> str:
    """Render a query key or value as a plain string.

    Enum members (symbolic constants) are rendered as their value, so
    ``HTTPMethod.GET`` becomes ``"GET"`` rather than ``"HTTPMethod.GET"``.
    """
    if isinstance(value, enum.Enum):
        value = value.value
    return str(value)


def build_query_string(params: Mapping[Any, Any], encode: bool = True) -> str:
    """Join *params* into ``key=value&key=value``.

    Args:
        params: Query parameters, emitted in iteration order.
        encode: Percent-encode keys and values. When ``False`` they are
            inserted verbatim, so ``&``, ``=`` or spaces in a value will
            corrupt the query string.

    Returns:
        The query string without a leading ``?``.
    """
    pairs = []
    for key, value in params.items():
        k, v = query_value(key), query_value(value)
        if encode:
            k, v = quote(k, safe=""), quote(v, safe="")
        pairs.append(f"{k}={v}")
    return "&".join(pairs)


def build_url(
    prefix: str,
    path: str,
    query_params: Optional[Mapping[Any, Any]] = None,
    encode: bool = True,
) -> str:
    """Build the full request URL.

    Args:
        prefix: Base URL prefix, e.g. ``http://localhost:3000/api/``.
        path: Relative path appended verbatim, e.g. ``card/1/favorite``.
        query_params: Optional query parameters. An empty mapping adds no
            ``?``.
        encode: Forwarded to :func:`build_query_string`.

    Returns:
        ``prefix + path`` followed by ``?`` and the query string when
        *query_params* is non-empty.
    """
    url = f"{prefix}{path}"
    if query_params:
        url = f"{url}?{build_query_string(query_params, encode=encode)}"
    return url
