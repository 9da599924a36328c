"""Response body decoding and display.

:func:`try_parse_json` decodes a response body into a :class:`ParsedBody`
that says explicitly whether JSON decoding succeeded; a body that is not
JSON is handed back as its raw text rather than raising. The CLI renders
the resulting :class:`~mbclient.models.ApiResponse` with
:func:`format_api_response`.
"""

from __future__ import annotations

import json
from typing import Any, NamedTuple

from mbclient.models import ApiResponse
from mbclient.output import get_output


class ParsedBody(NamedTuple):
    """Outcome of :func:`try_parse_json`.

    Attributes:
        value: The decoded JSON value, or the untouched text when
            ``is_json`` is false.
        is_json: Whether *value* came from a successful JSON decode.
    """

    value: Any
    is_json: bool


def try_parse_json(text: str) -> ParsedBody:
    """Decode *text* as JSON, falling back to the raw text.

    JSON object keys are always ``str``, so a body of ``{"id": 5}``
    yields a dict whose ``"id"`` key is reachable directly.

    Args:
        text: The decoded response body.

    Returns:
        A :class:`ParsedBody`. Empty and whitespace-only bodies are never
        treated as JSON.
    """
    if not text.strip():
        return ParsedBody(text, False)
    try:
        return ParsedBody(json.loads(text), True)
    except ValueError:
        return ParsedBody(text, False)


def extract_response_data(response: ApiResponse) -> Any:
    """Return the body to display, or ``None`` for an empty text body."""
    if not response.is_json and not response.body:
        return None
    return response.body


def format_api_response(response: ApiResponse) -> None:
    """Write the body of *response* to stdout, if it has one.

    The status is not repeated here: the client has already written it in
    the ``METHOD URL STATUS`` line on stderr.
    """
    data = extract_response_data(response)
    if data is not None:
        get_output().format_response(data)
