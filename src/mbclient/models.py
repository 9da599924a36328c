"""Canonical Pydantic models shared across all mbclient modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration** -- serialised as JSON in the user's config directory:
    :class:`ClientConfig`.

**Call models** -- constructed fresh for every API call and never retained:
    :class:`HTTPMethod`, :class:`Credentials`, :class:`ApiRequest`, and
    :class:`ApiResponse`.

All models use Pydantic v2. Validation failures on the call models are
translated into :class:`~mbclient.exceptions.InvalidUsageError` by the
client, since they always indicate a bug in the calling code.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)


DEFAULT_URL_PREFIX = "http://localhost:3000/api/"
SESSION_HEADER = "X-METABASE-SESSION"


# --- Configuration ---


class ClientConfig(BaseModel):
    """Settings read by :class:`~mbclient.client.sync_client.ApiClient` on every call.

    Instances are frozen so that one config can be shared between threads
    without locking. To change a setting, build a new instance with
    ``config.model_copy(update={...})``.

    Loaded and saved by :func:`~mbclient.config.load_global_config` and
    :func:`~mbclient.config.save_global_config`; see
    :func:`~mbclient.config.resolve_config` for the precedence chain.

    Example::

        ClientConfig(url_prefix="http://metabase.internal:3000/api/", timeout=10)
    """

    model_config = ConfigDict(frozen=True)

    url_prefix: str = Field(
        default=DEFAULT_URL_PREFIX,
        description="Prefix prepended to every relative request path",
    )
    timeout: Optional[float] = Field(
        default=30.0, description="Request timeout in seconds (None waits forever)"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    session_header: str = Field(
        default=SESSION_HEADER, description="Header carrying the session token"
    )
    session_path: str = Field(
        default="session", description="Path of the login endpoint"
    )
    session_token_field: str = Field(
        default="id", description="Field of the login response holding the token"
    )
    encode_query_params: bool = Field(
        default=True,
        description="Percent-encode query keys and values; False inserts them verbatim",
    )
    raise_on_error_status: bool = Field(
        default=False,
        description="Have the transport raise on 4xx/5xx; the error response is recovered",
    )


# --- Call models ---


class HTTPMethod(str, enum.Enum):
    """The HTTP verbs the client can issue."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class Credentials(BaseModel):
    """Email/password pair used to obtain a session token.

    Transient: used for exactly one login request and never persisted.
    The password is excluded from ``repr`` so it does not leak into
    tracebacks or test reports.
    """

    model_config = ConfigDict(frozen=True)

    email: StrictStr = Field(min_length=1)
    password: StrictStr = Field(min_length=1, repr=False)


class ApiRequest(BaseModel):
    """A validated description of one API call.

    ``method`` accepts any casing of the verb name (``"get"``, ``"GET"``)
    as well as :class:`HTTPMethod` members. ``query_params`` keeps the
    insertion order of the mapping it was built from.

    ``body`` keys must be strings, as in a JSON object. ``{1: "a"}`` is
    rejected rather than silently sent as ``{"1": "a"}``, where it could
    collide with a real ``"1"`` key.
    """

    method: HTTPMethod
    path: StrictStr
    expected_status: Optional[StrictInt] = None
    body: Optional[dict[str, Any]] = None
    query_params: Optional[dict[Any, Any]] = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_case_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value


class ApiResponse(BaseModel):
    """Status and body of a completed call.

    ``body`` holds the decoded JSON value when ``is_json`` is true and the
    raw response text otherwise.
    """

    status: int
    body: Any = None
    is_json: bool = False


def describe_validation_error(exc: ValidationError) -> str:
    """Summarise *exc* as ``field: message`` pairs without echoing input values."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "value"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
