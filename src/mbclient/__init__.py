"""mbclient -- an HTTP client for calling a Metabase-style JSON API from tests and the REPL.

Each call builds a URL from a configurable prefix, optionally logs in to
obtain a session token, sends one JSON request, optionally asserts the
status code, and decodes the JSON response::

    from mbclient import api_call

    api_call("GET", "card/1", expected_status=200)
    api_call("POST", "card", body={"name": "My Card"},
             credentials={"email": "rasta@metabase.com", "password": "blueberries"})

Modules:
    client: :class:`ApiClient` and :func:`api_call`.
    auth: Session login.
    urls: URL and query-string construction.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr output system used for diagnostics.
    app: Typer command-line entry point.
"""

__version__ = "0.1.0"

from mbclient.client import ApiClient, api_call  # noqa: E402
from mbclient.config import set_url_prefix  # noqa: E402
from mbclient.models import ApiResponse, ClientConfig, Credentials, HTTPMethod  # noqa: E402

__all__ = [
    "ApiClient",
    "ApiResponse",
    "ClientConfig",
    "Credentials",
    "HTTPMethod",
    "api_call",
    "set_url_prefix",
]
