"""Synchronous API client with session login, status assertion, and JSON decoding.

This module provides :class:`ApiClient`, the blocking client used from
tests and REPL sessions to call a Metabase-style JSON API. It wraps
:class:`httpx.Client` and layers on:

- **URL building** -- relative paths are appended to the configured
  ``url_prefix`` and query parameters are joined in caller order
  (:func:`~mbclient.urls.build_url`).
- **Session login** -- when credentials are passed, a login call obtains a
  token that is sent in the ``X-METABASE-SESSION`` header of that request
  only. A failed login downgrades the call to unauthenticated.
- **Status assertion** -- an ``expected_status`` that does not match
  raises :class:`~mbclient.exceptions.StatusMismatchError`.
- **JSON decoding** -- response bodies are decoded as JSON, falling back
  to the raw text (:func:`~mbclient.client.response.try_parse_json`).

Every call performs exactly one request (two with login). There is no
retry, no caching, and no streaming.

Example::

    with ApiClient() as client:
        client.post("card", expected_status=200, body={"name": "My Card"})

    api_call("GET", "card", query_params={"f": "all"})
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from mbclient.auth.session import CredentialsLike, SessionAuthenticator
from mbclient.client.response import try_parse_json
from mbclient.config import get_default_config
from mbclient.exceptions import ConnectionError_, InvalidUsageError, StatusMismatchError
from mbclient.models import (
    ApiRequest,
    ApiResponse,
    ClientConfig,
    HTTPMethod,
    describe_validation_error,
)
from mbclient.output import get_output
from mbclient.urls import build_url

logger = logging.getLogger(__name__)

MethodLike = Union[HTTPMethod, str]


def _raise_for_status(response: httpx.Response) -> None:
    """Response hook installed when ``raise_on_error_status`` is enabled."""
    response.read()
    response.raise_for_status()


class ApiClient:
    """Synchronous client for API calls.

    Must be used as a context manager so that the underlying
    :class:`httpx.Client` is opened and closed around the calls.

    Args:
        config: Connection settings. Defaults to the process-wide config
            from :func:`~mbclient.config.get_default_config`.
        transport: Optional :mod:`httpx` transport, e.g.
            :class:`httpx.MockTransport` in tests.

    Example::

        with ApiClient(ClientConfig(url_prefix="http://localhost:3001/api/")) as client:
            card = client.get("card/1", expected_status=200).body
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config if config is not None else get_default_config()
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._authenticator = SessionAuthenticator(self)

    @property
    def config(self) -> ClientConfig:
        """The immutable settings this client was created with."""
        return self._config

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ApiClient:
        event_hooks: dict[str, list[Any]] = {}
        if self._config.raise_on_error_status:
            event_hooks["response"] = [_raise_for_status]
        self._client = httpx.Client(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            transport=self._transport,
            event_hooks=event_hooks,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: MethodLike,
        path: str,
        *,
        credentials: Optional[CredentialsLike] = None,
        expected_status: Optional[int] = None,
        body: Optional[Mapping[str, Any]] = None,
        query_params: Optional[Mapping[Any, Any]] = None,
    ) -> ApiResponse:
        """Perform one API call and return its status and decoded body.

        Args:
            method: ``GET``, ``POST``, ``PUT`` or ``DELETE``, as an
                :class:`~mbclient.models.HTTPMethod` or a string in any case.
            path: Path relative to ``url_prefix``, e.g. ``card/1/favorite``.
            credentials: Optional email/password to log in with first.
            expected_status: When set, a response with any other status
                raises :class:`~mbclient.exceptions.StatusMismatchError`.
            body: Optional mapping sent as the JSON request body.
            query_params: Optional query parameters, kept in caller order.

        Returns:
            An :class:`~mbclient.models.ApiResponse`.

        Raises:
            InvalidUsageError: On an unsupported method, a non-string path,
                a non-integer expected status, or a body that is not a
                JSON-serialisable mapping with string keys. Raised before
                any request is sent.
            StatusMismatchError: When ``expected_status`` does not match.
            ConnectionError_: When the server cannot be reached or its
                response cannot be read (e.g. a corrupt gzip body).
        """
        api_request = self._validate(method, path, expected_status, body, query_params)
        content = self._encode_body(api_request.body)

        headers: dict[str, str] = {"Accept": "application/json"}
        if content is not None:
            headers["Content-Type"] = "application/json"

        if credentials is not None:
            auth = self._authenticator.auth_result(credentials)
            headers.update(auth.headers)
            logger.debug("Session header attached: %s", bool(auth))

        url = build_url(
            self._config.url_prefix,
            api_request.path,
            api_request.query_params,
            encode=self._config.encode_query_params,
        )
        method_name = api_request.method.value

        response = self._send(method_name, url, headers, content)
        status = response.status_code
        parsed = try_parse_json(response.text)

        output = get_output()
        output.request_line(method_name, url, status)

        expected = api_request.expected_status
        if expected is not None and status != expected:
            output.debug(f"Response body: {response.text}")
            raise StatusMismatchError(method_name, url, expected, status, parsed.value)

        return ApiResponse(status=status, body=parsed.value, is_json=parsed.is_json)

    def get(self, path: str, **kwargs: Any) -> ApiResponse:
        """Send a GET request. Keyword arguments are forwarded to :meth:`request`."""
        return self.request(HTTPMethod.GET, path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> ApiResponse:
        """Send a POST request. Keyword arguments are forwarded to :meth:`request`."""
        return self.request(HTTPMethod.POST, path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> ApiResponse:
        """Send a PUT request. Keyword arguments are forwarded to :meth:`request`."""
        return self.request(HTTPMethod.PUT, path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> ApiResponse:
        """Send a DELETE request. Keyword arguments are forwarded to :meth:`request`."""
        return self.request(HTTPMethod.DELETE, path, **kwargs)

    def authenticate(self, credentials: CredentialsLike) -> Optional[str]:
        """Log in and return the session token, or ``None`` if login failed.

        See :meth:`~mbclient.auth.session.SessionAuthenticator.authenticate`.
        """
        return self._authenticator.authenticate(credentials)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate(
        method: Any,
        path: Any,
        expected_status: Any,
        body: Any,
        query_params: Any,
    ) -> ApiRequest:
        if isinstance(method, str) and method.upper() not in HTTPMethod.__members__:
            raise InvalidUsageError(
                f"Unsupported HTTP method {method!r}; "
                f"expected one of {', '.join(HTTPMethod.__members__)}"
            )
        try:
            return ApiRequest(
                method=method,
                path=path,
                expected_status=expected_status,
                body=body,
                query_params=query_params,
            )
        except ValidationError as exc:
            raise InvalidUsageError(
                f"Invalid API call: {describe_validation_error(exc)}"
            ) from exc

    @staticmethod
    def _encode_body(body: Optional[dict[str, Any]]) -> Optional[str]:
        if body is None:
            return None
        try:
            return json.dumps(body)
        except (TypeError, ValueError) as exc:
            raise InvalidUsageError(f"Request body is not JSON-serialisable: {exc}") from exc

    def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        content: Optional[str],
    ) -> httpx.Response:
        """Issue the request, recovering the response from status-raising transports."""
        assert self._client is not None, "Client not initialised -- use as context manager"

        try:
            return self._client.request(method, url, headers=headers, content=content)
        except httpx.HTTPStatusError as exc:
            logger.debug("Recovered response from %s", type(exc).__name__)
            return exc.response
        except httpx.InvalidURL as exc:
            raise InvalidUsageError(f"Invalid URL {url!r}: {exc}") from exc
        except httpx.RequestError as exc:
            # Includes DecodingError and TooManyRedirects, which are not TransportErrors.
            get_output().request_line(method, url)
            raise ConnectionError_(f"{method} {url} failed: {exc}") from exc


def api_call(
    method: MethodLike,
    path: str,
    *,
    credentials: Optional[CredentialsLike] = None,
    expected_status: Optional[int] = None,
    body: Optional[Mapping[str, Any]] = None,
    query_params: Optional[Mapping[Any, Any]] = None,
    config: Optional[ClientConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> ApiResponse:
    """Perform a single API call with a short-lived :class:`ApiClient`.

    Convenience wrapper for REPL use; see :meth:`ApiClient.request` for the
    arguments and errors.

    Example::

        api_call("GET", "card/1", expected_status=200)
        api_call("GET", "card", query_params={"org": 1})
        api_call("POST", "card", body={"name": "My Card"},
                 credentials={"email": "crowberto@metabase.com", "password": "blackjet"})
    """
    with ApiClient(config, transport=transport) as client:
        return client.request(
            method,
            path,
            credentials=credentials,
            expected_status=expected_status,
            body=body,
            query_params=query_params,
        )
