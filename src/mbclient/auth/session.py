"""Email/password session login.

:class:`SessionAuthenticator` posts credentials to the login endpoint
(``session`` by default) and extracts the session token from the JSON
response. A failed login is never raised: it is reported as a warning and
the caller's request continues without a session header.

Malformed credentials are a different matter -- they indicate a bug in the
calling code and raise :class:`~mbclient.exceptions.InvalidUsageError`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from pydantic import ValidationError

from mbclient.exceptions import ConnectionError_, InvalidUsageError, StatusMismatchError
from mbclient.models import Credentials, HTTPMethod, describe_validation_error
from mbclient.output import get_output

if TYPE_CHECKING:
    from mbclient.client.sync_client import ApiClient

logger = logging.getLogger(__name__)

CredentialsLike = Union[Credentials, Mapping[str, Any]]


class AuthResult:
    """Headers produced by a login, to be merged into an outgoing request.

    An empty result means the request goes out unauthenticated.

    Example::

        result = AuthResult(headers={"X-METABASE-SESSION": "f1d4..."})
    """

    def __init__(self, headers: dict[str, str] | None = None):
        self.headers = headers or {}

    def __bool__(self) -> bool:
        return bool(self.headers)


def coerce_credentials(credentials: CredentialsLike) -> Credentials:
    """Validate *credentials* into a :class:`~mbclient.models.Credentials`.

    Accepts a ``Credentials`` instance or any mapping with non-empty string
    ``email`` and ``password`` entries.

    Raises:
        InvalidUsageError: If either entry is missing, empty, or not a string.
    """
    if isinstance(credentials, Credentials):
        return credentials
    if not isinstance(credentials, Mapping):
        raise InvalidUsageError(
            f"Credentials must be a mapping with 'email' and 'password', "
            f"got {type(credentials).__name__}"
        )
    try:
        return Credentials.model_validate(dict(credentials))
    except ValidationError as exc:
        raise InvalidUsageError(
            f"Invalid credentials: {describe_validation_error(exc)}"
        ) from exc


class SessionAuthenticator:
    """Obtain session tokens by logging in through an :class:`ApiClient`.

    The login request is issued without credentials, so it never recurses
    into another login. Tokens are not cached: every authenticated call
    logs in again.

    Args:
        client: The open client whose config and transport are used.
    """

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def authenticate(self, credentials: CredentialsLike) -> Optional[str]:
        """Log in and return the session token, or ``None`` on failure.

        Args:
            credentials: Email and password of the user to log in as.

        Returns:
            The token string from the login response, or ``None`` when the
            server rejects the login, cannot be reached, or answers with a
            body that carries no token.

        Raises:
            InvalidUsageError: If *credentials* are malformed.
        """
        creds = coerce_credentials(credentials)
        config = self._client.config

        try:
            response = self._client.request(
                HTTPMethod.POST,
                config.session_path,
                expected_status=200,
                body=creds.model_dump(),
            )
        except (StatusMismatchError, ConnectionError_) as exc:
            logger.debug("Session login failed: %s", exc)
            self._report_failure(creds.email)
            return None

        token = None
        if isinstance(response.body, dict):
            token = response.body.get(config.session_token_field)
        if isinstance(token, bool) or not isinstance(token, (str, int)) or token == "":
            logger.debug(
                "Session response has no usable '%s' field", config.session_token_field
            )
            self._report_failure(creds.email)
            return None
        return str(token)

    def auth_result(self, credentials: CredentialsLike) -> AuthResult:
        """Log in and return the session header to attach, if any."""
        token = self.authenticate(credentials)
        if token is None:
            return AuthResult()
        return AuthResult(headers={self._client.config.session_header: token})

    @staticmethod
    def _report_failure(email: str) -> None:
        get_output().warning(
            f"Failed to authenticate with email: {email}. Does the user exist? "
            "Continuing without a session."
        )
