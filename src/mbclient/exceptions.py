"""Exception hierarchy for mbclient.

All exceptions inherit from :class:`MbClientError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`mbclient.exit_codes`.
The command-line entry point in :func:`mbclient.app.main` catches
``MbClientError`` and exits with the appropriate code; library callers
(tests, REPL sessions) simply see the exception.

Subclass hierarchy::

    MbClientError (exit 1)
    +-- InvalidUsageError    (exit 2)
    +-- StatusMismatchError  (exit 5)
    +-- ConnectionError_     (exit 6)
    +-- ConfigError          (exit 1)
"""

from __future__ import annotations

from typing import Any

from mbclient.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_STATUS_MISMATCH,
)


class MbClientError(Exception):
    """Base exception for all mbclient errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(MbClientError):
    """Raised when a call is made with an invalid method, path, body, or credentials.

    This signals a bug in the calling code and is never recovered from.
    """

    exit_code = EXIT_INVALID_USAGE


class StatusMismatchError(MbClientError):
    """Raised when a response status differs from the caller's expected status.

    The offending request and response are kept on the exception so that a
    failing test can report them.

    Args:
        method: Upper-case HTTP method name.
        url: Full request URL.
        expected: The status code the caller asserted.
        actual: The status code the server returned.
        body: The response body (parsed JSON or raw text).
    """

    exit_code = EXIT_STATUS_MISMATCH

    def __init__(
        self,
        method: str,
        url: str,
        expected: int,
        actual: int,
        body: Any = None,
    ):
        super().__init__(
            f"{method} {url} expected a status code of {expected}, got {actual}"
        )
        self.method = method
        self.url = url
        self.expected = expected
        self.actual = actual
        self.body = body


class ConnectionError_(MbClientError):
    """Raised when a request fails below the HTTP status level.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(MbClientError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
