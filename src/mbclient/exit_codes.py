"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~mbclient.exceptions.MbClientError` subclass.
Shell scripts wrapping ``mbclient call`` can inspect the exit code to
tell a status-code mismatch from a refused connection without parsing
stderr.

Example::

    $ mbclient call GET card/1 --expect 200
    $ echo $?
    5   # EXIT_STATUS_MISMATCH -- the server answered with another status
"""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The call was made with an invalid method, path, body, or credentials."""

EXIT_STATUS_MISMATCH = 5
"""The API answered with a status code other than the expected one."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
