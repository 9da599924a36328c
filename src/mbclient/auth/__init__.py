"""Session authentication for mbclient.

Authentication is a login call made through the same
:class:`~mbclient.client.sync_client.ApiClient` that issues the main
request. The token it returns is attached as the session header on that
one request and then discarded.

Classes:
    :class:`AuthResult` -- headers to merge into the main request.
    :class:`SessionAuthenticator` -- performs the login call.
"""

from mbclient.auth.session import AuthResult, SessionAuthenticator, coerce_credentials

__all__ = ["AuthResult", "SessionAuthenticator", "coerce_credentials"]
