"""HTTP client module for mbclient.

Provides the blocking :class:`ApiClient`, a context manager wrapping
:mod:`httpx`, and :func:`api_call`, which opens a client for one call.

Example::

    from mbclient.client import api_call

    api_call("GET", "card/1", expected_status=200)
"""

from mbclient.client.sync_client import ApiClient, api_call

__all__ = ["ApiClient", "api_call"]
