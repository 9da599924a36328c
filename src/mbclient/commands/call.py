"""Call command -- perform one API call from the shell.

Example::

    mbclient call GET card/1 --expect 200
    mbclient call GET card --param f=all --param model_type=dataset
    mbclient call POST card --body '{"name": "My Card"}' \\
        --email rasta@metabase.com --password-source env:MB_PASSWORD
"""

from __future__ import annotations

import json
from typing import Any, Optional

import typer

from mbclient.output import error


def _parse_params(raw: Optional[list[str]]) -> dict[str, str]:
    params: dict[str, str] = {}
    for item in raw or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            error(f"Query parameter must be key=value, got: {item}")
            raise typer.Exit(code=2)
        params[key] = value
    return params


def _parse_body(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if raw is None:
        return None
    try:
        body = json.loads(raw)
    except ValueError as exc:
        error(f"--body is not valid JSON: {exc}")
        raise typer.Exit(code=2) from None
    if not isinstance(body, dict):
        error("--body must be a JSON object")
        raise typer.Exit(code=2)
    return body


def call_command(
    method: str = typer.Argument(help="HTTP method: GET, POST, PUT or DELETE."),
    path: str = typer.Argument(help="Path relative to the URL prefix, e.g. card/1."),
    expect: Optional[int] = typer.Option(
        None, "--expect", "-e", help="Fail unless the response has this status code."
    ),
    body: Optional[str] = typer.Option(
        None, "--body", "-b", help="JSON object sent as the request body."
    ),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-P", help="Query parameter as key=value (repeatable)."
    ),
    email: Optional[str] = typer.Option(
        None, "--email", help="Log in as this user before the call."
    ),
    password_source: str = typer.Option(
        "prompt",
        "--password-source",
        help="Password source: env:VAR, file:/path, prompt, or a literal value.",
    ),
    url_prefix: Optional[str] = typer.Option(
        None, "--url-prefix", help="Override the configured URL prefix."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
) -> None:
    """Perform one API call and print the response body.

    The ``METHOD URL STATUS`` line is written to stderr and the body to
    stdout, so the output can be piped into other tools.

    Raises:
        typer.Exit: With the error's exit code on usage errors, status
            mismatches, and connection failures.
    """
    from mbclient.client import api_call
    from mbclient.client.response import format_api_response
    from mbclient.config import resolve_config, resolve_credential
    from mbclient.exceptions import MbClientError

    query_params = _parse_params(param)
    json_body = _parse_body(body)

    try:
        config = resolve_config(cli_url_prefix=url_prefix, cli_timeout=timeout)
        credentials = None
        if email is not None:
            credentials = {
                "email": email,
                "password": resolve_credential(password_source),
            }
        response = api_call(
            method,
            path,
            credentials=credentials,
            expected_status=expect,
            body=json_body,
            query_params=query_params or None,
            config=config,
        )
    except MbClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_api_response(response)
