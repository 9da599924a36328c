"""Tests for the ``mbclient`` command line."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

import mbclient.client
from mbclient import __version__
from mbclient.app import app, main
from mbclient.config import get_data_dir, load_global_config, save_global_config
from mbclient.exceptions import StatusMismatchError
from mbclient.models import ClientConfig


runner = CliRunner()


@pytest.fixture
def server(isolated_config: Path, monkeypatch: pytest.MonkeyPatch):
    """Route ``mbclient call`` through a MockTransport.

    Returns a list that collects every request the fake server receives;
    set ``server.handler`` to control the responses.
    """

    class FakeServer:
        def __init__(self) -> None:
            self.requests: list[httpx.Request] = []
            self.handler = lambda request: httpx.Response(200, json={"ok": True})

        def __call__(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.handler(request)

    fake = FakeServer()
    original = mbclient.client.api_call

    def api_call(*args: Any, **kwargs: Any):
        kwargs["transport"] = httpx.MockTransport(fake)
        return original(*args, **kwargs)

    monkeypatch.setattr("mbclient.client.api_call", api_call)
    return fake


class TestRoot:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"mbclient {__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "call" in result.output
        assert "config" in result.output

    def test_json_and_plain_conflict(self, server) -> None:
        result = runner.invoke(app, ["--json", "--plain", "call", "GET", "card"])
        assert result.exit_code == 2
        assert server.requests == []


class TestMain:
    def test_client_error_maps_to_exit_code(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def failing_app() -> None:
            raise StatusMismatchError("GET", "http://mb.test/api/card", 200, 404)

        monkeypatch.setattr("mbclient.app.app", failing_app)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 5

    def test_unexpected_error_writes_crash_log(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def failing_app() -> None:
            raise RuntimeError("boom")

        monkeypatch.setattr("mbclient.app.app", failing_app)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1

        logs = list(get_data_dir().glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: boom" in logs[0].read_text(encoding="utf-8")


class TestCallCommand:
    def test_get_prints_json_body(self, server) -> None:
        server.handler = lambda r: httpx.Response(200, json={"id": 1, "name": "My Card"})

        result = runner.invoke(app, ["--json", "call", "GET", "card/1", "--expect", "200"])

        assert result.exit_code == 0, result.output
        assert '"name": "My Card"' in result.output
        assert str(server.requests[0].url) == "http://localhost:3000/api/card/1"

    def test_post_with_body_and_params(self, server) -> None:
        result = runner.invoke(
            app,
            [
                "--json",
                "call",
                "post",
                "card",
                "--body",
                '{"name": "My Card"}',
                "--param",
                "org=1",
                "--param",
                "f=all",
                "--url-prefix",
                "http://mb.test/api/",
            ],
        )

        assert result.exit_code == 0, result.output
        request = server.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "http://mb.test/api/card?org=1&f=all"
        assert json.loads(request.content) == {"name": "My Card"}

    def test_status_mismatch_exit_code(self, server) -> None:
        server.handler = lambda r: httpx.Response(404, text="Not found.")

        result = runner.invoke(app, ["call", "GET", "card/9", "--expect", "200"])

        assert result.exit_code == 5
        assert "expected a status code of 200, got 404" in result.output
        assert "GET http://localhost:3000/api/card/9 404" in result.output

    def test_invalid_method_exit_code(self, server) -> None:
        result = runner.invoke(app, ["call", "PATCH", "card/1"])
        assert result.exit_code == 2
        assert server.requests == []

    def test_body_must_be_json_object(self, server) -> None:
        result = runner.invoke(app, ["call", "POST", "card", "--body", "[1, 2]"])
        assert result.exit_code == 2
        assert server.requests == []

    def test_body_must_be_valid_json(self, server) -> None:
        result = runner.invoke(app, ["call", "POST", "card", "--body", "{name"])
        assert result.exit_code == 2

    def test_param_must_have_equals(self, server) -> None:
        result = runner.invoke(app, ["call", "GET", "card", "--param", "org"])
        assert result.exit_code == 2

    def test_login_with_password_from_env(
        self, server, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MB_PASSWORD", "blueberries")

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/session":
                return httpx.Response(200, json={"id": "tok"})
            return httpx.Response(200, json={"email": "rasta@metabase.com"})

        server.handler = handler

        result = runner.invoke(
            app,
            [
                "call",
                "GET",
                "user/current",
                "--email",
                "rasta@metabase.com",
                "--password-source",
                "env:MB_PASSWORD",
            ],
        )

        assert result.exit_code == 0, result.output
        login, call = server.requests
        assert json.loads(login.content) == {
            "email": "rasta@metabase.com",
            "password": "blueberries",
        }
        assert call.headers["x-metabase-session"] == "tok"

    def test_missing_password_env(self, server, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MB_PASSWORD", raising=False)
        result = runner.invoke(
            app,
            ["call", "GET", "card", "--email", "a@b.c", "--password-source", "env:MB_PASSWORD"],
        )
        assert result.exit_code == 1
        assert server.requests == []

    def test_connection_error_exit_code(self, server) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        server.handler = handler
        result = runner.invoke(app, ["call", "GET", "card"])
        assert result.exit_code == 6

    def test_unreadable_body_exit_code(self, server) -> None:
        server.handler = lambda r: httpx.Response(
            200,
            headers={"content-encoding": "gzip"},
            stream=httpx.ByteStream(b"definitely not gzip"),
        )
        result = runner.invoke(app, ["call", "GET", "card"])
        assert result.exit_code == 6

    def test_uses_saved_url_prefix(self, server) -> None:
        save_global_config(ClientConfig(url_prefix="http://saved.test/api/"))
        result = runner.invoke(app, ["call", "GET", "database"])
        assert result.exit_code == 0, result.output
        assert str(server.requests[0].url) == "http://saved.test/api/database"


class TestConfigCommands:
    def test_show(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--json", "config", "show"])
        assert result.exit_code == 0, result.output
        assert '"url_prefix": "http://localhost:3000/api/"' in result.output

    def test_set_url_prefix(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "url_prefix", "http://x.test/api/"])
        assert result.exit_code == 0, result.output
        assert load_global_config().url_prefix == "http://x.test/api/"

    def test_set_timeout_and_clear(self, isolated_config: Path) -> None:
        assert runner.invoke(app, ["config", "set", "timeout", "5"]).exit_code == 0
        assert load_global_config().timeout == 5
        assert runner.invoke(app, ["config", "set", "timeout", "none"]).exit_code == 0
        assert load_global_config().timeout is None

    def test_set_bool(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "encode_query_params", "false"])
        assert result.exit_code == 0
        assert load_global_config().encode_query_params is False

    def test_set_unknown_key(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "colour", "blue"])
        assert result.exit_code == 2

    def test_set_invalid_value(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "timeout", "soon"])
        assert result.exit_code == 2
        assert load_global_config().timeout == 30.0

    def test_reset(self, isolated_config: Path) -> None:
        save_global_config(ClientConfig(timeout=1))
        result = runner.invoke(app, ["config", "reset"])
        assert result.exit_code == 0
        assert load_global_config() == ClientConfig()
