"""Shared test fixtures for mbclient.

Provides fixtures for isolating configuration, resetting global state,
and building clients backed by :class:`httpx.MockTransport`. These
fixtures are discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from mbclient.config import reset_default_config
from mbclient.models import ClientConfig
from mbclient.output import OutputManager, reset_output, set_output


TEST_PREFIX = "http://mb.test/api/"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals() -> None:
    """Reset the global OutputManager and default config around every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which go stale once CliRunner restores the streams.
    """
    reset_default_config()
    yield
    reset_output()
    reset_default_config()


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> ClientConfig:
    """A client config pointing at the fake test server."""
    return ClientConfig(url_prefix=TEST_PREFIX, timeout=5)


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at subdirectories of tmp_path, clears the
    MBCLIENT_* environment variables, and changes the working directory
    to tmp_path so no project config is picked up.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("mbclient.config._is_xdg_platform", lambda: True)

    for var in ["MBCLIENT_URL_PREFIX", "MBCLIENT_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    return output
