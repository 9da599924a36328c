"""Where mbclient's settings come from.

A call needs one :class:`~mbclient.models.ClientConfig`. It is assembled
from up to five layers, highest first:

1. ``--url-prefix`` / ``--timeout`` on the command line,
2. ``MBCLIENT_URL_PREFIX`` / ``MBCLIENT_TIMEOUT`` in the environment,
3. ``./mbclient.json`` next to the code being tested,
4. ``config.json`` in the user config directory (``mbclient config set``),
5. the model defaults.

Library callers rarely see the layers: :func:`get_default_config`
resolves them once per process, and :func:`set_url_prefix` points the
REPL at another server without touching any file.

The user config directory follows XDG on Linux/BSD and is
``~/.mbclient/`` elsewhere.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Optional

from mbclient.exceptions import ConfigError
from mbclient.models import ClientConfig

_APP_NAME = "mbclient"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "mbclient.json"

ENV_URL_PREFIX = "MBCLIENT_URL_PREFIX"
ENV_TIMEOUT = "MBCLIENT_TIMEOUT"


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: str, fallback: str) -> Path:
    """Return (and create) an application directory.

    On XDG platforms this is ``$<xdg_var>/mbclient``, with *xdg_default*
    (relative to home) standing in for an unset variable. Elsewhere it is
    *fallback* under ``~/.mbclient``.
    """
    if _is_xdg_platform():
        base = os.environ.get(xdg_var) or str(Path.home() / xdg_default)
        path = Path(base) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``~/.config/mbclient`` on Linux/BSD, ``~/.mbclient`` elsewhere."""
    return _app_dir("XDG_CONFIG_HOME", ".config", "")


def get_data_dir() -> Path:
    """Directory for crash logs.

    ``~/.local/share/mbclient`` on Linux/BSD, ``~/.mbclient/logs`` elsewhere.
    """
    return _app_dir("XDG_DATA_HOME", ".local/share", "logs")


# --- Files ---


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* through a sibling temp file and ``os.replace``.

    If anything fails the temp file is removed and *path* is untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> ClientConfig:
    """Load the user config, or the defaults when there is none.

    Raises:
        ConfigError: If the file is not valid JSON or holds a bad value.
    """
    path = _global_config_path()
    if not path.is_file():
        return ClientConfig()
    data = _read_json(path, "config")
    try:
        return ClientConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_global_config(config: ClientConfig) -> Path:
    """Write *config* as the user config and return the file path."""
    path = _global_config_path()
    _atomic_write(path, json.dumps(config.model_dump(mode="json"), indent=2) + "\n")
    return path


def reset_global_config() -> bool:
    """Delete the user config. Returns ``False`` if there was none."""
    path = _global_config_path()
    if not path.is_file():
        return False
    path.unlink()
    return True


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./mbclient.json``, a partial config checked in beside a test suite.

    Returns:
        The JSON object, or ``None`` if there is no such file.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


# --- Layering ---

# env var -> (config field, parser, what the value must be)
_ENV_OVERRIDES: dict[str, tuple[str, Callable[[str], Any], str]] = {
    ENV_URL_PREFIX: ("url_prefix", str, "a URL prefix"),
    ENV_TIMEOUT: ("timeout", float, "a number of seconds"),
}


def _env_layer() -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for var, (field, parse, kind) in _ENV_OVERRIDES.items():
        raw = os.environ.get(var)
        if not raw:
            continue
        try:
            layer[field] = parse(raw)
        except ValueError:
            raise ConfigError(f"{var} must be {kind}, got: {raw}") from None
    return layer


def resolve_config(
    cli_url_prefix: Optional[str] = None,
    cli_timeout: Optional[float] = None,
) -> ClientConfig:
    """Merge every layer into the effective config.

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    cli_layer = {
        field: value
        for field, value in (("url_prefix", cli_url_prefix), ("timeout", cli_timeout))
        if value is not None
    }
    data = load_global_config().model_dump()
    for layer in (load_project_config() or {}, _env_layer(), cli_layer):
        data.update(layer)
    try:
        return ClientConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


# --- Process-wide default ---

_default_config: Optional[ClientConfig] = None
_default_lock = threading.Lock()


def get_default_config() -> ClientConfig:
    """Return the process-wide default config, resolving it on first use."""
    global _default_config
    with _default_lock:
        if _default_config is None:
            _default_config = resolve_config()
        return _default_config


def set_default_config(config: ClientConfig) -> None:
    """Install *config* as the process-wide default."""
    global _default_config
    with _default_lock:
        _default_config = config


def set_url_prefix(url_prefix: str) -> ClientConfig:
    """Replace only the URL prefix of the process-wide default config.

    Example::

        set_url_prefix("http://localhost:3001/api/")
    """
    config = get_default_config().model_copy(update={"url_prefix": url_prefix})
    set_default_config(config)
    return config


def reset_default_config() -> None:
    """Forget the process-wide default so the next call re-resolves it."""
    global _default_config
    with _default_lock:
        _default_config = None


# --- Passwords for the CLI ---


def _secret_from_env(name: str) -> str:
    value = os.environ.get(name)
    if value is None:
        raise ConfigError(f"Environment variable '{name}' is not set")
    return value


def _secret_from_file(name: str) -> str:
    path = Path(name).expanduser()
    if not path.is_file():
        raise ConfigError(f"Password file not found: {path}")
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigError(f"Cannot read password file {path}: {exc}") from exc


_SECRET_SOURCES: dict[str, Callable[[str], str]] = {
    "env": _secret_from_env,
    "file": _secret_from_file,
}


def resolve_credential(source: str) -> str:
    """Turn a ``--password-source`` value into the password.

    ``env:VAR`` reads an environment variable, ``file:PATH`` reads a file
    (trailing whitespace stripped), and ``prompt`` asks on the terminal.
    Any other value is the password itself.

    Raises:
        ConfigError: If the variable, the file, or a terminal is missing.
    """
    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError("Cannot prompt for a password: stdin is not a TTY")
        return getpass.getpass("Password: ")

    kind, sep, name = source.partition(":")
    reader = _SECRET_SOURCES.get(kind) if sep else None
    return reader(name) if reader is not None else source
