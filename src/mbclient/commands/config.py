"""Config commands -- view and modify the user configuration.

Provides the ``mbclient config`` sub-command group for reading,
updating, and resetting the user's configuration file
(:class:`~mbclient.models.ClientConfig`).
"""

from __future__ import annotations

import typer

from mbclient.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Prints the config directory to stderr and the configuration, with
    environment and project overrides applied, to stdout.

    Example::

        mbclient config show --json
    """
    from mbclient.config import get_config_dir, resolve_config
    from mbclient.exceptions import ConfigError

    try:
        config = resolve_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. 'url_prefix' or 'timeout'."),
    value: str = typer.Argument(help="Value to set ('none' clears the timeout)."),
) -> None:
    """Set a configuration value.

    Booleans accept ``true/1/yes``; everything else is validated against
    :class:`~mbclient.models.ClientConfig` before saving.

    Example::

        mbclient config set url_prefix http://localhost:3001/api/
        mbclient config set timeout 5
    """
    from mbclient.config import load_global_config, save_global_config
    from mbclient.exceptions import ConfigError
    from mbclient.models import ClientConfig

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    if key not in data:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = data[key]
    coerced: object = value
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif key == "timeout" and value.lower() in ("none", "null"):
        coerced = None
    data[key] = coerced

    try:
        new_config = ClientConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset() -> None:
    """Delete the user configuration file, restoring the defaults."""
    from mbclient.config import reset_global_config

    if reset_global_config():
        success("Configuration reset to defaults")
    else:
        info("No configuration file to reset")
