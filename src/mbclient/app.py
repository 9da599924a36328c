"""The ``mbclient`` command.

Two sub-commands: ``call`` performs one API call, ``config`` edits the
user config file. The root callback turns the global output flags into
the process-wide :class:`~mbclient.output.OutputManager` before either
runs.

:func:`main` is the console-script entry point. An
:class:`~mbclient.exceptions.MbClientError` that escapes a command exits
with that error's code. Anything else is a bug: its traceback goes to a
crash log in the data directory and the process exits with 1.
"""

from __future__ import annotations

import os
import sys
import traceback
from datetime import datetime
from pathlib import Path

import typer

from mbclient import __version__
from mbclient.commands.call import call_command
from mbclient.commands.config import config_app
from mbclient.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE
from mbclient.output import OutputFormat, OutputManager, set_output


app = typer.Typer(
    name="mbclient",
    help="Call a Metabase-style JSON API from the shell.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("call")(call_command)
app.add_typer(config_app, name="config", help="Show or change the user config.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mbclient {__version__}")
        raise typer.Exit()


def _body_format(json_output: bool, plain_output: bool) -> OutputFormat:
    if json_output and plain_output:
        typer.echo("Error: --json and --plain are mutually exclusive", err=True)
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    if json_output:
        return OutputFormat.JSON
    if plain_output:
        return OutputFormat.PLAIN
    return OutputFormat.AUTO


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print response bodies as JSON."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Print response bodies as tab-separated text."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Do not print the METHOD URL STATUS line."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Also print the body of a status mismatch."
    ),
) -> None:
    """Install the output settings shared by every sub-command."""
    set_output(
        OutputManager(
            format=_body_format(json_output, plain_output),
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )


def _write_crash_log(exc: BaseException) -> Path:
    from mbclient.config import get_data_dir

    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = get_data_dir() / f"crash-{stamp}-{os.getpid()}.log"
    lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
    log_path.write_text(
        f"mbclient {__version__}\n\n{''.join(lines)}",
        encoding="utf-8",
    )
    return log_path


def main() -> None:
    """Console-script entry point; always ends in ``SystemExit``."""
    from mbclient.exceptions import MbClientError
    from mbclient.output import error

    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except MbClientError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
