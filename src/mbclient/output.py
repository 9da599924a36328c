"""Where mbclient writes what it prints.

Response bodies go to stdout and nothing else does, so ``mbclient call``
can be piped into ``jq``. Everything else goes to stderr: the
``METHOD URL STATUS`` line written for every call, login warnings,
errors, and ``--verbose`` debug output.

Diagnostics are built as :class:`rich.text.Text` objects rather than
markup strings. Response bodies and URLs routinely contain square
brackets, and those must never be read as Rich tags. Lines are printed
with ``soft_wrap`` so a long URL stays on one line when stderr is a file.

:class:`OutputManager` holds the settings chosen on the command line. The
module-level functions delegate to a process-wide instance that the CLI
installs with :func:`set_output` and library callers get lazily.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text


class OutputFormat(str, Enum):
    """How response bodies are written to stdout.

    ``AUTO`` becomes ``RICH`` on a colour-capable terminal and ``PLAIN``
    everywhere else.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _status_style(status: int) -> str:
    if status >= 500:
        return "bold red"
    if status >= 400:
        return "red"
    if status >= 300:
        return "yellow"
    return "green"


def body_lines(data: Any, fmt: OutputFormat) -> Iterator[str]:
    """Yield the stdout lines for a response body in a non-Rich format.

    Raw text bodies are yielded untouched in every format. In ``PLAIN``
    a JSON object becomes ``key<TAB>value`` rows and a list of objects
    becomes one tab-separated row per item.
    """
    if isinstance(data, str):
        yield data
    elif fmt == OutputFormat.JSON:
        yield json.dumps(data, indent=2, ensure_ascii=False, default=str)
    elif isinstance(data, dict):
        for key, value in data.items():
            yield f"{key}\t{value}"
    elif isinstance(data, list):
        for item in data:
            if isinstance(item, dict):
                yield "\t".join(str(v) for v in item.values())
            else:
                yield str(item)
    else:
        yield str(data)


class OutputManager:
    """Holds the output settings for one process.

    Args:
        format: Body format. ``AUTO`` is resolved here, once.
        no_color: Write plain text to stderr instead of styled Rich text.
        quiet: Drop the per-call line and other informational messages.
            Warnings and errors are still written.
        verbose: Also write debug messages, including the body of a
            response whose status did not match.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The resolved body format."""
        return self._format

    # --- stdout ---

    def format_response(self, data: Any) -> None:
        """Write a response body (decoded JSON or raw text) to stdout."""
        if self._format == OutputFormat.RICH and isinstance(data, (dict, list)):
            rendered = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(rendered, "json", theme="monokai", word_wrap=True))
            return
        for line in body_lines(data, self._format):
            print(line, file=sys.stdout, flush=True)

    # --- stderr ---

    def request_line(self, method: str, url: str, status: Optional[int] = None) -> None:
        """Write ``METHOD URL STATUS`` for a completed call.

        Without *status* the line is ``METHOD URL``, which is what is
        written when the server could not be reached.
        """
        if self._quiet:
            return
        line = Text(f"{method} {url}")
        if status is not None:
            line.append(" ")
            line.append(str(status), style=_status_style(status))
        self._emit(line)

    def info(self, message: str) -> None:
        """Write an informational message. Dropped in quiet mode."""
        if not self._quiet:
            self._emit(Text(message))

    def success(self, message: str) -> None:
        """Write a confirmation message. Dropped in quiet mode."""
        if not self._quiet:
            self._emit(Text(message, style="green"))

    def warning(self, message: str) -> None:
        self._emit(Text.assemble(("Warning: ", "yellow"), message))

    def error(self, message: str) -> None:
        self._emit(Text.assemble(("Error: ", "bold red"), message))

    def debug(self, message: str) -> None:
        """Write a debug message. Only shown in verbose mode."""
        if self._verbose:
            self._emit(Text(f"[debug] {message}", style="dim"))

    def _emit(self, text: Text) -> None:
        if self._no_color:
            print(text.plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(text, soft_wrap=True)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- process-wide instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the process-wide :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the process-wide instance. Used between tests."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
