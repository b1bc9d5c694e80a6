"""Terminal output for the discogen CLI.

Two streams, two purposes:

* **stdout** carries results only: generated package directories, API
  listings and inspection tables.  Scripts pipe it.
* **stderr** carries everything a person reads while a command runs:
  status lines, warnings, errors, and records from the ``discogen``
  logger tree.

Results are printed as Rich tables and highlighted JSON on a terminal, as
tab-separated text when piped, or as JSON with ``--json``.  Colour is off
under ``--no-color``, ``NO_COLOR`` and ``TERM=dumb``.

The CLI callback builds one :class:`OutputManager`, installs it with
:func:`set_output`, and hands it to :func:`configure_logging`.  Commands
then use the module-level helpers (:func:`print_table`, :func:`error`, ...).
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

LOGGER_NAME = "discogen"


class OutputFormat(str, Enum):
    """How results on stdout are rendered.

    ``AUTO`` becomes ``RICH`` on a colour-capable terminal and ``PLAIN``
    everywhere else.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Holds the output preferences of one CLI invocation.

    Args:
        format: Requested result format.
        no_color: Turn off colour and markup on both streams.
        quiet: Hide status lines; warnings and errors are still shown.
        verbose: Show debug lines and debug-level log records.
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
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        """Console that diagnostics and log records are written to."""
        return self._stderr

    # -- results (stdout) ---------------------------------------------------

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_result(self, data: Any) -> None:
        """Print a mapping or list, e.g. the effective configuration.

        Plain mode prints ``key<TAB>value`` per mapping entry and one line per
        list item.
        """
        if self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
            return
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.JSON:
            self.print_data(text)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows under *headers*.

        JSON mode emits one object per row keyed by header; plain mode emits
        a tab-separated header line followed by the rows.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # -- diagnostics (stderr) -----------------------------------------------

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnose(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnose(message, style="green")

    def progress(self, message: str) -> None:
        """Status line shown only when a person is watching the terminal."""
        if not self._quiet and _is_tty():
            self._diagnose(message, style="dim")

    def warning(self, message: str) -> None:
        self._diagnose(message, label="Warning:", label_style="yellow")

    def error(self, message: str) -> None:
        self._diagnose(message, label="Error:", label_style="bold red")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnose(message, label="[debug]", style="dim")

    def _diagnose(
        self,
        message: str,
        label: str = "",
        style: str = "",
        label_style: str = "",
    ) -> None:
        if self._no_color:
            text = f"{label} {message}" if label else message
            print(text, file=sys.stderr, flush=True)
            return
        text = Text()
        if label:
            text.append(label, style=label_style or style).append(" ")
        text.append(message, style=style)
        self._stderr.print(text, highlight=False, soft_wrap=True)


# ---------------------------------------------------------------------------
# Environment probes
# ---------------------------------------------------------------------------


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value) or ``TERM=dumb`` turns colour off."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(output: OutputManager) -> None:
    """Route the ``discogen`` logger tree to *output*'s stderr console.

    The core modules log at debug level (schemas registered, names issued,
    files written); those records appear with ``--verbose``.  Otherwise only
    warnings, such as skipped nested resources, are shown.  A handler from
    an earlier call is replaced.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for old in [h for h in logger.handlers if getattr(h, "_discogen", False)]:
        logger.removeHandler(old)
    level = logging.DEBUG if output.is_verbose else logging.WARNING
    handler = RichHandler(
        console=output.stderr_console,
        show_time=False,
        show_path=output.is_verbose,
        markup=False,
    )
    handler._discogen = True  # type: ignore[attr-defined]
    handler.setLevel(level)
    logger.setLevel(level)
    logger.addHandler(handler)


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (tests swap stdout between runs)."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_result(data: Any) -> None:
    get_output().print_result(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def progress(message: str) -> None:
    get_output().progress(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
