"""The ``discogen`` command line.

Sub-commands:

``generate``
    Write client modules for one document, one directory entry, or every
    API a directory lists.
``list``
    Show the APIs a discovery directory offers.
``inspect``
    Preview the records, call builders and scopes a document produces.
``cache``
    Report on or empty the fetched-document cache.
``config``
    Show and edit the persisted defaults.

:func:`main` is the console-script entry point.  A :class:`DiscogenError`
that escapes a command ends the process with that error's exit code; any
other exception is written to ``<data dir>/logs/crash-<time>.log``.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from discogen import __version__
from discogen.commands.apis import list_command
from discogen.commands.cache import cache_app
from discogen.commands.config import config_app
from discogen.commands.generate import generate_command
from discogen.commands.inspect import inspect_app
from discogen.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="discogen",
    help="Generate typed Python client modules from API discovery documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("generate")(generate_command)
app.command("list")(list_command)
app.add_typer(inspect_app, name="inspect", help="Preview what a document generates.")
app.add_typer(config_app, name="config", help="Show and edit persisted defaults.")
app.add_typer(cache_app, name="cache", help="Inspect or empty the document cache.")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"discogen {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Show version and exit."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON."),
    plain_output: bool = typer.Option(
        False, "--plain", help="Print results as tab-separated text."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print results and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log naming and generation decisions."
    ),
) -> None:
    """Set up output and logging before any sub-command runs.

    ``--json`` takes precedence over ``--plain``.
    """
    from discogen.output import OutputFormat, OutputManager, configure_logging, set_output

    if json_output:
        requested = OutputFormat.JSON
    elif plain_output:
        requested = OutputFormat.PLAIN
    else:
        requested = OutputFormat.AUTO

    manager = OutputManager(requested, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(manager)
    configure_logging(manager)


# ---------------------------------------------------------------------------
# Process-level handling
# ---------------------------------------------------------------------------


def _cancel() -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_CANCELLED)


def _setup_signal_handlers() -> None:
    """Make Ctrl-C stop a running batch without a traceback."""

    def _on_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
        _cancel()

    signal.signal(signal.SIGINT, _on_sigint)


def _write_crash_log(exc: BaseException) -> Path:
    """Save the traceback of *exc* under the data directory."""
    from discogen.config import get_data_dir

    log_path = get_data_dir() / "logs" / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
    log_path.write_text(f"discogen {__version__}\n" + "".join(lines))
    return log_path


def main() -> None:
    """Run the CLI and turn stray exceptions into exit codes."""
    from discogen.exceptions import DiscogenError
    from discogen.output import error

    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        _cancel()
    except DiscogenError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Traceback saved to {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
