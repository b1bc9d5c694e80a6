"""Built-in CLI sub-commands for discogen.

This package groups the Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~discogen.commands.generate` -- generate client packages.
* :mod:`~discogen.commands.apis` -- list the APIs in the directory.
* :mod:`~discogen.commands.inspect` -- show the resolved schemas, call
  builders and scopes of a document without writing anything.
* :mod:`~discogen.commands.config` -- view and modify global settings.
* :mod:`~discogen.commands.cache` -- report on or empty the document cache.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``inspect``, ``config`` and ``cache``) or a plain
callback function registered directly on the root app (for single commands
like ``generate``).
"""

from __future__ import annotations

from typing import NoReturn

import typer

from discogen.exceptions import DiscogenError
from discogen.output import error


def abort(exc: DiscogenError) -> NoReturn:
    """Report *exc* on stderr and exit with its exit code."""
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)
