"""List command -- show the APIs the directory offers.

The ``ID`` column is what ``discogen generate --api`` accepts.
"""

from __future__ import annotations

from typing import Optional

import typer

from discogen.commands import abort
from discogen.exceptions import DiscogenError
from discogen.output import get_output


def list_command(
    directory_url: Optional[str] = typer.Option(
        None, "--directory-url", help="API directory listing URL."
    ),
    preferred: bool = typer.Option(
        False, "--preferred", help="Only show the preferred version of each API."
    ),
) -> None:
    """List the APIs available in the discovery directory.

    Example::

        discogen list
        discogen list --preferred --json
    """
    from discogen.cache import DocumentCache
    from discogen.config import get_cache_dir, resolve_config
    from discogen.parser.directory import fetch_directory

    try:
        config = resolve_config(cli_directory_url=directory_url)
        with DocumentCache(get_cache_dir(), config.cache) as doc_cache:
            directory = fetch_directory(config.directory_url, cache=doc_cache)
    except DiscogenError as exc:
        abort(exc)

    items = [item for item in directory.items if item.preferred or not preferred]
    rows = [
        [item.id, item.title or "-", "yes" if item.preferred else ""]
        for item in sorted(items, key=lambda i: i.id)
    ]
    get_output().print_table(
        ["ID", "Title", "Preferred"], rows, title=f"APIs ({len(rows)})"
    )
