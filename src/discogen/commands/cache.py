"""Cache commands -- inspect and empty the document cache."""

from __future__ import annotations

import typer

from discogen.output import info, print_result, success

cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("stats")
def cache_stats() -> None:
    """Show where fetched documents are cached and how many are stored.

    Example::

        discogen cache stats --json
    """
    from discogen.cache import DocumentCache
    from discogen.config import get_cache_dir, load_global_config

    with DocumentCache(get_cache_dir(), load_global_config().cache) as doc_cache:
        print_result(doc_cache.stats())


@cache_app.command("clear")
def cache_clear(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Drop every cached document so the next run fetches fresh copies.

    Example::

        discogen cache clear --force
    """
    from discogen.cache import DocumentCache
    from discogen.config import get_cache_dir
    from discogen.models import CacheConfig

    if not force and not typer.confirm("Remove all cached discovery documents?"):
        info("Cancelled.")
        raise typer.Exit()

    # Clear even when caching is switched off in the config.
    with DocumentCache(get_cache_dir(), CacheConfig(enabled=True)) as doc_cache:
        removed = doc_cache.stats()["size"]
        doc_cache.clear()
    success(f"Removed {removed} cached document(s).")
