"""Generate command -- write client packages for one or more APIs.

Either a single document is generated (``--document``), or APIs are
selected from the directory listing by id (``--api``, ``*`` for all of
them).  Each generated package directory is printed to stdout, one per
line, so the command composes with other tools::

    discogen generate --api tasks:v1 | xargs -n1 ls
"""

from __future__ import annotations

from typing import Optional

import typer

from discogen.commands import abort
from discogen.exceptions import DiscogenError
from discogen.exit_codes import EXIT_GENERIC_FAILURE, EXIT_PARTIAL_FAILURE
from discogen.output import debug, error, info, print_data, progress, success


def generate_command(
    api: str = typer.Option(
        "*", "--api", "-a", help="API id to generate (name:version), or '*' for all."
    ),
    document: Optional[str] = typer.Option(
        None, "--document", "-d",
        help="Generate from this document (URL, file, or '-') instead of the directory.",
    ),
    gendir: Optional[str] = typer.Option(
        None, "--gendir", "-o", help="Directory generated packages are written to."
    ),
    directory_url: Optional[str] = typer.Option(
        None, "--directory-url", help="API directory listing URL."
    ),
    cache: Optional[bool] = typer.Option(
        None, "--cache/--no-cache", help="Use the document cache."
    ),
    jobs: Optional[int] = typer.Option(
        None, "--jobs", "-j", min=1, help="APIs generated in parallel."
    ),
    check: Optional[bool] = typer.Option(
        None, "--check/--no-check", help="Byte-compile each generated module."
    ),
) -> None:
    """Generate client packages from discovery documents.

    Example::

        discogen generate --api tasks:v1
        discogen generate --document ./tasks.json --gendir out
        discogen generate --api '*' --jobs 8
    """
    from discogen.cache import DocumentCache
    from discogen.config import get_cache_dir, resolve_config
    from discogen.generator.batch import generate_api, generate_many
    from discogen.parser.directory import fetch_directory, select_apis
    from discogen.parser.loader import new_client

    try:
        config = resolve_config(
            cli_gendir=gendir,
            cli_directory_url=directory_url,
            cli_cache=cache,
            cli_jobs=jobs,
            cli_check=check,
        )
        debug(f"Output directory: {config.gendir}")
        with DocumentCache(get_cache_dir(), config.cache) as doc_cache, new_client() as client:
            if document is not None:
                out = generate_api(
                    document, config.gendir, cache=doc_cache, check=config.check, client=client
                )
                print_data(str(out))
                success(f"Generated {out}")
                return

            directory = fetch_directory(config.directory_url, cache=doc_cache, client=client)
            items = select_apis(directory, api)
            progress(f"Generating {len(items)} API(s)...")
            result = generate_many(
                items,
                config.directory_url,
                config.gendir,
                cache=doc_cache,
                jobs=config.jobs,
                check=config.check,
                client=client,
            )
    except DiscogenError as exc:
        abort(exc)

    for path in result.generated:
        print_data(str(path))

    if result.ok:
        success(f"Generated {len(result.generated)} API(s) in {config.gendir}")
        return

    for failure in result.failures:
        error(f"{failure.api_id}: {failure.error}")
    if len(items) == 1:
        exc = result.failures[0].error
        code = exc.exit_code if isinstance(exc, DiscogenError) else EXIT_GENERIC_FAILURE
        raise typer.Exit(code=code)
    info(f"{len(result.generated)} generated, {len(result.failures)} failed.")
    raise typer.Exit(code=EXIT_PARTIAL_FAILURE)
