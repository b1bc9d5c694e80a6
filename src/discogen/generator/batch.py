"""Run generation passes for one API or many.

Every pass is independent: it owns its :class:`~discogen.generator.api.API`
and shares only the document cache and the HTTP client, both of which are
safe to use from several threads.  A failing API is recorded and never
stops the others.

Example::

    directory = fetch_directory(DEFAULT_DIRECTORY_URL, cache)
    result = generate_many(
        select_apis(directory, "*"), DEFAULT_DIRECTORY_URL, "gen", cache=cache, jobs=8
    )
    for failure in result.failures:
        print(failure.api_id, failure.error)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import httpx

from discogen.cache import DocumentCache
from discogen.exceptions import GenerateError
from discogen.generator.api import API
from discogen.generator.emitter import RenderError, render_module
from discogen.generator.writer import module_filename, package_dir, write_file, write_package
from discogen.models import DirectoryItem
from discogen.parser.directory import discovery_url
from discogen.parser.document import parse_document
from discogen.parser.loader import load_document

logger = logging.getLogger(__name__)


@dataclass
class GenerationFailure:
    """One API that could not be generated."""

    api_id: str
    error: Exception


@dataclass
class BatchResult:
    """Outcome of :func:`generate_many`."""

    generated: list[Path] = field(default_factory=list)
    failures: list[GenerationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def generate_api(
    source: str,
    gendir: str | Path,
    cache: Optional[DocumentCache] = None,
    check: bool = False,
    client: Optional[httpx.Client] = None,
) -> Path:
    """Generate the client package for the document at *source*.

    Args:
        source: URL, file path or ``-`` for stdin.
        gendir: Root output directory.
        cache: Document cache for URL sources.
        check: Byte-compile the written module.
        client: HTTP client for URL sources.

    Returns:
        The directory the package was written to.

    Raises:
        FetchError: If the document cannot be retrieved.
        DocumentError: If the document is malformed or unsupported.
        GenerateError: If the rendered module is invalid or cannot be
            written. An unparseable module is still written out so it can be
            inspected.
    """
    raw = load_document(source, cache=cache, client=client)
    api = API(parse_document(raw))
    try:
        text = render_module(api)
    except RenderError as exc:
        bad = package_dir(api, gendir) / module_filename(api)
        write_file(bad, exc.source)
        logger.debug("Wrote unparseable module to %s", bad)
        raise
    out = write_package(api, text, raw, gendir)
    if check:
        check_module(text, str(out / module_filename(api)))
    logger.info("Generated %s in %s", api.id, out)
    return out


def check_module(source: str, filename: str) -> None:
    """Byte-compile *source*, raising :class:`GenerateError` on failure."""
    try:
        compile(source, filename, "exec")
    except (SyntaxError, ValueError) as exc:
        raise GenerateError(f"{filename} does not compile: {exc}") from exc


def generate_many(
    items: list[DirectoryItem],
    directory_url: str,
    gendir: str | Path,
    cache: Optional[DocumentCache] = None,
    jobs: int = 1,
    check: bool = False,
    client: Optional[httpx.Client] = None,
) -> BatchResult:
    """Generate every API in *items*.

    Passes run on a thread pool when *jobs* is greater than one. Results
    keep the order of *items*.
    """

    def run(item: DirectoryItem) -> Path | GenerationFailure:
        try:
            url = discovery_url(item, directory_url)
            return generate_api(url, gendir, cache=cache, check=check, client=client)
        except Exception as exc:
            logger.debug("Generating %s failed", item.id, exc_info=True)
            return GenerationFailure(item.id, exc)

    if jobs > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            outcomes = list(pool.map(run, items))
    else:
        outcomes = [run(item) for item in items]

    result = BatchResult()
    for outcome in outcomes:
        if isinstance(outcome, GenerationFailure):
            result.failures.append(outcome)
        else:
            result.generated.append(outcome)
    return result
