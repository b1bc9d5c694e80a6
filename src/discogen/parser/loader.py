"""Load discovery documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw discovery documents and
directory listings and converting them into Python dictionaries.  JSON is
what the discovery service serves, but YAML copies are accepted too since
JSON is a subset of YAML.

The public functions are:

* :func:`load_document` -- Load and parse a document from any supported
  source.
* :func:`fetch_text` -- Fetch the raw text of a URL, going through a
  :class:`~discogen.cache.DocumentCache` when one is supplied.
* :func:`parse_content` -- Decode JSON or YAML text into a dict.

After loading, the raw dict should be passed to
:func:`~discogen.parser.document.parse_document` which validates it into a
:class:`~discogen.models.DiscoveryDocument`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from discogen import __version__
from discogen.cache import DocumentCache
from discogen.exceptions import DocumentError, FetchError

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 30.0


def load_document(
    source: str,
    cache: Optional[DocumentCache] = None,
    client: Optional[httpx.Client] = None,
) -> dict[str, Any]:
    """Load a discovery document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.
        cache: Document cache consulted for URL sources.
        client: HTTP client used for URL sources; a short-lived one is
            created when omitted.

    Returns:
        The parsed document as a dictionary.

    Raises:
        FetchError: If the source cannot be retrieved.
        DocumentError: If the content cannot be parsed.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        text, hint = fetch_text(source, cache=cache, client=client)
        try:
            return parse_content(text, hint=hint, origin=source)
        except DocumentError:
            # Unparseable text must not be served again on the next run.
            if cache is not None:
                cache.invalidate(source)
            raise
    return _load_from_file(source)


def fetch_text(
    url: str,
    cache: Optional[DocumentCache] = None,
    client: Optional[httpx.Client] = None,
) -> tuple[str, str]:
    """Fetch *url* and return ``(text, format_hint)``.

    A cached copy is returned when present; a successful fetch is stored in
    the cache.

    Raises:
        FetchError: On network errors and non-2xx responses.
    """
    if cache is not None:
        cached = cache.get(url)
        if cached is not None:
            return cached, ""

    logger.debug("Fetching %s", url)
    try:
        if client is None:
            with new_client() as owned:
                response = owned.get(url)
        else:
            response = client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise FetchError(
            f"HTTP {exc.response.status_code} fetching {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise FetchError(f"Failed to fetch {url}: {exc}") from exc

    text = response.text
    if cache is not None:
        cache.set(url, text)

    # Use content-type as a hint for parsing
    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return text, hint


def new_client() -> httpx.Client:
    """Return an HTTP client configured for fetching discovery documents."""
    return httpx.Client(
        timeout=FETCH_TIMEOUT,
        follow_redirects=True,
        headers={"User-Agent": f"discogen/{__version__}"},
    )


def _load_from_stdin() -> dict[str, Any]:
    """Read a document from stdin.

    Raises:
        FetchError: If stdin cannot be read.
        DocumentError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise FetchError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise DocumentError("No input received from stdin")

    return parse_content(content, origin="stdin")


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from a local file.

    ``.json``, ``.yaml`` and ``.yml`` extensions restrict the format;
    anything else falls back to content-based detection.

    Raises:
        FetchError: If the file does not exist or cannot be read.
        DocumentError: If the file is empty or cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise FetchError(f"Document file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FetchError(f"Failed to read document file {path}: {exc}") from exc

    if not content.strip():
        raise DocumentError(f"Document file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return parse_content(content, hint=hint, origin=path)


def parse_content(content: str, hint: str = "", origin: str = "") -> dict[str, Any]:
    """Parse *content* as JSON or YAML.

    Tries JSON first (unless *hint* is ``'yaml'``), then falls back to YAML.

    Args:
        content: The raw string content.
        hint: Optional format hint (``'json'`` or ``'yaml'``).
        origin: Where the content came from, for error messages.

    Returns:
        The parsed dictionary.

    Raises:
        DocumentError: If the content is not an object in either format.
    """
    where = f" from {origin}" if origin else ""
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise DocumentError(f"Invalid JSON{where}: {exc}") from exc
        else:
            return _require_object(result, where)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        return _require_object(result, where)

    msg = f"Failed to parse document{where} as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise DocumentError(msg)


def _require_object(result: Any, where: str) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise DocumentError(f"Document{where} must be a JSON/YAML object (got {kind})")
    return result
