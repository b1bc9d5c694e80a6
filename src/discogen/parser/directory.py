"""The discovery directory: the list of APIs a batch run can generate.

The directory URL serves ``{"items": [{"id": "tasks:v1", ...}, ...]}``.
Each item names its document through ``discoveryRestUrl`` or a
``discoveryLink`` relative to the directory URL.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urljoin

import httpx
from pydantic import ValidationError

from discogen.cache import DocumentCache
from discogen.exceptions import DocumentError, InvalidUsageError, MissingDiscoveryLinkError
from discogen.models import DirectoryItem, DirectoryList
from discogen.parser.loader import load_document

logger = logging.getLogger(__name__)

ALL_APIS = "*"


def fetch_directory(
    url: str,
    cache: Optional[DocumentCache] = None,
    client: Optional[httpx.Client] = None,
) -> DirectoryList:
    """Load and decode the directory listing at *url*.

    Raises:
        FetchError: If the listing cannot be retrieved.
        DocumentError: If it is not a valid listing.
    """
    raw = load_document(url, cache=cache, client=client)
    try:
        directory = DirectoryList.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = ".".join(str(part) for part in first["loc"])
        raise DocumentError(f"Invalid API directory: {first['msg']}", path=loc) from exc
    logger.debug("Directory %s lists %d APIs", url, len(directory.items))
    return directory


def discovery_url(item: DirectoryItem, directory_url: str) -> str:
    """Return the absolute document URL of *item*.

    ``discoveryLink`` is resolved relative to *directory_url*;
    ``discoveryRestUrl`` is used when no link is present.

    Raises:
        MissingDiscoveryLinkError: If the item names no document at all.
    """
    if item.discovery_link:
        return urljoin(directory_url, item.discovery_link)
    if item.discovery_rest_url:
        return item.discovery_rest_url
    raise MissingDiscoveryLinkError(item.id)


def select_apis(directory: DirectoryList, api_id: str) -> list[DirectoryItem]:
    """Return the items to generate for *api_id*.

    ``"*"`` selects every listed API; anything else must equal an item's
    ``id`` (``name:version``).

    Raises:
        InvalidUsageError: If nothing matches. The message lists the
            available ids.
    """
    if api_id == ALL_APIS:
        return list(directory.items)
    matches = [item for item in directory.items if item.id == api_id]
    if not matches:
        available = ", ".join(sorted(item.id for item in directory.items)) or "(none)"
        raise InvalidUsageError(
            f"No API with id {api_id!r} in the directory. Available: {available}"
        )
    return matches
