"""On-disk store for the text of fetched discovery documents.

A full directory run downloads one document per listed API.  Repeating the
run within ``cache.ttl_seconds`` reads those documents from
``<cache dir>/documents`` instead of the network.  Entries are keyed by the
SHA-256 digest of the URL they were fetched from.  Nothing is stored for a
failed fetch, so failures are always retried.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Any, Optional

import diskcache

from discogen.models import CacheConfig

logger = logging.getLogger(__name__)

_SUBDIR = "documents"


def url_key(url: str) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


class DocumentCache:
    """Document text cache, usable as a context manager.

    With ``config.enabled`` false nothing is opened on disk.  Every lookup
    then misses and every store is dropped.

    Args:
        cache_dir: Directory that holds the ``documents`` store.
        config: The ``cache`` section of the configuration.
    """

    def __init__(self, cache_dir: str | Path, config: CacheConfig) -> None:
        self._ttl = config.ttl_seconds
        self._location = Path(cache_dir) / _SUBDIR
        self._store: Optional[diskcache.Cache] = (
            diskcache.Cache(str(self._location)) if config.enabled else None
        )

    def __enter__(self) -> DocumentCache:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def enabled(self) -> bool:
        return self._store is not None

    def get(self, url: str) -> Optional[str]:
        if self._store is None:
            return None
        text = self._store.get(url_key(url))
        logger.debug("Cache %s for %s", "miss" if text is None else "hit", url)
        return text

    def set(self, url: str, text: str) -> None:
        if self._store is not None:
            self._store.set(url_key(url), text, expire=self._ttl)

    def invalidate(self, url: str) -> None:
        if self._store is not None and self._store.delete(url_key(url)):
            logger.debug("Evicted %s", url)

    def clear(self) -> None:
        if self._store is not None:
            self._store.clear()

    def stats(self) -> dict[str, Any]:
        """Describe the store for ``discogen cache stats``.

        A disabled cache reports only ``{"enabled": False}``.  An enabled one
        adds ``size`` (entry count), ``directory`` and ``ttl_seconds``.
        """
        if self._store is None:
            return {"enabled": False}
        return {
            "enabled": True,
            "size": len(self._store),
            "directory": str(self._location),
            "ttl_seconds": self._ttl,
        }

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
