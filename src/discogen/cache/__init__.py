"""Disk-based caching of discovery documents.

This package provides :class:`DocumentCache`, which stores the text of
fetched discovery documents and directory listings on disk using
:mod:`diskcache`, keyed by URL with a configurable TTL.

The cache is consumed by :func:`~discogen.parser.loader.load_document` and
is controlled by the ``cache`` section of the global configuration
(:class:`~discogen.models.CacheConfig`).
"""

from discogen.cache.cache import DocumentCache

__all__ = ["DocumentCache"]
