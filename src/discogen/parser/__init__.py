"""Discovery document ingestion -- load, decode, and list APIs.

This sub-package turns a raw discovery document (JSON or YAML, local file,
stdin or remote URL) into a :class:`~discogen.models.DiscoveryDocument`
that the generator can consume.

Typical usage::

    from discogen.parser import load_document, parse_document

    raw = load_document("https://www.googleapis.com/discovery/v1/apis/tasks/v1/rest")
    document = parse_document(raw)

Sub-modules:

* :mod:`~discogen.parser.loader` -- I/O layer (URL, file, stdin) and format
  detection.
* :mod:`~discogen.parser.document` -- Strict decoding with path-carrying
  errors.
* :mod:`~discogen.parser.directory` -- The API directory listing.
"""

from discogen.parser.directory import discovery_url, fetch_directory, select_apis
from discogen.parser.document import parse_document
from discogen.parser.loader import load_document

__all__ = [
    "discovery_url",
    "fetch_directory",
    "load_document",
    "parse_document",
    "select_apis",
]
