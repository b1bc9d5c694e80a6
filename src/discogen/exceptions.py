"""Exception hierarchy for discogen.

All exceptions inherit from :class:`DiscogenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`discogen.exit_codes`.
The top-level error handler in :func:`discogen.app.main` catches
``DiscogenError`` and exits with the appropriate code.

Malformed discovery documents are configuration errors of the *document*,
never transient faults: every :class:`DocumentError` aborts the generation
pass for that API only. Batch orchestration catches them per API and reports
them together.

Subclass hierarchy::

    DiscogenError (exit 1)
    +-- InvalidUsageError            (exit 2)
    +-- FetchError                   (exit 6)
    +-- DocumentError                (exit 7)
    |   +-- UnsupportedTypeError
    |   +-- DuplicateSchemaError
    |   +-- UnresolvedReferenceError
    |   +-- ScopeURLError
    |   +-- MissingDiscoveryLinkError
    +-- GenerateError                (exit 8)
    +-- ConfigError                  (exit 1)
"""

from __future__ import annotations

import json
from typing import Any, Optional

from discogen.exit_codes import (
    EXIT_DOCUMENT_ERROR,
    EXIT_FETCH_ERROR,
    EXIT_GENERATE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class DiscogenError(Exception):
    """Base exception for all discogen errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(DiscogenError):
    """Raised for invalid CLI arguments or an API id that matches nothing."""

    exit_code = EXIT_INVALID_USAGE


class FetchError(DiscogenError):
    """Raised when a document cannot be retrieved (network, HTTP status, I/O)."""

    exit_code = EXIT_FETCH_ERROR


class DocumentError(DiscogenError):
    """Raised when a discovery document is malformed or unsupported.

    Args:
        message: Description of the problem.
        path: Dotted location inside the document, e.g.
            ``schemas.Task.properties.links``.
        fragment: The offending raw JSON value, included in the message so
            the failing construct can be identified without the document.
    """

    exit_code = EXIT_DOCUMENT_ERROR

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        fragment: Any = None,
    ) -> None:
        self.path = path
        self.fragment = fragment
        detail = message
        if path:
            detail = f"{detail} (at {path})"
        if fragment is not None:
            detail = f"{detail}\n{_pretty(fragment)}"
        super().__init__(detail)


class UnsupportedTypeError(DocumentError):
    """A schema, property or parameter uses a shape the dialect does not cover."""


class DuplicateSchemaError(DocumentError):
    """Sub-schema synthesis produced a key that is already registered."""


class UnresolvedReferenceError(DocumentError):
    """A ``$ref`` or struct type does not resolve to a registered schema."""


class ScopeURLError(DocumentError):
    """An OAuth2 scope URL lacks the required ``https://www.googleapis.com/auth/`` prefix."""

    def __init__(self, url: str, prefix: str) -> None:
        self.url = url
        super().__init__(
            f"Unexpected oauth2 scope {url!r} doesn't start with {prefix!r}",
            path=f"auth.oauth2.scopes.{url}",
        )


class MissingDiscoveryLinkError(DocumentError):
    """A directory entry has no discovery link to follow."""

    def __init__(self, api_id: str) -> None:
        self.api_id = api_id
        super().__init__(f"API {api_id} has no discoveryLink")


class GenerateError(DiscogenError):
    """Raised when generated source is invalid or cannot be written."""

    exit_code = EXIT_GENERATE_ERROR


class ConfigError(DiscogenError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE


def _pretty(fragment: Any) -> str:
    """Render *fragment* as indented JSON, falling back to ``repr``."""
    if hasattr(fragment, "model_dump"):
        fragment = fragment.model_dump(by_alias=True, exclude_none=True)
    try:
        return json.dumps(fragment, indent=2, sort_keys=True, default=str)
    except (TypeError, ValueError):
        return repr(fragment)
