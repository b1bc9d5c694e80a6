"""Strict decoding of raw discovery documents.

:func:`parse_document` is the single point where untyped JSON becomes the
typed :class:`~discogen.models.DiscoveryDocument`.  Every later stage reads
attributes and never inspects raw values, so a wrongly-typed field fails
here with the path of the offending value.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from discogen.exceptions import DocumentError
from discogen.models import DiscoveryDocument


def parse_document(raw: dict[str, Any]) -> DiscoveryDocument:
    """Validate *raw* into a :class:`~discogen.models.DiscoveryDocument`.

    Raises:
        DocumentError: Naming the dotted path of the first invalid value,
            e.g. ``schemas.Task.properties.due.type``.
    """
    try:
        return DiscoveryDocument.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        path = error_path(first["loc"])
        raise DocumentError(
            f"Invalid discovery document: {first['msg']}",
            path=path or None,
            fragment=_lookup(raw, first["loc"]),
        ) from exc


def error_path(loc: tuple[Any, ...]) -> str:
    """Render a pydantic error location as a dotted document path."""
    return ".".join(str(part) for part in loc)


def _lookup(raw: Any, loc: tuple[Any, ...]) -> Any:
    """Return the raw value at *loc*, or ``None`` when it does not exist."""
    value = raw
    for part in loc:
        if isinstance(value, dict) and part in value:
            value = value[part]
        elif isinstance(value, list) and isinstance(part, int) and part < len(value):
            value = value[part]
        else:
            return None
    return value
