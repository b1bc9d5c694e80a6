"""HTTP helpers shared by every generated client module."""

from __future__ import annotations

import json
from typing import Any, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

import httpx

from discogen import __version__
from discogen.exceptions import DiscogenError

USER_AGENT = f"discogen/{__version__}"
"""Sent as ``User-Agent`` on every request a generated client makes."""


class ServiceError(DiscogenError):
    """A generated client received a non-2xx response.

    Args:
        code: The HTTP status code (or the ``error.code`` in the body).
        message: The ``error.message`` from the body, when present.
        body: The raw response text.
        errors: The ``error.errors`` list from the body, when present.
    """

    def __init__(
        self,
        code: int,
        message: str = "",
        body: str = "",
        errors: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.body = body
        self.errors = errors or []
        if message:
            text = f"Error {code}: {message}"
        else:
            text = f"got HTTP response code {code} and error reading body: {body}"
        super().__init__(text)


def check_response(response: httpx.Response) -> None:
    """Raise :class:`ServiceError` unless *response* has a 2xx status.

    A JSON body of the form ``{"error": {"code", "message", "errors"}}``
    supplies the error details.
    """
    if 200 <= response.status_code <= 299:
        return
    body = response.text
    try:
        payload = json.loads(body) if body else None
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        err = payload["error"]
        raise ServiceError(
            code=int(err.get("code") or response.status_code),
            message=str(err.get("message") or ""),
            body=body,
            errors=err.get("errors") if isinstance(err.get("errors"), list) else None,
        )
    raise ServiceError(code=response.status_code, body=body)


def resolve_relative(base: str, rel: str) -> str:
    """Resolve *rel* against *base* the way a browser resolves a link.

    ``{param}`` placeholders in *rel* are left intact.
    """
    return urljoin(base, rel)


def upload_url(url: str) -> str:
    """Return the media upload endpoint for a method URL.

    The upload variant of ``https://host/path`` is ``https://host/upload/path``.
    """
    parts = urlsplit(url)
    if parts.path.startswith("/upload/"):
        return url
    return urlunsplit(parts._replace(path="/upload" + parts.path))


def clean_path_string(value: Any) -> str:
    """Render a path parameter value for substitution into a URL.

    Integers are formatted in decimal.  Strings keep only the characters
    ``0x30`` through ``0x7a`` (digits, upper and lower case letters and a
    few punctuation marks); everything else is dropped.
    """
    if isinstance(value, bool):
        value = str(value).lower()
    if isinstance(value, int):
        return str(value)
    return "".join(ch for ch in str(value) if 0x30 <= ord(ch) <= 0x7A)


def query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
