"""Attach an uploaded media stream to a request body.

When a media method is executed with a stream attached, the request
carries either the media alone or, when the method also has a JSON body, a
``multipart/related`` payload with the JSON part first::

    --<boundary>
    Content-Type: application/json

    {"title": "report"}
    --<boundary>
    Content-Type: text/csv

    <media bytes>
    --<boundary>--

The total length is reported whenever the stream size can be determined
without consuming it, so the caller can send ``Content-Length`` instead of
a chunked body.
"""

from __future__ import annotations

import io
import mimetypes
import os
import uuid
from typing import IO, Iterable, Iterator, Optional, Union

DEFAULT_MEDIA_TYPE = "application/octet-stream"
CHUNK_SIZE = 64 * 1024

Media = Union[bytes, bytearray, IO[bytes]]
Content = Union[bytes, Iterable[bytes]]


def media_type(media: Media) -> str:
    """Return the content type of *media*.

    An explicit ``content_type`` attribute wins; otherwise the type is
    guessed from the stream's file name.
    """
    explicit = getattr(media, "content_type", None)
    if isinstance(explicit, str) and explicit:
        return explicit
    name = getattr(media, "name", None)
    if isinstance(name, str):
        guessed, _ = mimetypes.guess_type(name)
        if guessed:
            return guessed
    return DEFAULT_MEDIA_TYPE


def media_size(media: Media) -> Optional[int]:
    """Return the number of bytes left in *media*, or ``None`` if unknown."""
    if isinstance(media, (bytes, bytearray)):
        return len(media)
    try:
        if isinstance(media, io.BytesIO):
            return len(media.getbuffer()) - media.tell()
        fileno = media.fileno()
        return os.fstat(fileno).st_size - media.tell()
    except (AttributeError, OSError, ValueError):
        return None


def _chunks(media: Media) -> Iterator[bytes]:
    if isinstance(media, (bytes, bytearray)):
        yield bytes(media)
        return
    while True:
        chunk = media.read(CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


def conditionally_include_media(
    media: Optional[Media],
    body: Optional[bytes],
    content_type: Optional[str],
) -> tuple[Optional[Content], Optional[str], Optional[int]]:
    """Combine *body* and *media* into one request payload.

    Returns:
        ``(content, content_type, length)``.  Without media, *body* and
        *content_type* are returned unchanged with a ``None`` length.
        ``length`` is ``None`` whenever the media size is unknown.
    """
    if media is None:
        return body, content_type, None

    mtype = media_type(media)
    size = media_size(media)

    if body is None:
        if isinstance(media, (bytes, bytearray)):
            return bytes(media), mtype, size
        return _chunks(media), mtype, size

    boundary = uuid.uuid4().hex
    head = (
        f"--{boundary}\r\nContent-Type: {content_type or 'application/json'}\r\n\r\n"
    ).encode("ascii") + body + (
        f"\r\n--{boundary}\r\nContent-Type: {mtype}\r\n\r\n"
    ).encode("ascii")
    tail = f"\r\n--{boundary}--\r\n".encode("ascii")

    length = None if size is None else len(head) + size + len(tail)

    def parts() -> Iterator[bytes]:
        yield head
        yield from _chunks(media)
        yield tail

    return parts(), f"multipart/related; boundary={boundary}", length
