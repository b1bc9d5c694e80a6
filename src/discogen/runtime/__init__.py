"""Support library imported by every generated client module.

* :class:`Record` -- base of generated schema records.
* :class:`BaseService` / :class:`ResourceService` -- service classes.
* :class:`Call` -- base of generated call builders.
* :class:`ServiceError` and :func:`check_response` -- error responses.
* :func:`conditionally_include_media` -- media upload payloads.
"""

from discogen.runtime.call import BaseService, Call, Record, ResourceService, to_wire
from discogen.runtime.http import (
    USER_AGENT,
    ServiceError,
    check_response,
    clean_path_string,
    resolve_relative,
    upload_url,
)
from discogen.runtime.media import conditionally_include_media, media_size, media_type

__all__ = [
    "USER_AGENT",
    "BaseService",
    "Call",
    "Record",
    "ResourceService",
    "ServiceError",
    "check_response",
    "clean_path_string",
    "conditionally_include_media",
    "media_size",
    "media_type",
    "resolve_relative",
    "to_wire",
    "upload_url",
]
