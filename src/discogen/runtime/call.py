"""Base classes the generated records, services and call builders extend.

A generated call builder moves through three states:

1. **Created** -- the service method binds every required argument.
2. **Configured** -- chained setters store optional parameters.  Setting
   the same parameter again replaces the earlier value.
3. **Executed** -- :meth:`Call._execute` sends one request from the
   accumulated state.  Executing again sends the request again; nothing is
   cached.

Example (generated code)::

    service = tasks.Service(httpx.Client(auth=auth))
    page = service.tasks.list("@default").max_results(20).execute()
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, TypeAdapter

from discogen.runtime.http import (
    USER_AGENT,
    check_response,
    clean_path_string,
    query_value,
    resolve_relative,
    upload_url,
)
from discogen.runtime.media import Media, conditionally_include_media

logger = logging.getLogger(__name__)


class Record(BaseModel):
    """Base of every generated schema record.

    Fields are declared under Python names with the native property name as
    alias.  Unknown keys from the server are kept, and :meth:`to_wire`
    leaves out fields that were never set.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        protected_namespaces=(),
    )

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready form keyed by native property names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def to_wire(value: Any) -> Any:
    """Convert a request body (record, list of records or plain data) to JSON data."""
    if isinstance(value, Record):
        return value.to_wire()
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    return value


class BaseService:
    """Root of a generated client: the HTTP client and the API endpoint.

    Args:
        client: The :class:`httpx.Client` requests are sent through.  It is
            expected to carry authentication.
        base_url: Endpoint that method paths are resolved against.
        data_wrapper: Whether the API wraps bodies in ``{"data": ...}``.
    """

    def __init__(self, client: httpx.Client, base_url: str, data_wrapper: bool = False) -> None:
        if client is None:
            raise ValueError("client is None")
        self.client = client
        self.base_url = base_url
        self.data_wrapper = data_wrapper


class ResourceService:
    """A group of call-builder factories sharing the root service."""

    def __init__(self, service: BaseService) -> None:
        self.service = service


class Call:
    """One invocation of an API method.

    Args:
        service: The root service the request is sent through.
        **args: The required arguments, keyed by their Python names.
    """

    def __init__(self, service: BaseService, **args: Any) -> None:
        self._service = service
        self._args: dict[str, Any] = args
        self._opt: dict[str, Any] = {}
        self._media: Optional[Media] = None

    def _set_opt(self, key: str, value: Any) -> Call:
        self._opt[key] = value
        return self

    def _set_media(self, stream: Media) -> Call:
        self._media = stream
        return self

    def _execute(
        self,
        http_method: str,
        path: str,
        *,
        path_params: Optional[dict[str, Any]] = None,
        query: Optional[dict[str, Any]] = None,
        repeated_query: Optional[dict[str, Any]] = None,
        body: Any = None,
        response_type: Any = None,
        upload: bool = False,
    ) -> Any:
        """Send the request and decode the response.

        Args:
            http_method: HTTP verb of the method.
            path: Path template relative to the service endpoint, with
                ``{name}`` placeholders.
            path_params: Values substituted into the path, keyed by the
                native parameter name.
            query: Required single-valued query parameters.
            repeated_query: Required repeated query parameters; each element
                becomes its own query entry.
            body: The request record, if the method takes one.
            response_type: Type the response is validated into, or ``None``
                when the method returns nothing.
            upload: Whether the method accepts media uploads.

        Raises:
            ServiceError: On a non-2xx response.
            httpx.HTTPError: On transport failures.
        """
        svc = self._service
        params: list[tuple[str, str]] = []
        for name, value in (query or {}).items():
            params.append((name, query_value(value)))
        for name, values in (repeated_query or {}).items():
            params.extend((name, query_value(v)) for v in values)

        url = resolve_relative(svc.base_url, path)
        if upload and self._media is not None:
            url = upload_url(url)

        substitutions = dict(path_params or {})
        for key, value in self._opt.items():
            if value is None:
                continue
            if "{" + key + "}" in url and key not in substitutions:
                substitutions[key] = value
                continue
            if isinstance(value, (list, tuple)):
                params.extend((key, query_value(v)) for v in value)
            else:
                params.append((key, query_value(value)))
        for key, value in substitutions.items():
            url = url.replace("{" + key + "}", clean_path_string(value), 1)
        # A caller-supplied alt replaces the JSON default.
        if all(name != "alt" for name, _ in params):
            params.insert(0, ("alt", "json"))

        content: Any = None
        content_type: Optional[str] = None
        if body is not None:
            payload = to_wire(body)
            if svc.data_wrapper:
                payload = {"data": payload}
            content = json.dumps(payload).encode("utf-8")
            content_type = "application/json"

        length: Optional[int] = None
        if self._media is not None:
            content, content_type, length = conditionally_include_media(
                self._media, content, content_type
            )

        headers = {"User-Agent": USER_AGENT}
        if content_type:
            headers["Content-Type"] = content_type
        if length is not None:
            headers["Content-Length"] = str(length)

        logger.debug("%s %s", http_method, url)
        response = svc.client.request(
            http_method, url, params=params, content=content, headers=headers
        )
        check_response(response)
        if response_type is None:
            return None
        data = response.json()
        if svc.data_wrapper and isinstance(data, dict) and "data" in data:
            data = data["data"]
        return TypeAdapter(response_type).validate_python(data)
