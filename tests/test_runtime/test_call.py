"""Tests for discogen.runtime.call."""

from __future__ import annotations

import io
import json
from typing import Optional

import httpx
import pytest
from pydantic import Field

from discogen.runtime import BaseService, Call, Record, ResourceService, ServiceError, to_wire
from discogen.runtime.http import USER_AGENT

BASE = "https://tasks.googleapis.com/tasks/v1/"


# ---------------------------------------------------------------------------
# Hand-written equivalents of generated code
# ---------------------------------------------------------------------------


class Item(Record):
    item_id: Optional[str] = Field(None, alias="id")
    title: Optional[str] = Field(None, alias="title")
    done: Optional[bool] = Field(None, alias="done")


class ListItemsCall(Call):
    def max_results(self, max_results: int) -> ListItemsCall:
        return self._set_opt("maxResults", max_results)

    def show_completed(self, show_completed: bool) -> ListItemsCall:
        return self._set_opt("showCompleted", show_completed)

    def execute(self) -> Optional[list[Item]]:
        return self._execute(
            "GET",
            "lists/{tasklist}/items",
            path_params={"tasklist": self._args["tasklist"]},
            response_type=list[Item],
        )


class InsertItemCall(Call):
    def parent(self, parent: str) -> InsertItemCall:
        return self._set_opt("parent", parent)

    def media(self, stream) -> InsertItemCall:
        return self._set_media(stream)

    def execute(self) -> Optional[Item]:
        return self._execute(
            "POST",
            "lists/{tasklist}/items",
            path_params={"tasklist": self._args["tasklist"]},
            body=self._args["item"],
            response_type=Item,
            upload=True,
        )


class MoveItemCall(Call):
    def previous(self, previous: str) -> MoveItemCall:
        return self._set_opt("previous", previous)

    def execute(self) -> None:
        return self._execute(
            "POST",
            "lists/{tasklist}/items/{item}/move",
            path_params={"tasklist": self._args["tasklist"], "item": self._args["item"]},
            query={"destination": self._args["destination"]},
            repeated_query={"labels": self._args["labels"]},
        )


class GetByNameCall(Call):
    def name(self, name: str) -> GetByNameCall:
        return self._set_opt("name", name)

    def execute(self) -> Optional[Item]:
        return self._execute("GET", "items/{name}", response_type=Item)


class ExportItemCall(Call):
    def alt(self, alt: str) -> ExportItemCall:
        return self._set_opt("alt", alt)

    def execute(self) -> None:
        return self._execute("GET", "items/{item}", path_params={"item": self._args["item"]})


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, response: Optional[httpx.Response] = None) -> None:
        self.requests: list[httpx.Request] = []
        self.response = response or httpx.Response(200, json={})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _service(recorder: Recorder, data_wrapper: bool = False) -> BaseService:
    client = httpx.Client(transport=httpx.MockTransport(recorder))
    return BaseService(client, BASE, data_wrapper=data_wrapper)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class TestRecord:
    def test_to_wire_uses_aliases_and_skips_unset(self) -> None:
        assert Item(item_id="1", title="Buy milk").to_wire() == {"id": "1", "title": "Buy milk"}

    def test_populate_from_wire_names(self) -> None:
        item = Item.model_validate({"id": "7", "done": True, "etag": "abc"})
        assert item.item_id == "7"
        assert item.done is True
        assert item.to_wire() == {"id": "7", "done": True, "etag": "abc"}

    def test_to_wire_handles_lists(self) -> None:
        assert to_wire([Item(title="a"), {"raw": 1}]) == [{"title": "a"}, {"raw": 1}]


class TestServices:
    def test_client_required(self) -> None:
        with pytest.raises(ValueError, match="client is None"):
            BaseService(None, BASE)  # type: ignore[arg-type]

    def test_resource_service_keeps_root(self) -> None:
        svc = _service(Recorder())
        assert ResourceService(svc).service is svc


# ---------------------------------------------------------------------------
# Call execution
# ---------------------------------------------------------------------------


class TestExecute:
    """Request construction from accumulated call state."""

    def test_path_and_default_query(self) -> None:
        rec = Recorder(httpx.Response(200, json=[{"id": "1"}, {"id": "2"}]))
        result = ListItemsCall(_service(rec), tasklist="@default").execute()
        assert [item.item_id for item in result] == ["1", "2"]
        assert rec.last.method == "GET"
        assert rec.last.url.path == "/tasks/v1/lists/@default/items"
        assert rec.last.url.params["alt"] == "json"
        assert rec.last.headers["User-Agent"] == USER_AGENT

    def test_optional_setters_become_query(self) -> None:
        rec = Recorder(httpx.Response(200, json=[]))
        ListItemsCall(_service(rec), tasklist="a").max_results(5).show_completed(False).execute()
        params = rec.last.url.params
        assert params["maxResults"] == "5"
        assert params["showCompleted"] == "false"

    def test_alt_setter_replaces_json_default(self) -> None:
        rec = Recorder(httpx.Response(204))
        ExportItemCall(_service(rec), item="1").alt("media").execute()
        assert rec.last.url.params.get_list("alt") == ["media"]

    def test_alt_defaults_to_json_once(self) -> None:
        rec = Recorder(httpx.Response(204))
        ExportItemCall(_service(rec), item="1").execute()
        assert rec.last.url.params.get_list("alt") == ["json"]

    def test_setting_twice_replaces(self) -> None:
        rec = Recorder(httpx.Response(200, json=[]))
        ListItemsCall(_service(rec), tasklist="a").max_results(5).max_results(9).execute()
        assert rec.last.url.params.get_list("maxResults") == ["9"]

    def test_repeated_and_required_query(self) -> None:
        rec = Recorder(httpx.Response(204))
        result = MoveItemCall(
            _service(rec), tasklist="l1", item="t1", destination="l2", labels=["a", "b"]
        ).previous("t0").execute()
        assert result is None
        url = rec.last.url
        assert url.path == "/tasks/v1/lists/l1/items/t1/move"
        assert url.params["destination"] == "l2"
        assert url.params.get_list("labels") == ["a", "b"]
        assert url.params["previous"] == "t0"

    def test_optional_value_fills_placeholder(self) -> None:
        rec = Recorder(httpx.Response(200, json={"id": "x"}))
        GetByNameCall(_service(rec)).name("x9").execute()
        assert rec.last.url.path == "/tasks/v1/items/x9"
        assert "name" not in rec.last.url.params

    def test_json_body(self) -> None:
        rec = Recorder(httpx.Response(200, json={"id": "new"}))
        created = InsertItemCall(_service(rec), tasklist="a", item=Item(title="t")).execute()
        assert created.item_id == "new"
        assert rec.last.url.path == "/tasks/v1/lists/a/items"
        assert rec.last.headers["Content-Type"] == "application/json"
        assert json.loads(rec.last.content) == {"title": "t"}

    def test_data_wrapper(self) -> None:
        rec = Recorder(httpx.Response(200, json={"data": {"id": "wrapped"}}))
        created = InsertItemCall(
            _service(rec, data_wrapper=True), tasklist="a", item=Item(title="t")
        ).execute()
        assert json.loads(rec.last.content) == {"data": {"title": "t"}}
        assert created.item_id == "wrapped"

    def test_media_upload_goes_to_upload_endpoint(self) -> None:
        rec = Recorder(httpx.Response(200, json={"id": "up"}))
        stream = io.BytesIO(b"hello")
        stream.content_type = "text/plain"  # type: ignore[attr-defined]
        InsertItemCall(_service(rec), tasklist="a", item=Item(title="t")).media(stream).execute()
        request = rec.last
        assert request.url.path == "/upload/tasks/v1/lists/a/items"
        assert request.headers["Content-Type"].startswith("multipart/related; boundary=")
        assert int(request.headers["Content-Length"]) == len(request.content)
        assert b'{"title": "t"}' in request.content
        assert b"Content-Type: text/plain\r\n\r\nhello" in request.content

    def test_without_media_uses_plain_endpoint(self) -> None:
        rec = Recorder(httpx.Response(200, json={}))
        InsertItemCall(_service(rec), tasklist="a", item=Item()).execute()
        assert not rec.last.url.path.startswith("/upload/")

    def test_error_status_raises_service_error(self) -> None:
        rec = Recorder(httpx.Response(404, json={"error": {"code": 404, "message": "gone"}}))
        with pytest.raises(ServiceError, match="Error 404: gone"):
            ListItemsCall(_service(rec), tasklist="a").execute()

    def test_execute_twice_sends_twice(self) -> None:
        rec = Recorder(httpx.Response(200, json=[]))
        call = ListItemsCall(_service(rec), tasklist="a")
        call.execute()
        call.execute()
        assert len(rec.requests) == 2
