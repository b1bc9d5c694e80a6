"""Tests for discogen.generator.methods."""

from __future__ import annotations

import logging

import pytest

from discogen.exceptions import DocumentError, UnresolvedReferenceError, UnsupportedTypeError
from discogen.generator.api import API
from discogen.generator.methods import Argument, Arguments, Method


def _method(api: API, resource: str, name: str) -> Method:
    for res in api.resources():
        if res.name == resource:
            for method in res.methods():
                if method.name == name:
                    return method
    raise LookupError(f"{resource}.{name}")


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


class TestArguments:
    def test_clashing_names_get_numeric_suffix(self) -> None:
        args = Arguments()
        for _ in range(3):
            args.add(Argument("x", "x", "str", "query"))
        assert args.names() == ["x", "x2", "x3"]

    def test_reserved_names_are_avoided(self) -> None:
        args = Arguments()
        args.add(Argument("self", "self", "str", "path"))
        args.add(Argument("service", "service", "str", "path"))
        assert args.names() == ["self2", "service2"]

    def test_body_arg_and_location_filter(self) -> None:
        args = Arguments()
        args.add(Argument("a", "a", "str", "path"))
        args.add(Argument("Task", "task", "Task", "body"))
        assert [a.name for a in args.for_location("path")] == ["a"]
        assert args.body_arg().target_type == "Task"
        assert len(args) == 2
        assert args[1].api_name == "Task"


# ---------------------------------------------------------------------------
# Call model over the tasks document
# ---------------------------------------------------------------------------


class TestMethodArguments:
    def test_follow_parameter_order(self, tasks_api: API) -> None:
        move = _method(tasks_api, "tasks", "move")
        assert [(a.name, a.target_type, a.location) for a in move.arguments()] == [
            ("tasklist", "str", "path"),
            ("task", "str", "path"),
            ("destination", "str", "query"),
            ("labels", "list[str]", "query"),
        ]
        assert move.arguments()[3].repeated

    def test_body_argument_comes_last(self, tasks_api: API) -> None:
        insert = _method(tasks_api, "tasks", "insert")
        body = insert.arguments().body_arg()
        assert insert.arguments().names() == ["tasklist", "task"]
        assert (body.api_name, body.target_type) == ("Task", "Task")

    def test_body_argument_is_deduplicated(self, tasks_api: API) -> None:
        update = _method(tasks_api, "tasks", "update")
        assert update.arguments().names() == ["tasklist", "task", "task2"]
        assert update.arguments().body_arg().name == "task2"

    def test_body_only_method(self, tasks_api: API) -> None:
        insert = _method(tasks_api, "tasklists", "insert")
        assert [(a.name, a.target_type) for a in insert.arguments()] == [("tasklist", "TaskList")]

    def test_required_param_outside_order_is_not_an_argument(self, tasks_api: API) -> None:
        clear = _method(tasks_api, "tasks", "clear")
        assert clear.arguments().names() == ["tasklist"]
        assert [p.name for p in clear.unbound_required_params()] == ["reason"]
        assert clear.setter_names() == {"reason": "reason"}

    def test_unknown_parameter_in_order_is_fatal(self, make_api) -> None:
        api = make_api(resources={"r": {"methods": {"m": {
            "id": "demo.r.m", "path": "x", "httpMethod": "GET",
            "parameters": {}, "parameterOrder": ["ghost"],
        }}}})
        with pytest.raises(DocumentError, match="ghost"):
            api.build()

    def test_unknown_request_schema_is_fatal(self, make_api) -> None:
        api = make_api(resources={"r": {"methods": {"m": {
            "id": "demo.r.m", "path": "x", "httpMethod": "POST",
            "request": {"$ref": "Nope"},
        }}}})
        with pytest.raises(UnresolvedReferenceError, match="Nope"):
            api.build()

    def test_arguments_are_memoized(self, tasks_api: API) -> None:
        move = _method(tasks_api, "tasks", "move")
        assert move.arguments() is move.arguments()


class TestParamClassification:
    def test_optional_params_sorted(self, tasks_api: API) -> None:
        listing = _method(tasks_api, "tasks", "list")
        assert [p.name for p in listing.optional_params()] == ["dueMax", "maxResults", "showCompleted"]
        assert listing.setter_names() == {
            "dueMax": "due_max",
            "maxResults": "max_results",
            "showCompleted": "show_completed",
        }

    def test_required_query_split_by_repetition(self, tasks_api: API) -> None:
        move = _method(tasks_api, "tasks", "move")
        assert [p.name for p in move.required_query_params()] == ["destination"]
        assert [p.name for p in move.required_repeated_query_params()] == ["labels"]
        assert [p.name for p in move.optional_params()] == ["previous"]

    def test_location_defaults_to_query(self, make_api) -> None:
        api = make_api(resources={"r": {"methods": {"m": {
            "id": "demo.r.m", "path": "x", "httpMethod": "GET",
            "parameters": {"q": {"type": "string"}},
        }}}}).build()
        assert _method(api, "r", "m").param("q").location == "query"

    def test_non_primitive_param_is_fatal(self, make_api) -> None:
        api = make_api(resources={"r": {"methods": {"m": {
            "id": "demo.r.m", "path": "x", "httpMethod": "GET",
            "parameters": {"q": {"type": "object", "required": True}},
            "parameterOrder": ["q"],
        }}}})
        with pytest.raises(UnsupportedTypeError, match="type='object'"):
            api.build()

    def test_setter_names_avoid_builder_members(self, make_api) -> None:
        api = make_api(resources={"r": {"methods": {"m": {
            "id": "demo.r.m", "path": "x", "httpMethod": "GET",
            "parameters": {
                "execute": {"type": "string"},
                "media": {"type": "string"},
                "self": {"type": "string"},
            },
        }}}}).build()
        assert _method(api, "r", "m").setter_names() == {
            "execute": "execute1",
            "media": "media1",
            "self": "self_",
        }


class TestMethodShape:
    def test_response_types(self, tasks_api: API) -> None:
        assert _method(tasks_api, "tasks", "list").response_type() == "Tasks"
        assert _method(tasks_api, "tasks", "delete").response_type() is None
        assert _method(tasks_api, "tasklists", "get").response_type() == "TaskList"

    def test_media_upload(self, tasks_api: API) -> None:
        insert = _method(tasks_api, "tasks", "insert")
        assert insert.supports_media()
        assert insert.media_path() == "/upload/tasks/v1/lists/{tasklist}/tasks"
        assert not _method(tasks_api, "tasks", "list").supports_media()

    def test_call_names(self, tasks_api: API) -> None:
        names = [m.call_name for m in tasks_api.methods()]
        assert names == [
            "TasklistsGetCall",
            "TasklistsInsertCall",
            "TasklistsListCall",
            "TasksClearCall",
            "TasksDeleteCall",
            "TasksInsertCall",
            "TasksListCall",
            "TasksMoveCall",
            "TasksUpdateCall",
        ]

    def test_document_path(self, tasks_api: API) -> None:
        move = _method(tasks_api, "tasks", "move")
        assert move.path_in_document == "resources.tasks.methods.move"
        assert move.param("labels").path == "resources.tasks.methods.move.parameters.labels"


class TestResource:
    def test_service_names_and_attributes(self, tasks_api: API) -> None:
        assert [(r.attr_name, r.service_name) for r in tasks_api.resources()] == [
            ("tasklists", "TasklistsService"),
            ("tasks", "TasksService"),
        ]

    def test_method_attributes_avoid_service_members(self, make_api) -> None:
        api = make_api(resources={"r": {"methods": {
            "client": {"id": "demo.r.client", "path": "c", "httpMethod": "GET"},
            "list": {"id": "demo.r.list", "path": "l", "httpMethod": "GET"},
        }}}).build()
        assert [m.attr_name for m in api.resources()[0].methods()] == ["client1", "list"]

    def test_nested_resources_are_reported(self, make_api, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="discogen"):
            make_api(resources={"outer": {
                "methods": {},
                "resources": {"inner": {"methods": {}}},
            }}).build()
        assert "Nested resources of 'outer'" in caplog.text
