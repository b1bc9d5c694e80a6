"""Tests for discogen.runtime.http."""

from __future__ import annotations

import httpx
import pytest

from discogen import __version__
from discogen.exceptions import DiscogenError
from discogen.runtime.http import (
    USER_AGENT,
    ServiceError,
    check_response,
    clean_path_string,
    query_value,
    resolve_relative,
    upload_url,
)


class TestCheckResponse:
    """Mapping non-2xx responses to ServiceError."""

    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_success_passes(self, status: int) -> None:
        check_response(httpx.Response(status))

    def test_structured_error_body(self) -> None:
        response = httpx.Response(
            404,
            json={
                "error": {
                    "code": 404,
                    "message": "Task list not found.",
                    "errors": [{"reason": "notFound", "domain": "global"}],
                }
            },
        )
        with pytest.raises(ServiceError) as exc_info:
            check_response(response)
        err = exc_info.value
        assert err.code == 404
        assert err.message == "Task list not found."
        assert err.errors == [{"reason": "notFound", "domain": "global"}]
        assert str(err) == "Error 404: Task list not found."

    def test_plain_text_body(self) -> None:
        with pytest.raises(ServiceError) as exc_info:
            check_response(httpx.Response(502, text="Bad Gateway"))
        err = exc_info.value
        assert err.code == 502
        assert err.body == "Bad Gateway"
        assert err.errors == []
        assert "got HTTP response code 502" in str(err)

    def test_error_without_message_uses_status(self) -> None:
        with pytest.raises(ServiceError) as exc_info:
            check_response(httpx.Response(403, json={"error": {"errors": "nope"}}))
        assert exc_info.value.code == 403
        assert exc_info.value.errors == []

    def test_is_a_discogen_error(self) -> None:
        assert issubclass(ServiceError, DiscogenError)


class TestUrls:
    def test_resolve_relative_keeps_placeholders(self) -> None:
        assert resolve_relative(
            "https://tasks.googleapis.com/tasks/v1/", "lists/{tasklist}/tasks"
        ) == "https://tasks.googleapis.com/tasks/v1/lists/{tasklist}/tasks"

    def test_resolve_absolute_path(self) -> None:
        assert resolve_relative(
            "https://tasks.googleapis.com/tasks/v1/", "/batch"
        ) == "https://tasks.googleapis.com/batch"

    def test_upload_url_inserts_prefix(self) -> None:
        assert upload_url("https://tasks.googleapis.com/tasks/v1/lists/a/tasks") == (
            "https://tasks.googleapis.com/upload/tasks/v1/lists/a/tasks"
        )

    def test_upload_url_is_idempotent(self) -> None:
        url = "https://tasks.googleapis.com/upload/tasks/v1/lists/a/tasks"
        assert upload_url(url) == url


class TestCleanPathString:
    def test_integer(self) -> None:
        assert clean_path_string(1234) == "1234"

    def test_keeps_allowed_range(self) -> None:
        assert clean_path_string("abc-XYZ_09@") == "abcXYZ_09@"

    def test_drops_slashes_and_spaces(self) -> None:
        assert clean_path_string("../etc passwd") == "etcpasswd"

    def test_drops_non_ascii(self) -> None:
        assert clean_path_string("café") == "caf"

    def test_bool(self) -> None:
        assert clean_path_string(True) == "true"


class TestQueryValue:
    @pytest.mark.parametrize(
        "value,expected",
        [(True, "true"), (False, "false"), (10, "10"), ("x y", "x y"), (1.5, "1.5")],
    )
    def test_rendering(self, value: object, expected: str) -> None:
        assert query_value(value) == expected


def test_user_agent_names_version() -> None:
    assert USER_AGENT == f"discogen/{__version__}"
