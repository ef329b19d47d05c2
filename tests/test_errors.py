# tests/test_errors.py

from __future__ import annotations

import httpx
import pytest

from taskboard_client.api.errors import (
    TaskboardApiError,
    UnauthorizedError,
    extract_error_message,
    raise_for_status,
)


def test_field_errors_are_joined() -> None:
    resp = httpx.Response(
        422,
        json={"errors": [{"msg": "Title is required"}, {"msg": "Status is invalid"}], "message": "ignored"},
    )
    assert extract_error_message(resp) == "Title is required, Status is invalid"


def test_message_field_used_when_no_errors_list() -> None:
    resp = httpx.Response(400, json={"errors": [], "message": "Email already registered"})
    assert extract_error_message(resp) == "Email already registered"


def test_errors_without_messages_fall_through() -> None:
    resp = httpx.Response(400, json={"errors": [{"param": "title"}, "oops"]})
    assert extract_error_message(resp) == "400 Bad Request"


def test_status_line_for_non_json_body() -> None:
    resp = httpx.Response(502, content=b"<html>Bad gateway</html>")
    assert extract_error_message(resp) == "502 Bad Gateway"


def test_status_line_for_empty_body_and_non_object_json() -> None:
    assert extract_error_message(httpx.Response(500)) == "500 Internal Server Error"
    assert extract_error_message(httpx.Response(500, json=["nope"])) == "500 Internal Server Error"
    assert extract_error_message(httpx.Response(404, json={"message": 42})) == "404 Not Found"


def test_raise_for_status_distinguishes_401() -> None:
    raise_for_status(httpx.Response(204))

    with pytest.raises(UnauthorizedError) as unauthorized:
        raise_for_status(httpx.Response(401, json={"message": "Not authenticated"}))
    assert unauthorized.value.status_code == 401
    assert unauthorized.value.message == "Not authenticated"

    with pytest.raises(TaskboardApiError) as other:
        raise_for_status(httpx.Response(409, json={"message": "Conflict"}))
    assert not isinstance(other.value, UnauthorizedError)
    assert other.value.status_code == 409
