"""
Tests for response classification and command execution.

Tests cover:
- Legacy vs W3C response dialects
- Error responses in both dialects
- New session parsing
- Custom commands and pending clients
"""

from __future__ import annotations

import json
from concurrent.futures import Future
from typing import Any

import pytest

from remote_drivers.webdriver.command import Command, Name
from remote_drivers.webdriver.config import DriverConfig
from remote_drivers.webdriver.elements import Element
from remote_drivers.webdriver.errors import (
    NoSuchElementError,
    StaleElementReferenceError,
    UnknownCommandError,
    WebDriverError,
)
from remote_drivers.webdriver.executor import Executor, create_executor, parse_http_response
from remote_drivers.webdriver.http_client import HttpClient, Request, Response
from remote_drivers.webdriver.session import Session
from remote_drivers.webdriver.vendor import CHROME, ChromiumCommand
from remote_drivers.webdriver.wire import ELEMENT_ID_KEY


class _FakeClient:
    def __init__(self, status: int = 200, body: Any = None) -> None:
        self.status = status
        self.body = body
        self.requests: list[Request] = []

    def send(self, request: Request) -> Response:
        self.requests.append(request)
        body = self.body if isinstance(self.body, str) else json.dumps(self.body)
        return Response(self.status, {}, body)


def _response(status: int, body: Any) -> Response:
    return Response(status, {}, body if isinstance(body, str) else json.dumps(body))


# ═══════════════════════════════════════════════════════════════════════════════
# RESPONSE CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════════════


def test_w3c_success() -> None:
    assert parse_http_response(Command(Name.GET_TITLE), _response(200, {"value": {"a": 1}})) == (True, {"a": 1})


def test_legacy_success_is_not_w3c() -> None:
    assert parse_http_response(Command(Name.GET_TITLE), _response(200, {"status": 0, "value": "t"})) == (False, "t")


def test_plain_value_without_status() -> None:
    # A non-object value cannot be classified as W3C.
    assert parse_http_response(Command(Name.GET_TITLE), _response(200, {"value": "t"})) == (False, "t")


def test_legacy_error_status() -> None:
    with pytest.raises(NoSuchElementError, match="nope"):
        parse_http_response(Command(Name.FIND_ELEMENT), _response(500, {"status": 7, "value": {"message": "nope"}}))


def test_w3c_error_status() -> None:
    body = {"value": {"error": "stale element reference", "message": "gone", "stacktrace": "trace"}}
    with pytest.raises(StaleElementReferenceError) as info:
        parse_http_response(Command(Name.CLICK_ELEMENT), _response(404, body))
    assert info.value.remote_stacktrace == "trace"


def test_non_json_404_is_unknown_command() -> None:
    with pytest.raises(UnknownCommandError, match="getTitle: missing\nroute"):
        parse_http_response(Command(Name.GET_TITLE), _response(404, "missing\r\nroute"))


def test_non_json_error_status() -> None:
    with pytest.raises(WebDriverError, match="boom"):
        parse_http_response(Command(Name.GET_TITLE), _response(500, "boom"))


def test_non_json_success_returns_text_or_none() -> None:
    assert parse_http_response(Command(Name.GET_TITLE), _response(200, "hello")) == (False, "hello")
    assert parse_http_response(Command(Name.GET_TITLE), _response(200, "")) == (False, None)


def test_informational_status_is_rejected() -> None:
    with pytest.raises(WebDriverError, match="Unexpected HTTP response"):
        parse_http_response(Command(Name.GET_TITLE), _response(101, ""))


# ═══════════════════════════════════════════════════════════════════════════════
# EXECUTOR
# ═══════════════════════════════════════════════════════════════════════════════


def test_new_session_w3c() -> None:
    client = _FakeClient(body={"value": {"sessionId": "abc", "capabilities": {"browserName": "chrome"}}})
    executor = Executor(client)
    session = executor.execute(Command(Name.NEW_SESSION).set_parameter("capabilities", {}))
    assert isinstance(session, Session)
    assert session.id == "abc"
    assert session.capabilities.get_browser_name() == "chrome"
    assert executor.w3c is True
    assert (client.requests[0].method, client.requests[0].path) == ("POST", "/session")


def test_new_session_legacy() -> None:
    client = _FakeClient(body={"status": 0, "sessionId": "old", "value": {"browserName": "firefox"}})
    executor = Executor(client)
    session = executor.execute(Command(Name.NEW_SESSION))
    assert session.id == "old"
    assert session.capabilities.get_browser_name() == "firefox"
    assert executor.w3c is False


def test_new_session_without_id() -> None:
    executor = Executor(_FakeClient(body={"value": {"capabilities": {}}}))
    with pytest.raises(WebDriverError, match="Unable to parse new session response"):
        executor.execute(Command(Name.NEW_SESSION))


def test_decodes_references_only_with_owner() -> None:
    client = _FakeClient(body={"value": {ELEMENT_ID_KEY: "e1"}})
    executor = Executor(client)
    cmd = Command(Name.FIND_ELEMENT).set_parameter("sessionId", "s")

    raw = executor.execute(cmd)
    assert raw == {ELEMENT_ID_KEY: "e1"}

    owner = object()
    element = executor.execute(Command(Name.FIND_ELEMENT).set_parameter("sessionId", "s"), owner=owner)
    assert isinstance(element, Element)
    assert element.driver is owner


def test_null_value_returns_none() -> None:
    executor = Executor(_FakeClient(body={"value": None}))
    assert executor.execute(Command(Name.REFRESH).set_parameter("sessionId", "s")) is None


def test_define_command_routes_custom_name() -> None:
    client = _FakeClient(body={"value": {"ok": True}})
    executor = Executor(client)
    executor.define_command("myCommand", "POST", "/session/:sessionId/my/:thing")
    result = executor.execute(Command("myCommand").set_parameter("sessionId", "s").set_parameter("thing", "t"))
    assert result == {"ok": True}
    assert client.requests[0].path == "/session/s/my/t"


def test_pending_client_is_resolved_once() -> None:
    client = _FakeClient(body={"value": {"ready": True}})
    pending: Future[HttpClient] = Future()
    executor = Executor(pending)
    pending.set_result(client)  # type: ignore[arg-type]
    assert executor.execute(Command(Name.GET_SERVER_STATUS)) == {"ready": True}
    assert executor._get_client() is client


def test_create_executor_applies_config_and_profile() -> None:
    config = DriverConfig(keep_alive=True, user_agent="ua/1", http_timeout=5.0)
    executor = create_executor("http://127.0.0.1:9515/", config=config, profile=CHROME)
    client = executor._get_client()
    assert client.keep_alive is True
    assert client.user_agent == "ua/1"
    assert client.timeout == 5.0
    assert ChromiumCommand.LAUNCH_APP in executor._custom_commands


def test_create_executor_with_pending_url() -> None:
    url: Future[str] = Future()
    executor = create_executor(url)
    url.set_result("http://127.0.0.1:9515/")
    assert executor._get_client().server_url == "http://127.0.0.1:9515/"
