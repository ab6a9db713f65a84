"""
Tests for the CDP tunnel, using a scripted fake websocket.
"""

from __future__ import annotations

import json
from typing import Any

import pytest
import websocket

from remote_drivers.webdriver import cdp
from remote_drivers.webdriver.capabilities import Capabilities
from remote_drivers.webdriver.config import DriverConfig
from remote_drivers.webdriver.http_client import HttpClientError
from remote_drivers.webdriver.session import Session


class FakeWebSocket:
    """Answers each command via ``handler(message) -> list of frames``."""

    def __init__(self, handler: Any) -> None:
        self.handler = handler
        self.sent: list[dict[str, Any]] = []
        self.inbox: list[str] = []
        self.closed = False

    def send(self, raw: str) -> None:
        msg = json.loads(raw)
        self.sent.append(msg)
        self.inbox.extend(json.dumps(frame) for frame in self.handler(msg))

    def recv(self) -> str:
        if not self.inbox:
            raise websocket.WebSocketTimeoutException("timed out")
        return self.inbox.pop(0)

    def settimeout(self, timeout: float) -> None:
        return None

    def close(self) -> None:
        self.closed = True


def _install(monkeypatch: pytest.MonkeyPatch, handler: Any) -> list[tuple[str, FakeWebSocket]]:
    opened: list[tuple[str, FakeWebSocket]] = []

    def create_connection(url: str, timeout: float | None = None) -> FakeWebSocket:
        ws = FakeWebSocket(handler)
        opened.append((url, ws))
        return ws

    monkeypatch.setattr(cdp.websocket, "create_connection", create_connection)
    return opened


def _page_handler(msg: dict[str, Any]) -> list[dict[str, Any]]:
    method = msg["method"]
    if method == "Target.getTargets":
        return [
            {
                "id": msg["id"],
                "result": {
                    "targetInfos": [
                        {"type": "service_worker", "targetId": "W"},
                        {"type": "page", "targetId": "T1"},
                    ]
                },
            }
        ]
    if method == "Target.attachToTarget":
        return [{"id": msg["id"], "result": {"sessionId": "S1"}}]
    if method == "Broken.method":
        return [{"id": msg["id"], "error": {"code": -32601, "message": "not found"}}]
    return [
        {"method": "Page.loadEventFired", "params": {"timestamp": 1}},
        {"id": msg["id"], "result": {"ok": True}},
    ]


class StubDriver:
    def __init__(self, caps: dict[str, Any]) -> None:
        self._session = Session("sess", Capabilities(caps))

    def get_session(self) -> Session:
        return self._session


# ═══════════════════════════════════════════════════════════════════════════════
# CONNECTION
# ═══════════════════════════════════════════════════════════════════════════════


def test_send_returns_result_and_queues_events(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(monkeypatch, _page_handler)
    conn = cdp.CdpConnection("ws://x", timeout=1)
    assert conn.send("Page.enable") == {"ok": True}
    assert conn.pop_event("Page.loadEventFired") == {"timestamp": 1}
    assert conn.pop_event("Page.loadEventFired") is None


def test_send_raises_on_protocol_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(monkeypatch, _page_handler)
    conn = cdp.CdpConnection("ws://x", timeout=1)
    with pytest.raises(HttpClientError, match="not found"):
        conn.send("Broken.method")


def test_send_times_out(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(monkeypatch, lambda msg: [])
    conn = cdp.CdpConnection("ws://x", timeout=0.05)
    with pytest.raises(HttpClientError, match="CDP response timed out"):
        conn.send("Page.enable")


def test_wait_for_event(monkeypatch: pytest.MonkeyPatch) -> None:
    opened = _install(monkeypatch, lambda msg: [])
    conn = cdp.CdpConnection("ws://x", timeout=1)
    ws = opened[0][1]
    ws.inbox.append(json.dumps({"method": "Other.event", "params": {}}))
    ws.inbox.append(json.dumps({"method": "Target.targetCreated", "params": {"id": 7}}))
    assert conn.wait_for_event("Target.targetCreated", timeout=1) == {"id": 7}
    assert conn.pop_event("Other.event") == {}
    assert conn.wait_for_event("Never.happens", timeout=0.05) is None


# ═══════════════════════════════════════════════════════════════════════════════
# DISCOVERY
# ═══════════════════════════════════════════════════════════════════════════════


def test_page_connection_via_chrome_debugger_address(monkeypatch: pytest.MonkeyPatch) -> None:
    opened = _install(monkeypatch, _page_handler)
    fetched: list[str] = []

    def fake_get_json(url: str, timeout: float = 5.0) -> Any:
        fetched.append(url)
        return [{"webSocketDebuggerUrl": "ws://localhost:9222/devtools/page/T1"}]

    monkeypatch.setattr(cdp, "_http_get_json", fake_get_json)
    driver = StubDriver({"goog:chromeOptions": {"debuggerAddress": "localhost:9222"}})

    conn = cdp.create_cdp_connection(driver)  # type: ignore[arg-type]

    assert fetched == ["http://localhost:9222/json"]
    assert opened[0][0] == "ws://localhost:9222/devtools/page/T1"
    assert conn.session_id == "S1"
    attach = opened[0][1].sent[1]
    assert attach["params"] == {"targetId": "T1", "flatten": True}

    conn.send("Runtime.enable")
    assert opened[0][1].sent[-1]["sessionId"] == "S1"


def test_browser_target_uses_version_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    opened = _install(monkeypatch, _page_handler)
    fetched: list[str] = []

    def fake_get_json(url: str, timeout: float = 5.0) -> Any:
        fetched.append(url)
        return {"webSocketDebuggerUrl": "ws://127.0.0.1:9333/devtools/browser/B"}

    monkeypatch.setattr(cdp, "_http_get_json", fake_get_json)
    driver = StubDriver({"ms:edgeOptions": {"debuggerAddress": "127.0.0.1:9333"}})

    conn = cdp.create_cdp_connection(driver, "browser")  # type: ignore[arg-type]

    assert fetched == ["http://127.0.0.1:9333/json/version"]
    assert opened[0][0] == "ws://127.0.0.1:9333/devtools/browser/B"
    assert conn.session_id is None


def test_firefox_page_target_uses_list_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(monkeypatch, _page_handler)
    fetched: list[str] = []

    def fake_get_json(url: str, timeout: float = 5.0) -> Any:
        fetched.append(url)
        return [{"webSocketDebuggerUrl": "ws://127.0.0.1:9222/devtools/page/F"}]

    monkeypatch.setattr(cdp, "_http_get_json", fake_get_json)
    cdp.create_cdp_connection(StubDriver({"moz:debuggerAddress": "127.0.0.1:9222"}))  # type: ignore[arg-type]
    assert fetched == ["http://127.0.0.1:9222/json/list"]


def test_remote_url_uses_grid_proxy(monkeypatch: pytest.MonkeyPatch) -> None:
    opened = _install(monkeypatch, _page_handler)
    monkeypatch.setattr(cdp, "_http_get_json", lambda url, timeout=5.0: pytest.fail("no discovery expected"))
    config = DriverConfig(remote_url="http://grid.test:4444/wd/hub")

    cdp.create_cdp_connection(StubDriver({}), config=config)  # type: ignore[arg-type]

    assert opened[0][0] == "ws://grid.test:4444/session/sess/se/cdp"


def test_se_cdp_capability_is_used_as_is(monkeypatch: pytest.MonkeyPatch) -> None:
    opened = _install(monkeypatch, _page_handler)
    driver = StubDriver({"se:cdp": "ws://node:5555/session/sess/se/cdp"})
    cdp.create_cdp_connection(driver, "browser")  # type: ignore[arg-type]
    assert opened[0][0] == "ws://node:5555/session/sess/se/cdp"


def test_missing_debugger_address() -> None:
    with pytest.raises(HttpClientError, match="debugger address"):
        cdp.create_cdp_connection(StubDriver({"browserName": "safari"}))  # type: ignore[arg-type]


def test_invalid_target() -> None:
    with pytest.raises(ValueError):
        cdp.create_cdp_connection(StubDriver({}), "tab")  # type: ignore[arg-type]
