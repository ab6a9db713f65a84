"""Chrome DevTools Protocol tunnel for an existing WebDriver session.

The debugger endpoint is discovered from the session's capabilities (or the
grid's ``/se/cdp`` proxy) and driven over a plain websocket connection.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import suppress
from typing import TYPE_CHECKING, Any
from urllib.error import URLError
from urllib.parse import urlsplit
from urllib.request import urlopen

import websocket

from .http_client import HttpClientError

if TYPE_CHECKING:
    from .config import DriverConfig
    from .driver import WebDriver

logger = logging.getLogger("webdriver.cdp")


class CdpConnection:
    """Low-level CDP websocket connection.

    When ``session_id`` is set, commands are routed to that attached target.
    """

    def __init__(self, ws_url: str, timeout: float = 10.0) -> None:
        self.ws = websocket.create_connection(ws_url, timeout=timeout)
        self.ws_url = ws_url
        self.timeout = timeout
        self.session_id: str | None = None
        self._next_id = 1
        # Events that arrive while waiting for a response are kept, not dropped.
        self._event_queue: list[dict[str, Any]] = []
        self._max_event_queue = 1000

    def _push_event(self, event: dict[str, Any]) -> None:
        self._event_queue.append(event)
        if len(self._event_queue) > self._max_event_queue:
            del self._event_queue[: len(self._event_queue) - self._max_event_queue]

    def pop_event(self, event_name: str) -> dict[str, Any] | None:
        """Pop the oldest queued event params for the given event name."""
        for i, ev in enumerate(self._event_queue):
            if ev.get("method") == event_name:
                self._event_queue.pop(i)
                params = ev.get("params")
                return params if isinstance(params, dict) else {}
        return None

    def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send a CDP command and wait for its result."""
        msg_id = self._next_id
        self._next_id += 1

        msg: dict[str, Any] = {"id": msg_id, "method": method}
        if params:
            msg["params"] = params
        if self.session_id:
            msg["sessionId"] = self.session_id

        try:
            self.ws.send(json.dumps(msg))
        except Exception as exc:  # noqa: BLE001
            raise HttpClientError(str(exc)) from exc
        return self._recv_until(msg_id)

    def _recv(self, remaining: float) -> dict[str, Any] | None:
        try:
            self.ws.settimeout(min(0.5, remaining))
            raw = self.ws.recv()
        except (websocket.WebSocketTimeoutException, TimeoutError):
            return None
        except Exception as exc:  # noqa: BLE001
            raise HttpClientError(str(exc)) from exc

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return None
        return data if isinstance(data, dict) else None

    def _recv_until(self, expected_id: int) -> dict[str, Any]:
        deadline = time.time() + self.timeout
        while True:
            remaining = deadline - time.time()
            if remaining <= 0:
                raise HttpClientError("CDP response timed out")

            data = self._recv(remaining)
            if data is None:
                continue

            if isinstance(data.get("method"), str) and "id" not in data:
                self._push_event(data)
                continue

            if data.get("id") == expected_id:
                if "error" in data:
                    raise HttpClientError(str(data["error"]))
                return data.get("result", {})

    def wait_for_event(self, event_name: str, timeout: float = 10.0) -> dict[str, Any] | None:
        """Wait for a CDP event; returns its params or None on timeout."""
        queued = self.pop_event(event_name)
        if queued is not None:
            return queued

        deadline = time.time() + timeout
        while True:
            remaining = deadline - time.time()
            if remaining <= 0:
                return None
            data = self._recv(remaining)
            if data is None or not isinstance(data.get("method"), str) or "id" in data:
                continue
            if data["method"] == event_name:
                params = data.get("params")
                return params if isinstance(params, dict) else {}
            self._push_event(data)

    def close(self) -> None:
        with suppress(Exception):
            self.ws.close()


def _http_get_json(url: str, timeout: float = 5.0) -> Any:
    try:
        with urlopen(url, timeout=timeout) as resp:  # noqa: S310
            return json.loads(resp.read().decode())
    except (URLError, OSError, ValueError) as exc:
        raise HttpClientError(f"Failed to fetch {url}: {exc}") from exc


def get_ws_url(debugger_address: str, target: str, *, firefox: bool = False, timeout: float = 5.0) -> str:
    """Look up the websocket debugger URL published by a browser's HTTP endpoint."""
    if target == "page" and not firefox:
        path = "/json"
    elif target == "page":
        path = "/json/list"
    else:
        path = "/json/version"

    data = _http_get_json(f"http://{debugger_address}{path}", timeout=timeout)
    entry = data[0] if isinstance(data, list) and data else data
    ws_url = entry.get("webSocketDebuggerUrl") if isinstance(entry, dict) else None
    if not ws_url:
        raise HttpClientError(f"No webSocketDebuggerUrl at {debugger_address}{path}")
    return ws_url


def _debugger_address(driver: WebDriver, config: DriverConfig | None) -> tuple[str, bool]:
    session = driver.get_session()
    caps = session.capabilities

    if config is not None and config.remote_url:
        host = urlsplit(config.remote_url).netloc
        return f"ws://{host}/session/{session.id}/se/cdp", False

    se_cdp = caps.get("se:cdp")
    if se_cdp:
        return str(se_cdp), False

    for key in ("goog:chromeOptions", "ms:edgeOptions"):
        options = caps.get(key)
        if isinstance(options, dict) and options.get("debuggerAddress"):
            return str(options["debuggerAddress"]), False

    moz = caps.get("moz:debuggerAddress")
    if moz:
        return str(moz), True
    raise HttpClientError("Could not find a CDP debugger address in the session capabilities")


def create_cdp_connection(
    driver: WebDriver,
    target: str = "page",
    *,
    config: DriverConfig | None = None,
    timeout: float = 10.0,
) -> CdpConnection:
    """Open a CDP connection for ``driver``'s browser.

    Args:
        driver: A driver with an active session.
        target: ``"page"`` attaches to the first page target; ``"browser"``
            talks to the browser endpoint.
        config: When it names a remote URL, the grid's CDP proxy is used.
        timeout: Per-command response timeout in seconds.

    Returns:
        An open ``CdpConnection``.
    """
    if target not in ("page", "browser"):
        raise ValueError(f"target must be 'page' or 'browser', got {target!r}")

    address, firefox = _debugger_address(driver, config)
    if "/se/cdp" in address:
        ws_url = address
    else:
        if address.startswith(("ws://", "wss://", "http://", "https://")):
            address = urlsplit(address).netloc
        ws_url = get_ws_url(address, target, firefox=firefox)

    logger.debug("Connecting to CDP endpoint %s", ws_url)
    conn = CdpConnection(ws_url, timeout=timeout)
    if target == "page":
        try:
            targets = conn.send("Target.getTargets").get("targetInfos") or []
            page = next((t for t in targets if t.get("type") == "page"), None)
            if page is None:
                raise HttpClientError("No page target to attach to")
            attached = conn.send("Target.attachToTarget", {"targetId": page["targetId"], "flatten": True})
        except Exception:
            conn.close()
            raise
        conn.session_id = attached.get("sessionId")
    return conn
