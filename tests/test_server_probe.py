"""
Tests for server readiness probes and the command line entry point.
"""

from __future__ import annotations

import json
import socket
import threading
from contextlib import closing
from http.server import BaseHTTPRequestHandler, HTTPServer
from threading import Thread

import pytest

from remote_drivers.webdriver import main as cli
from remote_drivers.webdriver.net import find_free_port
from remote_drivers.webdriver.server_probe import CancellationError, get_status, wait_for_server, wait_for_url


def _start_test_server(status: int = 200, body: bytes = b'{"value": {"ready": true, "message": "ok"}}') -> tuple[str, Thread, HTTPServer]:
    class Handler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802
            self.send_response(status)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format: str, *args: object) -> None:  # noqa: A002
            return

    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    server = HTTPServer(("127.0.0.1", port), Handler)
    thread = Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return f"http://127.0.0.1:{port}/", thread, server


def _unused_url() -> str:
    return f"http://127.0.0.1:{find_free_port()}/"


def test_get_status() -> None:
    url, thread, srv = _start_test_server()
    try:
        assert get_status(url) == {"ready": True, "message": "ok"}
    finally:
        srv.shutdown()
        thread.join(timeout=1)


def test_wait_for_server_returns_status() -> None:
    url, thread, srv = _start_test_server()
    try:
        assert wait_for_server(url, 2)["ready"] is True
    finally:
        srv.shutdown()
        thread.join(timeout=1)


def test_wait_for_server_accepts_unknown_command() -> None:
    url, thread, srv = _start_test_server(404, b"<html>no status here</html>")
    try:
        assert wait_for_server(url, 2) == {}
    finally:
        srv.shutdown()
        thread.join(timeout=1)


def test_wait_for_server_times_out() -> None:
    url = _unused_url()
    with pytest.raises(TimeoutError, match="Timed out waiting for the WebDriver server at " + url):
        wait_for_server(url, 0.2)


def test_wait_for_server_is_cancellable() -> None:
    token = threading.Event()
    token.set()
    with pytest.raises(CancellationError):
        wait_for_server(_unused_url(), 5, token)


def test_wait_for_url() -> None:
    url, thread, srv = _start_test_server(200, b"hello")
    try:
        wait_for_url(url, 2)
    finally:
        srv.shutdown()
        thread.join(timeout=1)
    with pytest.raises(TimeoutError, match="Timed out waiting for the URL to return 2xx"):
        wait_for_url(_unused_url(), 0.2)


# ═══════════════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════════════


def test_cli_status_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    url, thread, srv = _start_test_server()
    try:
        assert cli.main(["status", url]) == 0
    finally:
        srv.shutdown()
        thread.join(timeout=1)
    assert json.loads(capsys.readouterr().out) == {"message": "ok", "ready": True}


def test_cli_wait_fails_for_dead_server(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEBDRIVER_LOG_LEVEL", "ERROR")
    assert cli.main(["wait", _unused_url(), "--timeout", "0.1"]) == 1
