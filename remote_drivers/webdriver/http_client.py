from __future__ import annotations

import base64
import errno
import http.client
import json
import logging
import socket
import sys
import time
import urllib.parse
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("webdriver.http.client")

CLIENT_VERSION = "0.1.0"
MAX_RETRIES = 3
RETRY_DELAY = 0.015
MAX_REDIRECTS = 20

# Network errors worth retrying: the remote end is usually just starting up or
# recycling a connection.
TRANSIENT_ERROR_CODES = frozenset({"ECONNABORTED", "ECONNRESET", "ECONNREFUSED", "EADDRINUSE", "EPIPE", "ETIMEDOUT"})

_DEFAULT_PORTS = {"http": 80, "https": 443}


class HttpClientError(Exception):
    """A request could not be completed at the network level."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


def _default_headers() -> dict[str, str]:
    return {"Accept": "application/json; charset=utf-8"}


@dataclass
class Request:
    method: str
    path: str
    data: Any = None
    headers: dict[str, str] = field(default_factory=_default_headers)


@dataclass
class Response:
    status: int
    headers: dict[str, str]
    body: str


@dataclass(frozen=True)
class _Endpoint:
    scheme: str
    host: str
    port: int | None
    auth: str | None = None

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}" if self.port else host

    @property
    def key(self) -> tuple[str, str, int]:
        return (self.scheme, self.host, self.port or _DEFAULT_PORTS.get(self.scheme, 80))


def _parse_endpoint(url: str) -> tuple[_Endpoint, str]:
    parsed = urllib.parse.urlsplit(url)
    if not parsed.hostname:
        raise ValueError(f"Invalid URL: {url}")
    auth = None
    if parsed.username is not None:
        auth = urllib.parse.unquote(parsed.username)
        if parsed.password is not None:
            auth += ":" + urllib.parse.unquote(parsed.password)
    endpoint = _Endpoint(parsed.scheme or "http", parsed.hostname, parsed.port, auth)
    path = parsed.path or "/"
    if parsed.query:
        path += "?" + parsed.query
    return endpoint, path


def _merge_headers(pairs: list[tuple[str, str]]) -> dict[str, str]:
    """Lower-case header names, joining repeated headers with ", "."""
    merged: dict[str, str] = {}
    for key, value in pairs:
        name = str(key).lower()
        merged[name] = f"{merged[name]}, {value}" if name in merged else str(value)
    return merged


def _basic(auth: str) -> str:
    return "Basic " + base64.b64encode(auth.encode("utf-8")).decode("ascii")


def _open_connection(scheme: str, host: str, port: int | None, timeout: float | None) -> http.client.HTTPConnection:
    if scheme == "https":
        return http.client.HTTPSConnection(host, port, timeout=timeout)
    return http.client.HTTPConnection(host, port, timeout=timeout)


def error_code(exc: BaseException) -> str:
    """Return a symbolic errno-style code for a network error."""
    if isinstance(exc, OSError) and exc.errno and exc.errno in errno.errorcode:
        return errno.errorcode[exc.errno]
    if isinstance(exc, (socket.timeout, TimeoutError)):
        return "ETIMEDOUT"
    if isinstance(exc, ConnectionResetError):
        return "ECONNRESET"
    if isinstance(exc, ConnectionRefusedError):
        return "ECONNREFUSED"
    if isinstance(exc, ConnectionAbortedError):
        return "ECONNABORTED"
    if isinstance(exc, BrokenPipeError):
        return "EPIPE"
    return type(exc).__name__


class HttpClient:
    """Sends requests to a single remote end, optionally through a proxy."""

    def __init__(
        self,
        server_url: str,
        *,
        proxy_url: str | None = None,
        keep_alive: bool = False,
        user_agent: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._endpoint, self._base_path = _parse_endpoint(server_url)
        self._proxy: _Endpoint | None = _parse_endpoint(proxy_url)[0] if proxy_url else None
        self.keep_alive = keep_alive
        self.user_agent = user_agent or f"webdriver-client/{CLIENT_VERSION} (python {sys.platform})"
        self.timeout = timeout
        self._connections: dict[tuple[str, str, int], http.client.HTTPConnection] = {}

    @property
    def server_url(self) -> str:
        return f"{self._endpoint.scheme}://{self._endpoint.netloc}{self._base_path}"

    def _join(self, path: str) -> str:
        base = self._base_path
        if base.endswith("/") and path.startswith("/"):
            return base + path[1:]
        return base + path

    def send(self, request: Request) -> Response:
        headers = dict(request.headers)
        headers["User-Agent"] = self.user_agent
        headers["Content-Length"] = "0"

        body: bytes | None = None
        if request.method in ("POST", "PUT"):
            body = json.dumps(request.data if request.data is not None else {}).encode("utf-8")
            headers["Content-Type"] = "application/json;charset=UTF-8"
            headers["Content-Length"] = str(len(body))

        if self._endpoint.auth:
            headers["Authorization"] = _basic(self._endpoint.auth)

        return self._send(self._endpoint, request.method, self._join(request.path), headers, body)

    def close(self) -> None:
        for conn in self._connections.values():
            with suppress(Exception):
                conn.close()
        self._connections.clear()

    def _send(
        self,
        endpoint: _Endpoint,
        method: str,
        path: str,
        headers: dict[str, str],
        body: bytes | None,
        *,
        redirects: int = 0,
    ) -> Response:
        status, response_headers, raw = self._send_with_retry(endpoint, method, path, headers, body)

        if status in (302, 303) and response_headers.get("location"):
            if redirects >= MAX_REDIRECTS:
                raise HttpClientError(f"Too many redirects while requesting {path}")
            location = urllib.parse.urlsplit(response_headers["location"])
            if location.hostname:
                target, target_path = _parse_endpoint(response_headers["location"])
            else:
                target = endpoint
                target_path = location.path or "/"
                if location.query:
                    target_path += "?" + location.query
            redirect_headers = {
                "Accept": headers.get("Accept", _default_headers()["Accept"]),
                "User-Agent": headers.get("User-Agent", self.user_agent),
                "Content-Length": "0",
            }
            if target.auth:
                redirect_headers["Authorization"] = _basic(target.auth)
            logger.debug("Following %d redirect to %s", status, response_headers["location"])
            return self._send(target, "GET", target_path, redirect_headers, None, redirects=redirects + 1)

        text = raw.decode("utf-8", errors="replace").replace("\0", "")
        return Response(status, response_headers, text)

    def _send_with_retry(
        self,
        endpoint: _Endpoint,
        method: str,
        path: str,
        headers: dict[str, str],
        body: bytes | None,
    ) -> tuple[int, dict[str, str], bytes]:
        retries = 0
        while True:
            try:
                return self._send_once(endpoint, method, path, headers, body)
            except OSError as exc:
                code = error_code(exc)
                if code in TRANSIENT_ERROR_CODES and retries < MAX_RETRIES:
                    retries += 1
                    logger.debug("Retrying %s %s after %s (attempt %d)", method, path, code, retries)
                    time.sleep(RETRY_DELAY)
                    continue
                raise HttpClientError(f"{code} {exc}", code=code) from exc
            except (http.client.HTTPException, ValueError) as exc:
                # Malformed paths or header values are rejected before anything is sent.
                code = type(exc).__name__
                raise HttpClientError(f"{code} {exc}", code=code) from exc

    def _send_once(
        self,
        endpoint: _Endpoint,
        method: str,
        path: str,
        headers: dict[str, str],
        body: bytes | None,
    ) -> tuple[int, dict[str, str], bytes]:
        headers = dict(headers)
        target = path
        via = endpoint
        if self._proxy is not None:
            # Proxied requests carry the absolute URI and the real destination in Host.
            via = self._proxy
            target = f"{endpoint.scheme}://{endpoint.netloc}{path}"
            headers["Host"] = endpoint.netloc
            if self._proxy.auth:
                headers["Proxy-Authorization"] = _basic(self._proxy.auth)

        conn = self._connection(via)
        try:
            conn.request(method, target, body=body, headers=headers)
            resp = conn.getresponse()
            raw = resp.read()
            status = int(resp.status)
            response_headers = _merge_headers(resp.getheaders())
        except BaseException:
            self._drop(via, conn)
            raise
        if not self.keep_alive:
            self._drop(via, conn)
        return status, response_headers, raw

    def _connection(self, endpoint: _Endpoint) -> http.client.HTTPConnection:
        if self.keep_alive:
            conn = self._connections.get(endpoint.key)
            if conn is not None:
                return conn
        conn = _open_connection(endpoint.scheme, endpoint.host, endpoint.port, self.timeout)
        if self.keep_alive:
            self._connections[endpoint.key] = conn
        return conn

    def _drop(self, endpoint: _Endpoint, conn: http.client.HTTPConnection) -> None:
        if self._connections.get(endpoint.key) is conn:
            del self._connections[endpoint.key]
        with suppress(Exception):
            conn.close()
