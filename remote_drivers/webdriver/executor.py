"""Command executor speaking JSON over HTTP.

The executor accepts both the legacy JSON wire protocol and the W3C protocol.
Each response is classified on its own: a ``value`` object without a top-level
``status`` is W3C shaped, anything else is treated as legacy.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

from .command import Command, Name
from .errors import UnknownCommandError, WebDriverError, check_legacy_response, throw_decoded_error
from .futures import chain
from .http_client import HttpClient, Response
from .routes import CommandSpec, build_request
from .session import Session
from .capabilities import Capabilities
from .wire import decode

if TYPE_CHECKING:
    from .config import DriverConfig
    from .vendor import VendorProfile

_MISSING = object()


def _try_parse(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return _MISSING


def parse_http_response(command: Command, response: Response) -> tuple[bool, Any]:
    """Classify ``response`` and return ``(is_w3c, value)``.

    Raises the decoded error if the response describes one.
    """
    if response.status < 200:
        raise WebDriverError(f"Unexpected HTTP response:\n{response.status} {response.body}")

    parsed = _try_parse(response.body)

    if isinstance(parsed, dict):
        value = parsed.get("value")
        is_w3c = isinstance(value, dict) and "status" not in parsed
        if not is_w3c:
            check_legacy_response(parsed)
            # Legacy new-session payloads carry sessionId at the top level.
            if command.name == Name.NEW_SESSION:
                value = parsed
        elif response.status > 399:
            throw_decoded_error(value)
        return is_w3c, value

    if parsed is not _MISSING:
        return False, parsed

    text = response.body.replace("\r\n", "\n")
    if response.status == 404:
        raise UnknownCommandError(command.name + ": " + text)
    if response.status >= 400:
        raise WebDriverError(text)
    return False, text or None


class Executor:
    """Executes commands against a remote end over HTTP.

    ``client`` may be a future, e.g. while a driver service is still starting;
    it is resolved on first use and cached.

    The executor does not serialize commands: callers sharing a session across
    threads must issue one command at a time.
    """

    def __init__(self, client: HttpClient | Future[HttpClient], *, logger: logging.Logger | None = None) -> None:
        self._client = client
        self._custom_commands: dict[str, CommandSpec] = {}
        self.log = logger or logging.getLogger("webdriver.http.Executor")
        self.w3c = False

    def define_command(self, name: str, method: str, path: str) -> None:
        """Register (or override) the route used for ``name``."""
        self._custom_commands[name] = CommandSpec(method, path)

    def _get_client(self) -> HttpClient:
        client = self._client
        if isinstance(client, Future):
            client = client.result()
            self._client = client
        return client

    def execute(self, command: Command, owner: Any = None) -> Any:
        request = build_request(self._custom_commands, command)
        self.log.debug(">>> %s %s", request.method, request.path)

        client = self._get_client()
        response = client.send(request)
        self.log.debug("<<< %s %s -> %d %s", request.method, request.path, response.status, response.body[:500])

        is_w3c, value = parse_http_response(command, response)

        if command.name == Name.NEW_SESSION:
            if not isinstance(value, dict) or not value.get("sessionId"):
                raise WebDriverError(f"Unable to parse new session response: {response.body}")
            # Recorded for callers only; later responses are classified independently.
            self.w3c = self.w3c or is_w3c
            capabilities = value.get("capabilities") or value.get("value") or {}
            return Session(str(value["sessionId"]), Capabilities(capabilities))

        if value is None:
            return None
        return decode(owner, value) if owner is not None else value


def create_executor(
    url: str | Future[str],
    *,
    config: DriverConfig | None = None,
    profile: VendorProfile | None = None,
) -> Executor:
    """Build an executor for ``url``, which may still be pending."""

    def _client(resolved_url: str) -> HttpClient:
        if config is None:
            return HttpClient(resolved_url)
        return HttpClient(
            resolved_url,
            proxy_url=config.proxy_url,
            keep_alive=config.keep_alive,
            user_agent=config.user_agent,
            timeout=config.http_timeout,
        )

    client: HttpClient | Future[HttpClient] = chain(url, _client) if isinstance(url, Future) else _client(url)
    executor = Executor(client)
    if profile is not None:
        profile.configure(executor)
    return executor
