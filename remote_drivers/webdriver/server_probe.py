"""Probe a WebDriver server until it is ready to accept commands."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

from .command import Command, Name
from .errors import UnknownCommandError, UnsupportedOperationError, WebDriverError
from .executor import Executor
from .http_client import HttpClient, HttpClientError, Request

logger = logging.getLogger("webdriver.http")

POLL_INTERVAL = 0.05


class CancellationError(Exception):
    """A wait was abandoned because its cancellation token was set."""


def get_status(url: str, *, timeout: float | None = None) -> Any:
    client = HttpClient(url, timeout=timeout)
    return Executor(client).execute(Command(Name.GET_SERVER_STATUS))


def wait_for_server(url: str, timeout: float, cancel_token: threading.Event | None = None) -> Any:
    """Poll the server's status endpoint until it answers.

    Servers that do not implement the status command but reply with a
    protocol error count as ready.
    """
    start = time.monotonic()
    while True:
        if cancel_token is not None and cancel_token.is_set():
            raise CancellationError(url)
        try:
            return get_status(url, timeout=max(POLL_INTERVAL, timeout))
        except (UnknownCommandError, UnsupportedOperationError):
            return {}
        except (HttpClientError, WebDriverError) as exc:
            logger.debug("Server at %s not ready: %s", url, exc)

        if time.monotonic() - start > timeout:
            raise TimeoutError("Timed out waiting for the WebDriver server at " + url)
        if cancel_token is not None:
            if cancel_token.wait(POLL_INTERVAL):
                raise CancellationError(url)
        else:
            time.sleep(POLL_INTERVAL)


def wait_for_url(url: str, timeout: float, cancel_token: threading.Event | None = None) -> None:
    """Poll ``url`` with GET until it returns a 2xx status."""
    client = HttpClient(url, timeout=max(POLL_INTERVAL, timeout))
    start = time.monotonic()
    while True:
        if cancel_token is not None and cancel_token.is_set():
            raise CancellationError(url)
        try:
            response = client.send(Request("GET", ""))
            if 199 < response.status < 300:
                return
        except HttpClientError as exc:
            logger.debug("URL %s not ready: %s", url, exc)

        if time.monotonic() - start > timeout:
            raise TimeoutError("Timed out waiting for the URL to return 2xx: " + url)
        if cancel_token is not None:
            if cancel_token.wait(POLL_INTERVAL):
                raise CancellationError(url)
        else:
            time.sleep(POLL_INTERVAL)
