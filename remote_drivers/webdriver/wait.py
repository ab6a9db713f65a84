"""
Waiting for asynchronous browser state.

Provides wait_until, which either bounds a pending future with a timeout or
polls a condition until it yields a truthy value.
"""

from __future__ import annotations

import concurrent.futures
import time
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any

from .elements import Element
from .errors import WebDriverTimeoutError
from .futures import resolve
from .until import Condition, ElementCondition


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _message_prefix(message: str | Callable[[], str] | None) -> str:
    if not message:
        return ""
    try:
        text = message() if callable(message) else message
    except Exception as exc:  # noqa: BLE001
        # A broken message callback must not hide the timeout itself.
        return f"{exc}\n"
    return f"{text}\n"


def wait_until(
    driver: Any,
    target: Any,
    timeout: float = 0.0,
    message: str | Callable[[], str] | None = None,
    poll_interval: float = 0.2,
) -> Any:
    """
    Wait for a future to resolve or for a condition to hold.

    Args:
        driver: Driver passed to condition functions.
        target: A Future, a Condition, or a callable taking the driver.
        timeout: Maximum wait in seconds; 0 waits indefinitely.
        message: Prefix for the timeout error, or a callable producing it.
        poll_interval: Delay between condition evaluations in seconds.

    Returns:
        The future's result, or the first truthy value the condition produced.

    Raises:
        WebDriverTimeoutError: The timeout elapsed first.
        TypeError: ``target`` is not waitable, or an ElementCondition produced
            something other than an Element.
    """
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
        raise ValueError(f"timeout must be a number >= 0: {timeout}")
    if isinstance(poll_interval, bool) or not isinstance(poll_interval, (int, float)) or poll_interval < 0:
        raise ValueError(f"poll_interval must be a number >= 0: {poll_interval}")

    if isinstance(target, Future):
        if not timeout:
            return target.result()
        start = time.monotonic()
        try:
            return target.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            raise WebDriverTimeoutError(
                f"{_message_prefix(message)}Timed out waiting for future to resolve after {_elapsed_ms(start)}ms"
            ) from None

    fn: Callable[[Any], Any]
    if isinstance(target, Condition):
        message = message or target.description()
        fn = target.fn
    elif callable(target):
        fn = target
    else:
        raise TypeError("Wait condition must be a future, a function, or a Condition object")

    start = time.monotonic()
    while True:
        value = resolve(fn(driver))
        if value:
            break
        elapsed = _elapsed_ms(start)
        if timeout and elapsed >= timeout * 1000:
            raise WebDriverTimeoutError(f"{_message_prefix(message)}Wait timed out after {elapsed}ms")
        time.sleep(poll_interval)

    if isinstance(target, ElementCondition) and not isinstance(value, Element):
        raise TypeError(f"ElementCondition did not resolve to an Element: {type(value).__name__}")
    return value
