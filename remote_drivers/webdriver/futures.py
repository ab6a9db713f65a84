from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def resolve(value: T | Future[T], timeout: float | None = None) -> T:
    """Block until ``value`` is available if it is a future; return it as is otherwise."""
    if isinstance(value, Future):
        return value.result(timeout=timeout)
    return value


def resolved(value: T) -> Future[T]:
    fut: Future[T] = Future()
    fut.set_result(value)
    return fut


def failed(exc: BaseException) -> Future[Any]:
    fut: Future[Any] = Future()
    fut.set_exception(exc)
    return fut


def chain(source: Future[T], fn: Callable[[T], R]) -> Future[R]:
    """Return a future resolved with ``fn(result)`` once ``source`` completes.

    Failures of ``source`` or ``fn`` propagate to the returned future.
    """
    out: Future[R] = Future()

    def _done(fut: Future[T]) -> None:
        try:
            out.set_result(fn(fut.result()))
        except BaseException as exc:  # noqa: BLE001
            out.set_exception(exc)

    source.add_done_callback(_done)
    return out
