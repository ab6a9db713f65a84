from __future__ import annotations

import contextlib
import logging
import os
import signal
import subprocess
import threading
import time
from collections.abc import Mapping, Sequence
from concurrent.futures import Future, InvalidStateError
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Union

from .net import find_free_port, get_address, get_loopback_address
from .server_probe import CancellationError, wait_for_server

if TYPE_CHECKING:
    from .config import DriverConfig

logger = logging.getLogger("webdriver.service")

Stdio = Union[str, int, IO[Any], None]


class ServiceError(RuntimeError):
    """The driver service process failed to start or exited unexpectedly."""


def _settle(fut: Future[Any], *, result: Any = None, error: BaseException | None = None) -> None:
    # Early termination and readiness race to settle the same future.
    with contextlib.suppress(InvalidStateError):
        if error is not None:
            fut.set_exception(error)
        else:
            fut.set_result(result)


class DriverService:
    """Manages a driver server subprocess (chromedriver, geckodriver, ...)."""

    DEFAULT_START_TIMEOUT = 30.0

    def __init__(
        self,
        executable: str,
        *,
        port: int,
        args: Sequence[str] | None = None,
        hostname: str | None = None,
        loopback: bool = False,
        path: str = "/",
        env: Mapping[str, str] | None = None,
        stdio: Stdio = "ignore",
    ) -> None:
        self.executable = executable
        self.port = port
        self.args = list(args or [])
        self.hostname = hostname
        self.loopback = loopback
        self.path = path or "/"
        self.env = dict(env) if env is not None else dict(os.environ)
        self.stdio = stdio
        self.process: subprocess.Popen | None = None
        self._address: Future[str] | None = None
        self._termination: ServiceError | None = None
        self._lock = threading.Lock()

    def address(self) -> Future[str]:
        if self._address is None:
            raise ServiceError("Server has not been started.")
        return self._address

    def is_running(self) -> bool:
        return self._address is not None

    def _server_url(self) -> str:
        hostname = self.hostname
        if not hostname:
            hostname = (not self.loopback and get_address()) or get_loopback_address()
        if ":" in hostname:
            hostname = f"[{hostname}]"
        path = self.path if self.path.startswith("/") else "/" + self.path
        return f"http://{hostname}:{self.port}{path}"

    def _stdio(self) -> Any:
        if self.stdio == "ignore":
            return subprocess.DEVNULL
        if self.stdio == "inherit":
            return None
        return self.stdio

    def start(self, timeout: float | None = None) -> Future[str]:
        """Start the server; the returned future resolves to its base URL.

        Repeated calls return the same future until ``kill()`` is called.
        """
        with self._lock:
            if self._address is not None:
                return self._address
            address: Future[str] = Future()
            self._address = address

        timeout = self.DEFAULT_START_TIMEOUT if timeout is None else timeout
        if self.port <= 0:
            self._address = None
            _settle(address, error=ServiceError(f"Port must be > 0: {self.port}"))
            return address

        command = [self.executable, *self.args]
        stdio = self._stdio()
        try:
            process = subprocess.Popen(  # noqa: S603
                command,
                env=self.env,
                stdin=subprocess.DEVNULL,
                stdout=stdio,
                stderr=stdio,
            )
        except OSError as exc:
            self._address = None
            _settle(address, error=ServiceError(f"Failed to start {self.executable}: {exc}"))
            return address

        self.process = process
        self._termination = None
        url = self._server_url()
        logger.info("Started driver service %s (pid %s) at %s", self.executable, process.pid, url)

        cancel_token = threading.Event()
        threading.Thread(
            target=self._watch, args=(process, address, cancel_token), name="driver-service-watch", daemon=True
        ).start()
        threading.Thread(
            target=self._await_ready,
            args=(url, timeout, address, cancel_token),
            name="driver-service-ready",
            daemon=True,
        ).start()
        return address

    def _watch(self, process: subprocess.Popen, address: Future[str], cancel_token: threading.Event) -> None:
        code = process.wait()
        if code < 0:
            try:
                name = signal.Signals(-code).name
            except ValueError:
                name = f"signal {-code}"
            error = ServiceError(f"Server was killed with {name}")
        else:
            error = ServiceError(f"Server terminated early with status {code}")
        self._termination = error
        cancel_token.set()

        with self._lock:
            if self.process is process:
                self.process = None
                self._address = None
        _settle(address, error=error)
        logger.debug("Driver service %s exited: %s", self.executable, error)

    def _await_ready(self, url: str, timeout: float, address: Future[str], cancel_token: threading.Event) -> None:
        try:
            wait_for_server(url, timeout, cancel_token)
        except CancellationError:
            _settle(address, error=self._termination or ServiceError("Server terminated early"))
        except Exception as exc:  # noqa: BLE001
            _settle(address, error=exc)
        else:
            _settle(address, result=url)

    def kill(self, *, timeout: float = 2.0) -> None:
        """Stop the server process (SIGTERM, then SIGKILL) and reset state."""
        with self._lock:
            process = self.process
            self.process = None
            self._address = None
        if process is None:
            return

        with contextlib.suppress(Exception):
            process.terminate()

        deadline = time.time() + max(0.1, float(timeout))
        while time.time() < deadline:
            if process.poll() is not None:
                logger.info("Stopped driver service %s", self.executable)
                return
            time.sleep(0.05)

        # Escalate to kill.
        with contextlib.suppress(Exception):
            process.kill()
        logger.info("Killed driver service %s", self.executable)


class ServiceBuilder:
    """Configures and builds a ``DriverService``."""

    def __init__(self, exe: str) -> None:
        if not Path(exe).exists():
            raise FileNotFoundError(f"The specified executable path does not exist: {exe}")
        self.exe = exe
        self._args: list[str] = []
        self._hostname: str | None = None
        self._loopback = False
        self._path = "/"
        self._port = 0
        self._env: dict[str, str] | None = None
        self._stdio: Stdio = "ignore"

    @classmethod
    def from_config(cls, config: DriverConfig) -> ServiceBuilder:
        if not config.driver_path:
            raise ValueError("No driver executable configured (set WEBDRIVER_DRIVER_PATH)")
        return cls(config.driver_path)

    def add_arguments(self, *args: str) -> ServiceBuilder:
        self._args.extend(args)
        return self

    def set_hostname(self, hostname: str) -> ServiceBuilder:
        self._hostname = hostname
        return self

    def set_loopback(self, loopback: bool) -> ServiceBuilder:
        self._loopback = loopback
        return self

    def set_path(self, base_path: str) -> ServiceBuilder:
        self._path = base_path
        return self

    def set_port(self, port: int) -> ServiceBuilder:
        if port < 0:
            raise ValueError(f"port must be >= 0: {port}")
        self._port = port
        return self

    def set_environment(self, env: Mapping[str, str]) -> ServiceBuilder:
        self._env = dict(env)
        return self

    def set_stdio(self, config: Stdio) -> ServiceBuilder:
        self._stdio = config
        return self

    def build(self) -> DriverService:
        port = self._port or find_free_port()
        return DriverService(
            self.exe,
            port=port,
            args=[*self._args, f"--port={port}"],
            hostname=self._hostname,
            loopback=self._loopback,
            path=self._path,
            env=self._env,
            stdio=self._stdio,
        )
