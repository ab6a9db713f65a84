"""
Tests for the driver service (subprocess management).
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from remote_drivers.webdriver.config import DriverConfig
from remote_drivers.webdriver.net import find_free_port
from remote_drivers.webdriver.service import DriverService, ServiceBuilder, ServiceError


# ═══════════════════════════════════════════════════════════════════════════════
# BUILDER
# ═══════════════════════════════════════════════════════════════════════════════


def test_builder_requires_existing_executable(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        ServiceBuilder(str(tmp_path / "missing-driver"))


def test_builder_from_config_requires_driver_path() -> None:
    with pytest.raises(ValueError, match="WEBDRIVER_DRIVER_PATH"):
        ServiceBuilder.from_config(DriverConfig())


def test_builder_appends_port_argument() -> None:
    service = (
        ServiceBuilder(sys.executable)
        .add_arguments("--verbose")
        .set_port(4567)
        .set_hostname("127.0.0.1")
        .set_path("wd/hub")
        .build()
    )
    assert service.port == 4567
    assert service.args == ["--verbose", "--port=4567"]
    assert service._server_url() == "http://127.0.0.1:4567/wd/hub"


def test_builder_picks_free_port_by_default() -> None:
    service = ServiceBuilder(sys.executable).set_loopback(True).build()
    assert service.port > 0
    assert service.args == [f"--port={service.port}"]
    assert service._server_url() == f"http://localhost:{service.port}/"


def test_builder_rejects_negative_port() -> None:
    with pytest.raises(ValueError):
        ServiceBuilder(sys.executable).set_port(-1)


# ═══════════════════════════════════════════════════════════════════════════════
# SERVICE LIFECYCLE
# ═══════════════════════════════════════════════════════════════════════════════


def test_address_before_start() -> None:
    service = DriverService(sys.executable, port=1234)
    assert not service.is_running()
    with pytest.raises(ServiceError, match="Server has not been started."):
        service.address()


def test_start_rejects_bad_port() -> None:
    service = DriverService(sys.executable, port=0)
    address = service.start()
    with pytest.raises(ServiceError, match="Port must be > 0"):
        address.result(timeout=1)
    assert not service.is_running()


def test_early_exit_fails_address() -> None:
    port = find_free_port()
    service = DriverService(
        sys.executable, port=port, args=["-c", "import sys; sys.exit(3)"], hostname="127.0.0.1"
    )
    address = service.start(timeout=10)
    with pytest.raises(ServiceError, match="Server terminated early with status 3"):
        address.result(timeout=15)


def test_start_resolves_when_server_answers_and_kill_stops_it() -> None:
    port = find_free_port()
    # Any HTTP server will do: a non-JSON 404 on /status counts as ready.
    service = DriverService(
        sys.executable,
        port=port,
        args=["-m", "http.server", str(port), "--bind", "127.0.0.1"],
        hostname="127.0.0.1",
    )
    address = service.start(timeout=15)
    try:
        assert address.result(timeout=20) == f"http://127.0.0.1:{port}/"
        assert service.start() is address
        assert service.is_running()
    finally:
        process = service.process
        service.kill()
    assert not service.is_running()
    assert process is not None and process.poll() is not None


def test_kill_without_start_is_noop() -> None:
    DriverService(sys.executable, port=1234).kill()
