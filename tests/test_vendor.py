from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from remote_drivers.webdriver import vendor
from remote_drivers.webdriver.driver import WebDriver
from remote_drivers.webdriver.errors import InvalidArgumentError, UnknownCommandError
from remote_drivers.webdriver.executor import Executor
from remote_drivers.webdriver.http_client import Request, Response
from remote_drivers.webdriver.session import Session


class _Remote:
    def __init__(self, value: Any = None) -> None:
        self.value = value
        self.requests: list[Request] = []

    def send(self, request: Request) -> Response:
        self.requests.append(request)
        return Response(200, {}, json.dumps({"value": self.value}))


def _driver(profile: vendor.VendorProfile | None, value: Any = None) -> tuple[WebDriver, _Remote]:
    remote = _Remote(value)
    executor = Executor(remote)
    if profile is not None:
        profile.configure(executor)
    return WebDriver(Session("s1"), executor), remote


def test_get_profile() -> None:
    assert vendor.get_profile("chrome") is vendor.CHROME
    assert vendor.get_profile("MicrosoftEdge") is vendor.EDGE
    assert vendor.get_profile("msedge") is vendor.EDGE
    assert vendor.get_profile("firefox") is None
    assert vendor.get_profile(None) is None


def test_cast_routes_use_vendor_prefix() -> None:
    assert vendor.CHROME.commands[vendor.ChromiumCommand.GET_CAST_SINKS] == (
        "GET",
        "/session/:sessionId/goog/cast/get_sinks",
    )
    assert vendor.EDGE.commands[vendor.ChromiumCommand.STOP_CASTING] == (
        "POST",
        "/session/:sessionId/ms/cast/stop_casting",
    )


def test_vendor_commands_need_profile() -> None:
    driver, _ = _driver(None)
    with pytest.raises(UnknownCommandError, match="Unrecognized command: launchApp"):
        vendor.launch_app(driver, "app")


def test_helpers_hit_vendor_routes() -> None:
    driver, remote = _driver(vendor.CHROME)
    vendor.launch_app(driver, "app-id")
    vendor.set_network_conditions(driver, {"offline": True, "latency": 5})
    vendor.delete_network_conditions(driver)
    vendor.set_permission(driver, "clipboard-read", "granted")
    vendor.set_cast_sink_to_use(driver, "TV")
    vendor.start_cast_tab_mirroring(driver, "TV")

    calls = [(r.method, r.path, r.data) for r in remote.requests]
    assert calls == [
        ("POST", "/session/s1/chromium/launch_app", {"id": "app-id"}),
        (
            "POST",
            "/session/s1/chromium/network_conditions",
            {"network_conditions": {"offline": True, "latency": 5}},
        ),
        ("DELETE", "/session/s1/chromium/network_conditions", {}),
        ("POST", "/session/s1/permissions", {"descriptor": {"name": "clipboard-read"}, "state": "granted"}),
        ("POST", "/session/s1/goog/cast/set_sink_to_use", {"sinkName": "TV"}),
        ("POST", "/session/s1/goog/cast/start_tab_mirroring", {"sinkName": "TV"}),
    ]


def test_getters_return_values() -> None:
    driver, remote = _driver(vendor.EDGE, [{"name": "TV"}])
    assert vendor.get_cast_sinks(driver) == [{"name": "TV"}]
    assert remote.requests[-1].path == "/session/s1/ms/cast/get_sinks"


def test_devtools_commands() -> None:
    driver, remote = _driver(vendor.CHROME, {"result": {"value": 2}})
    result = vendor.send_and_get_devtools_command(driver, "Runtime.evaluate", {"expression": "1+1"})
    assert result == {"result": {"value": 2}}
    assert remote.requests[-1].data == {"cmd": "Runtime.evaluate", "params": {"expression": "1+1"}}
    vendor.send_devtools_command(driver, "Network.enable")
    assert remote.requests[-1].path == "/session/s1/chromium/send_command"
    assert remote.requests[-1].data == {"cmd": "Network.enable", "params": {}}


def test_network_conditions_must_be_dict() -> None:
    driver, _ = _driver(vendor.CHROME)
    with pytest.raises(TypeError):
        vendor.set_network_conditions(driver, "offline")  # type: ignore[arg-type]


def test_set_download_path(tmp_path: Path) -> None:
    driver, remote = _driver(vendor.CHROME)
    with pytest.raises(InvalidArgumentError, match="not a directory"):
        vendor.set_download_path(driver, str(tmp_path / "missing"))
    vendor.set_download_path(driver, str(tmp_path))
    assert remote.requests[-1].data == {
        "cmd": "Page.setDownloadBehavior",
        "params": {"behavior": "allow", "downloadPath": str(tmp_path)},
    }
