"""Vendor profiles: extra commands and quirks of Chromium-family drivers.

A profile is plain data. ``configure`` registers its commands on an executor;
the module-level helpers issue them through a driver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .command import Command
from .errors import InvalidArgumentError

if TYPE_CHECKING:
    from .driver import WebDriver
    from .executor import Executor


class ChromiumCommand:
    LAUNCH_APP = "launchApp"
    GET_NETWORK_CONDITIONS = "getNetworkConditions"
    SET_NETWORK_CONDITIONS = "setNetworkConditions"
    DELETE_NETWORK_CONDITIONS = "deleteNetworkConditions"
    SEND_DEVTOOLS_COMMAND = "sendDevToolsCommand"
    SEND_AND_GET_DEVTOOLS_COMMAND = "sendAndGetDevToolsCommand"
    SET_PERMISSION = "setPermission"
    GET_CAST_SINKS = "getCastSinks"
    SET_CAST_SINK_TO_USE = "setCastSinkToUse"
    START_CAST_DESKTOP_MIRRORING = "startDesktopMirroring"
    START_CAST_TAB_MIRRORING = "setCastTabMirroring"
    GET_CAST_ISSUE_MESSAGE = "getCastIssueMessage"
    STOP_CASTING = "stopCasting"


def chromium_commands(prefix: str) -> dict[str, tuple[str, str]]:
    """Routes for Chromium vendor commands; cast routes live under ``prefix``."""
    return {
        ChromiumCommand.LAUNCH_APP: ("POST", "/session/:sessionId/chromium/launch_app"),
        ChromiumCommand.GET_NETWORK_CONDITIONS: ("GET", "/session/:sessionId/chromium/network_conditions"),
        ChromiumCommand.SET_NETWORK_CONDITIONS: ("POST", "/session/:sessionId/chromium/network_conditions"),
        ChromiumCommand.DELETE_NETWORK_CONDITIONS: ("DELETE", "/session/:sessionId/chromium/network_conditions"),
        ChromiumCommand.SEND_DEVTOOLS_COMMAND: ("POST", "/session/:sessionId/chromium/send_command"),
        ChromiumCommand.SEND_AND_GET_DEVTOOLS_COMMAND: (
            "POST",
            "/session/:sessionId/chromium/send_command_and_get_result",
        ),
        ChromiumCommand.SET_PERMISSION: ("POST", "/session/:sessionId/permissions"),
        ChromiumCommand.GET_CAST_SINKS: ("GET", f"/session/:sessionId/{prefix}/cast/get_sinks"),
        ChromiumCommand.SET_CAST_SINK_TO_USE: ("POST", f"/session/:sessionId/{prefix}/cast/set_sink_to_use"),
        ChromiumCommand.START_CAST_DESKTOP_MIRRORING: (
            "POST",
            f"/session/:sessionId/{prefix}/cast/start_desktop_mirroring",
        ),
        ChromiumCommand.START_CAST_TAB_MIRRORING: ("POST", f"/session/:sessionId/{prefix}/cast/start_tab_mirroring"),
        ChromiumCommand.GET_CAST_ISSUE_MESSAGE: ("GET", f"/session/:sessionId/{prefix}/cast/get_issue_message"),
        ChromiumCommand.STOP_CASTING: ("POST", f"/session/:sessionId/{prefix}/cast/stop_casting"),
    }


@dataclass(frozen=True)
class VendorProfile:
    name: str
    command_prefix: str
    options_capability: str
    commands: dict[str, tuple[str, str]] = field(default_factory=dict)
    # Chromium accepts a single noProxy string rather than a list.
    single_no_proxy: bool = False

    def configure(self, executor: Executor) -> Executor:
        for command_name, (method, path) in self.commands.items():
            executor.define_command(command_name, method, path)
        return executor


CHROME = VendorProfile(
    name="chrome",
    command_prefix="goog",
    options_capability="goog:chromeOptions",
    commands=chromium_commands("goog"),
    single_no_proxy=True,
)

EDGE = VendorProfile(
    name="MicrosoftEdge",
    command_prefix="ms",
    options_capability="ms:edgeOptions",
    commands=chromium_commands("ms"),
    single_no_proxy=True,
)

PROFILES = {profile.name: profile for profile in (CHROME, EDGE)}


def get_profile(name: str | None) -> VendorProfile | None:
    if not name:
        return None
    key = name.strip()
    if key.lower() in ("edge", "msedge"):
        key = EDGE.name
    return PROFILES.get(key) or PROFILES.get(key.lower())


# Driver helpers.


def launch_app(driver: WebDriver, app_id: str) -> None:
    driver.execute(Command(ChromiumCommand.LAUNCH_APP).set_parameter("id", app_id))


def get_network_conditions(driver: WebDriver) -> dict[str, Any]:
    return driver.execute(Command(ChromiumCommand.GET_NETWORK_CONDITIONS))


def delete_network_conditions(driver: WebDriver) -> None:
    driver.execute(Command(ChromiumCommand.DELETE_NETWORK_CONDITIONS))


def set_network_conditions(driver: WebDriver, conditions: dict[str, Any]) -> None:
    if not isinstance(conditions, dict):
        raise TypeError("set_network_conditions called with non-network-conditions parameter")
    driver.execute(Command(ChromiumCommand.SET_NETWORK_CONDITIONS).set_parameter("network_conditions", conditions))


def send_devtools_command(driver: WebDriver, cmd: str, params: dict[str, Any] | None = None) -> None:
    driver.execute(
        Command(ChromiumCommand.SEND_DEVTOOLS_COMMAND).set_parameter("cmd", cmd).set_parameter("params", params or {})
    )


def send_and_get_devtools_command(driver: WebDriver, cmd: str, params: dict[str, Any] | None = None) -> Any:
    return driver.execute(
        Command(ChromiumCommand.SEND_AND_GET_DEVTOOLS_COMMAND)
        .set_parameter("cmd", cmd)
        .set_parameter("params", params or {})
    )


def set_permission(driver: WebDriver, name: str, state: str) -> None:
    driver.execute(
        Command(ChromiumCommand.SET_PERMISSION).set_parameter("descriptor", {"name": name}).set_parameter("state", state)
    )


def set_download_path(driver: WebDriver, path: str) -> None:
    if not path or not isinstance(path, str):
        raise InvalidArgumentError("invalid download path")
    if not Path(path).is_dir():
        raise InvalidArgumentError("not a directory: " + path)
    send_devtools_command(driver, "Page.setDownloadBehavior", {"behavior": "allow", "downloadPath": path})


def get_cast_sinks(driver: WebDriver) -> list[dict[str, Any]]:
    return driver.execute(Command(ChromiumCommand.GET_CAST_SINKS))


def set_cast_sink_to_use(driver: WebDriver, device_name: str) -> None:
    driver.execute(Command(ChromiumCommand.SET_CAST_SINK_TO_USE).set_parameter("sinkName", device_name))


def start_desktop_mirroring(driver: WebDriver, device_name: str) -> None:
    driver.execute(Command(ChromiumCommand.START_CAST_DESKTOP_MIRRORING).set_parameter("sinkName", device_name))


def start_cast_tab_mirroring(driver: WebDriver, device_name: str) -> None:
    driver.execute(Command(ChromiumCommand.START_CAST_TAB_MIRRORING).set_parameter("sinkName", device_name))


def get_cast_issue_message(driver: WebDriver) -> str:
    return driver.execute(Command(ChromiumCommand.GET_CAST_ISSUE_MESSAGE))


def stop_casting(driver: WebDriver, device_name: str) -> None:
    driver.execute(Command(ChromiumCommand.STOP_CASTING).set_parameter("sinkName", device_name))
