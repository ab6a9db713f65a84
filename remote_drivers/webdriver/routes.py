"""Translate commands into HTTP requests.

Standard commands map to a fixed ``(method, path)`` pair. A few commands the
protocol has no endpoint for are rewritten into an execute-script call that
runs an atom (see ``atoms.py``).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from . import atoms
from .command import Command, Name
from .errors import InvalidArgumentError, UnknownCommandError
from .http_client import Request
from .wire import ELEMENT_ID_KEY, LEGACY_ELEMENT_ID_KEY, SHADOW_ROOT_ID_KEY

logger = logging.getLogger("webdriver.http")

_PATH_PARAM_RE = re.compile(r"/:(\w+)\b")


@dataclass(frozen=True)
class CommandSpec:
    method: str
    path: str


Rewrite = Callable[[Command], Command]
Route = Union[CommandSpec, Rewrite]


def get(path: str) -> CommandSpec:
    return CommandSpec("GET", path)


def post(path: str) -> CommandSpec:
    return CommandSpec("POST", path)


def delete(path: str) -> CommandSpec:
    return CommandSpec("DELETE", path)


def to_execute_atom_command(command: Command, atom: atoms.JsFunction, *param_names: str) -> Command:
    """Rewrite ``command`` as an execute-script call of ``atom``.

    The named parameters become the script arguments, in order.
    """
    return (
        Command(Name.EXECUTE_SCRIPT)
        .set_parameter("sessionId", command.get_parameter("sessionId"))
        .set_parameter("script", f"return ({atom.source}).apply(null, arguments)")
        .set_parameter("args", [command.get_parameter(name) for name in param_names])
    )


W3C_COMMAND_MAP: dict[str, Route] = {
    # Session management.
    Name.NEW_SESSION: post("/session"),
    Name.QUIT: delete("/session/:sessionId"),
    # Server status.
    Name.GET_SERVER_STATUS: get("/status"),
    # Timeouts.
    Name.GET_TIMEOUT: get("/session/:sessionId/timeouts"),
    Name.SET_TIMEOUT: post("/session/:sessionId/timeouts"),
    # Navigation.
    Name.GET_CURRENT_URL: get("/session/:sessionId/url"),
    Name.GET: post("/session/:sessionId/url"),
    Name.GO_BACK: post("/session/:sessionId/back"),
    Name.GO_FORWARD: post("/session/:sessionId/forward"),
    Name.REFRESH: post("/session/:sessionId/refresh"),
    # Page inspection.
    Name.GET_PAGE_SOURCE: get("/session/:sessionId/source"),
    Name.GET_TITLE: get("/session/:sessionId/title"),
    # Script execution.
    Name.EXECUTE_SCRIPT: post("/session/:sessionId/execute/sync"),
    Name.EXECUTE_ASYNC_SCRIPT: post("/session/:sessionId/execute/async"),
    # Frames.
    Name.SWITCH_TO_FRAME: post("/session/:sessionId/frame"),
    Name.SWITCH_TO_FRAME_PARENT: post("/session/:sessionId/frame/parent"),
    # Windows.
    Name.GET_CURRENT_WINDOW_HANDLE: get("/session/:sessionId/window"),
    Name.CLOSE: delete("/session/:sessionId/window"),
    Name.SWITCH_TO_WINDOW: post("/session/:sessionId/window"),
    Name.SWITCH_TO_NEW_WINDOW: post("/session/:sessionId/window/new"),
    Name.GET_WINDOW_HANDLES: get("/session/:sessionId/window/handles"),
    Name.GET_WINDOW_RECT: get("/session/:sessionId/window/rect"),
    Name.SET_WINDOW_RECT: post("/session/:sessionId/window/rect"),
    Name.MAXIMIZE_WINDOW: post("/session/:sessionId/window/maximize"),
    Name.MINIMIZE_WINDOW: post("/session/:sessionId/window/minimize"),
    Name.FULLSCREEN_WINDOW: post("/session/:sessionId/window/fullscreen"),
    # Actions.
    Name.ACTIONS: post("/session/:sessionId/actions"),
    Name.CLEAR_ACTIONS: delete("/session/:sessionId/actions"),
    Name.PRINT_PAGE: post("/session/:sessionId/print"),
    # Locating elements.
    Name.GET_ACTIVE_ELEMENT: get("/session/:sessionId/element/active"),
    Name.FIND_ELEMENT: post("/session/:sessionId/element"),
    Name.FIND_ELEMENTS: post("/session/:sessionId/elements"),
    Name.FIND_ELEMENTS_RELATIVE: lambda cmd: to_execute_atom_command(cmd, atoms.FIND_ELEMENTS, "args"),
    Name.FIND_CHILD_ELEMENT: post("/session/:sessionId/element/:id/element"),
    Name.FIND_CHILD_ELEMENTS: post("/session/:sessionId/element/:id/elements"),
    # Element interaction.
    Name.GET_ELEMENT_TAG_NAME: get("/session/:sessionId/element/:id/name"),
    Name.GET_DOM_ATTRIBUTE: get("/session/:sessionId/element/:id/attribute/:name"),
    Name.GET_ELEMENT_ATTRIBUTE: lambda cmd: to_execute_atom_command(cmd, atoms.GET_ATTRIBUTE, "id", "name"),
    Name.GET_ELEMENT_PROPERTY: get("/session/:sessionId/element/:id/property/:name"),
    Name.GET_ELEMENT_VALUE_OF_CSS_PROPERTY: get("/session/:sessionId/element/:id/css/:propertyName"),
    Name.GET_ELEMENT_RECT: get("/session/:sessionId/element/:id/rect"),
    Name.CLEAR_ELEMENT: post("/session/:sessionId/element/:id/clear"),
    Name.CLICK_ELEMENT: post("/session/:sessionId/element/:id/click"),
    Name.SEND_KEYS_TO_ELEMENT: post("/session/:sessionId/element/:id/value"),
    Name.GET_ELEMENT_TEXT: get("/session/:sessionId/element/:id/text"),
    Name.GET_COMPUTED_ROLE: get("/session/:sessionId/element/:id/computedrole"),
    Name.GET_COMPUTED_LABEL: get("/session/:sessionId/element/:id/computedlabel"),
    Name.IS_ELEMENT_ENABLED: get("/session/:sessionId/element/:id/enabled"),
    Name.IS_ELEMENT_SELECTED: get("/session/:sessionId/element/:id/selected"),
    Name.IS_ELEMENT_DISPLAYED: lambda cmd: to_execute_atom_command(cmd, atoms.IS_DISPLAYED, "id"),
    # Cookies.
    Name.GET_ALL_COOKIES: get("/session/:sessionId/cookie"),
    Name.ADD_COOKIE: post("/session/:sessionId/cookie"),
    Name.DELETE_ALL_COOKIES: delete("/session/:sessionId/cookie"),
    Name.GET_COOKIE: get("/session/:sessionId/cookie/:name"),
    Name.DELETE_COOKIE: delete("/session/:sessionId/cookie/:name"),
    # Alerts.
    Name.ACCEPT_ALERT: post("/session/:sessionId/alert/accept"),
    Name.DISMISS_ALERT: post("/session/:sessionId/alert/dismiss"),
    Name.GET_ALERT_TEXT: get("/session/:sessionId/alert/text"),
    Name.SET_ALERT_TEXT: post("/session/:sessionId/alert/text"),
    # Screenshots.
    Name.SCREENSHOT: get("/session/:sessionId/screenshot"),
    Name.TAKE_ELEMENT_SCREENSHOT: get("/session/:sessionId/element/:id/screenshot"),
    # Shadow roots.
    Name.GET_SHADOW_ROOT: get("/session/:sessionId/element/:id/shadow"),
    Name.FIND_ELEMENT_FROM_SHADOWROOT: post("/session/:sessionId/shadow/:id/element"),
    Name.FIND_ELEMENTS_FROM_SHADOWROOT: post("/session/:sessionId/shadow/:id/elements"),
    # Logs.
    Name.GET_LOG: post("/session/:sessionId/se/log"),
    Name.GET_AVAILABLE_LOG_TYPES: get("/session/:sessionId/se/log/types"),
    # Server extensions.
    Name.UPLOAD_FILE: post("/session/:sessionId/se/file"),
    # Virtual authenticator.
    Name.ADD_VIRTUAL_AUTHENTICATOR: post("/session/:sessionId/webauthn/authenticator"),
    Name.REMOVE_VIRTUAL_AUTHENTICATOR: delete("/session/:sessionId/webauthn/authenticator/:authenticatorId"),
    Name.ADD_CREDENTIAL: post("/session/:sessionId/webauthn/authenticator/:authenticatorId/credential"),
    Name.GET_CREDENTIALS: get("/session/:sessionId/webauthn/authenticator/:authenticatorId/credentials"),
    Name.REMOVE_CREDENTIAL: delete(
        "/session/:sessionId/webauthn/authenticator/:authenticatorId/credentials/:credentialId"
    ),
    Name.REMOVE_ALL_CREDENTIALS: delete("/session/:sessionId/webauthn/authenticator/:authenticatorId/credentials"),
    Name.SET_USER_VERIFIED: post("/session/:sessionId/webauthn/authenticator/:authenticatorId/uv"),
}


def _path_value(value: Any) -> str:
    # Remote references contribute only their id to a URL.
    if isinstance(value, dict):
        for key in (ELEMENT_ID_KEY, LEGACY_ELEMENT_ID_KEY, SHADOW_ROOT_ID_KEY):
            if key in value:
                return str(value[key])
    return str(value)


def build_path(path: str, parameters: dict[str, Any]) -> str:
    """Substitute ``:name`` segments in ``path`` and remove them from ``parameters``."""
    for key in _PATH_PARAM_RE.findall(path):
        if key not in parameters:
            raise InvalidArgumentError("Missing required parameter: " + key)
        value = parameters.pop(key)
        path = re.sub(r"/:" + re.escape(key) + r"\b", lambda _m, v=_path_value(value): "/" + v, path, count=1)
    return path


def build_request(custom_commands: Mapping[str, CommandSpec] | None, command: Command) -> Request:
    """Resolve ``command`` to an HTTP request, custom commands first."""
    logger.debug("Translating command: %s", command.name)
    spec = custom_commands.get(command.name) if custom_commands else None
    if spec is None:
        spec = W3C_COMMAND_MAP.get(command.name)
    if spec is None:
        raise UnknownCommandError("Unrecognized command: " + command.name)

    if not isinstance(spec, CommandSpec):
        logger.debug("Transforming command for W3C: %s", command.name)
        return build_request(custom_commands, spec(command))

    logger.debug("Building HTTP request: %s %s", spec.method, spec.path)
    parameters = command.get_parameters()
    path = build_path(spec.path, parameters)
    return Request(spec.method, path, parameters)
