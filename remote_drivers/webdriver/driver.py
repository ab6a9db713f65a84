"""The WebDriver client: a session bound to an executor."""

from __future__ import annotations

import base64
import datetime as _dt
import logging
import math
import time
from collections.abc import Callable, Mapping
from concurrent.futures import Future
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .atoms import JsFunction
from .by import By, RelativeBy, check_locator
from .capabilities import Capabilities, filter_non_w3c_capabilities
from .command import Command, Name
from .elements import Element
from .errors import (
    InvalidArgumentError,
    NoSuchElementError,
    NoSuchSessionError,
    UnknownCommandError,
    UnsupportedOperationError,
    WebDriverError,
)
from .executor import Executor
from .futures import failed, resolve
from .session import Session
from .wire import encode

if TYPE_CHECKING:
    from .upload import FileDetector
    from .vendor import VendorProfile

logger = logging.getLogger("webdriver.driver")

QUIT_MESSAGE = (
    "This driver instance does not have a valid session ID "
    "(did you call WebDriver.quit()?) and may no longer be used."
)


def _script_source(script: str | JsFunction) -> str:
    if isinstance(script, JsFunction):
        return f"return ({script.source}).apply(null, arguments);"
    return script


class WebDriver:
    """Controls a browser through a remote session.

    ``session`` may be a future resolving to the session. Commands are not
    serialized internally; share one driver across threads only if callers
    issue one command at a time.
    """

    def __init__(
        self,
        session: Session | Future[Session],
        executor: Executor,
        on_quit: Callable[[], Any] | None = None,
    ) -> None:
        self._session: Session | Future[Session] = session
        self._executor = executor
        self._on_quit = on_quit
        self._quit = False
        self._authenticator_id: str | None = None
        self.file_detector: FileDetector | None = None

    @classmethod
    def create_session(
        cls,
        executor: Executor,
        capabilities: Capabilities | Mapping[str, Any],
        *,
        on_quit: Callable[[], Any] | None = None,
        profile: VendorProfile | None = None,
    ) -> WebDriver:
        """Start a new session on ``executor`` and return a driver for it.

        ``on_quit`` runs when the session ends, and also when it fails to start.
        """
        always_match = filter_non_w3c_capabilities(capabilities)
        proxy = always_match.get("proxy")
        if profile is not None and profile.single_no_proxy and isinstance(proxy, dict):
            no_proxy = proxy.get("noProxy")
            if isinstance(no_proxy, list):
                proxy = dict(proxy, noProxy=no_proxy[0] if no_proxy else None)
                always_match["proxy"] = {k: v for k, v in proxy.items() if v is not None}

        cmd = Command(Name.NEW_SESSION).set_parameter(
            "capabilities", {"firstMatch": [{}], "alwaysMatch": always_match}
        )
        cmd.set_parameters(encode(cmd.get_parameters()))
        try:
            session = executor.execute(cmd)
        except Exception:
            if on_quit is not None:
                on_quit()
            raise
        logger.info("Created session %s", session.id)
        return cls(session, executor, on_quit)

    # Core.

    def execute(self, command: Command) -> Any:
        command.set_parameter("sessionId", self._session)
        command.set_parameters(encode(command.get_parameters()))
        return self._executor.execute(command, owner=self)

    def get_executor(self) -> Executor:
        return self._executor

    def get_session(self) -> Session:
        return resolve(self._session)

    @property
    def session(self) -> Session:
        return self.get_session()

    def get_capabilities(self) -> Capabilities:
        return self.get_session().capabilities

    def set_file_detector(self, detector: FileDetector | None) -> None:
        self.file_detector = detector

    def quit(self) -> None:
        """End the session. The driver may not be used afterwards."""
        if self._quit:
            return
        try:
            self.execute(Command(Name.QUIT))
        finally:
            self._quit = True
            self._session = failed(NoSuchSessionError(QUIT_MESSAGE))
            if self._on_quit is not None:
                self._on_quit()

    # Scripts.

    def execute_script(self, script: str | JsFunction, *args: Any) -> Any:
        return self.execute(
            Command(Name.EXECUTE_SCRIPT).set_parameter("script", _script_source(script)).set_parameter("args", list(args))
        )

    def execute_async_script(self, script: str | JsFunction, *args: Any) -> Any:
        return self.execute(
            Command(Name.EXECUTE_ASYNC_SCRIPT)
            .set_parameter("script", _script_source(script))
            .set_parameter("args", list(args))
        )

    # Waiting.

    def wait(
        self,
        condition: Any,
        timeout: float = 0.0,
        message: str | Callable[[], str] | None = None,
        poll_interval: float = 0.2,
    ) -> Any:
        from .wait import wait_until

        return wait_until(self, condition, timeout, message, poll_interval)

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)

    # Windows and page.

    def get_window_handle(self) -> str:
        return self.execute(Command(Name.GET_CURRENT_WINDOW_HANDLE))

    def get_all_window_handles(self) -> list[str]:
        return self.execute(Command(Name.GET_WINDOW_HANDLES))

    def get_page_source(self) -> str:
        return self.execute(Command(Name.GET_PAGE_SOURCE))

    def close(self) -> None:
        self.execute(Command(Name.CLOSE))

    def get(self, url: str) -> None:
        self.navigate().to(url)

    def get_current_url(self) -> str:
        return self.execute(Command(Name.GET_CURRENT_URL))

    def get_title(self) -> str:
        return self.execute(Command(Name.GET_TITLE))

    # Locating elements.

    def find_element(self, locator: Any) -> Element:
        if isinstance(locator, RelativeBy):
            result = self.execute(Command(Name.FIND_ELEMENTS_RELATIVE).set_parameter("args", locator.marshal()))
            if isinstance(result, list):
                if not result:
                    raise NoSuchElementError("Cannot locate an element with provided parameters")
                return result[0]
            return result

        locator = check_locator(locator)
        if not isinstance(locator, By):
            return self._find_element_with(locator, self)
        return self.execute(
            Command(Name.FIND_ELEMENT).set_parameter("using", locator.using).set_parameter("value", locator.value)
        )

    def find_elements(self, locator: Any) -> list[Element]:
        if isinstance(locator, RelativeBy):
            cmd = Command(Name.FIND_ELEMENTS_RELATIVE).set_parameter("args", locator.marshal())
        else:
            locator = check_locator(locator)
            if not isinstance(locator, By):
                return self._find_elements_with(locator, self)
            cmd = Command(Name.FIND_ELEMENTS).set_parameter("using", locator.using).set_parameter("value", locator.value)
        try:
            result = self.execute(cmd)
        except NoSuchElementError:
            return []
        return result if isinstance(result, list) else []

    def _find_element_with(self, locator_fn: Callable[[Any], Any], context: Any) -> Element:
        result = resolve(locator_fn(context))
        if isinstance(result, list):
            result = result[0] if result else None
        if not isinstance(result, Element):
            raise TypeError("Custom locator did not return an Element")
        return result

    def _find_elements_with(self, locator_fn: Callable[[Any], Any], context: Any) -> list[Element]:
        result = resolve(locator_fn(context))
        if isinstance(result, Element):
            return [result]
        if not isinstance(result, list):
            return []
        return [item for item in result if isinstance(item, Element)]

    # Output.

    def take_screenshot(self) -> str:
        """Return a screenshot of the current page as a base64-encoded PNG string."""
        return self.execute(Command(Name.SCREENSHOT))

    def print_page(self, **options: Any) -> str:
        """Print the page to PDF and return it base64-encoded.

        Accepts orientation, scale, background, width, height, top, bottom,
        left, right, shrink_to_fit and page_ranges.
        """
        params: dict[str, Any] = {}
        for key, value in options.items():
            if key in ("orientation", "scale", "background"):
                params[key] = value
            elif key in ("width", "height"):
                params.setdefault("page", {})[key] = value
            elif key in ("top", "bottom", "left", "right"):
                params.setdefault("margin", {})[key] = value
            elif key in ("shrink_to_fit", "shrinkToFit"):
                params["shrinkToFit"] = value
            elif key in ("page_ranges", "pageRanges"):
                params["pageRanges"] = value
            else:
                raise InvalidArgumentError(f"Invalid Argument '{key}'")
        return self.execute(Command(Name.PRINT_PAGE).set_parameters(params))

    # Facades.

    def manage(self) -> Options:
        return Options(self)

    def navigate(self) -> Navigation:
        return Navigation(self)

    def switch_to(self) -> TargetLocator:
        return TargetLocator(self)

    # Virtual authenticator.

    def virtual_authenticator_id(self) -> str | None:
        return self._authenticator_id

    def add_virtual_authenticator(self, options: Mapping[str, Any]) -> str:
        self._authenticator_id = self.execute(Command(Name.ADD_VIRTUAL_AUTHENTICATOR).set_parameters(dict(options)))
        return self._authenticator_id

    def remove_virtual_authenticator(self) -> None:
        self.execute(Command(Name.REMOVE_VIRTUAL_AUTHENTICATOR).set_parameter("authenticatorId", self._authenticator_id))
        self._authenticator_id = None

    def add_credential(self, credential: Mapping[str, Any]) -> None:
        data = dict(credential)
        data["authenticatorId"] = self._authenticator_id
        self.execute(Command(Name.ADD_CREDENTIAL).set_parameters(data))

    def get_credentials(self) -> list[dict[str, Any]]:
        result = self.execute(Command(Name.GET_CREDENTIALS).set_parameter("authenticatorId", self._authenticator_id))
        return list(result or [])

    def remove_credential(self, credential_id: str | bytes) -> None:
        if isinstance(credential_id, (bytes, bytearray)):
            credential_id = base64.urlsafe_b64encode(bytes(credential_id)).decode("ascii").rstrip("=")
        self.execute(
            Command(Name.REMOVE_CREDENTIAL)
            .set_parameter("credentialId", credential_id)
            .set_parameter("authenticatorId", self._authenticator_id)
        )

    def remove_all_credentials(self) -> None:
        self.execute(Command(Name.REMOVE_ALL_CREDENTIALS).set_parameter("authenticatorId", self._authenticator_id))

    def set_user_verified(self, verified: bool) -> None:
        self.execute(
            Command(Name.SET_USER_VERIFIED)
            .set_parameter("authenticatorId", self._authenticator_id)
            .set_parameter("isUserVerified", verified)
        )


class Navigation:
    def __init__(self, driver: WebDriver) -> None:
        self._driver = driver

    def to(self, url: str) -> None:
        self._driver.execute(Command(Name.GET).set_parameter("url", url))

    def back(self) -> None:
        self._driver.execute(Command(Name.GO_BACK))

    def forward(self) -> None:
        self._driver.execute(Command(Name.GO_FORWARD))

    def refresh(self) -> None:
        self._driver.execute(Command(Name.REFRESH))


_SAME_SITE_VALUES = ("Strict", "Lax", "None")


class Options:
    """Cookies, timeouts, logs and window management."""

    def __init__(self, driver: WebDriver) -> None:
        self._driver = driver

    def add_cookie(
        self,
        name: str,
        value: str,
        *,
        path: str | None = None,
        domain: str | None = None,
        secure: bool = False,
        http_only: bool = False,
        expiry: int | float | _dt.datetime | None = None,
        same_site: str | None = None,
    ) -> None:
        if ";" in name or "=" in name:
            raise InvalidArgumentError(f'Invalid cookie name "{name}"')
        if ";" in value:
            raise InvalidArgumentError(f'Invalid cookie value "{value}"')
        if isinstance(expiry, _dt.datetime):
            expiry = math.floor(expiry.timestamp())
        elif isinstance(expiry, (int, float)):
            expiry = math.floor(expiry)
        if same_site and same_site not in _SAME_SITE_VALUES:
            raise InvalidArgumentError(
                f"Invalid sameSite cookie value '{same_site}'. It should be one of \"Lax\", \"Strict\" or \"None\""
            )
        if same_site == "None" and not secure:
            raise InvalidArgumentError("Invalid cookie configuration: SameSite=None must be Secure")

        cookie: dict[str, Any] = {
            "name": name,
            "value": value,
            "path": path,
            "domain": domain,
            "secure": bool(secure),
            "httpOnly": bool(http_only),
            "expiry": expiry,
            "sameSite": same_site,
        }
        cookie = {k: v for k, v in cookie.items() if v is not None}
        self._driver.execute(Command(Name.ADD_COOKIE).set_parameter("cookie", cookie))

    def delete_all_cookies(self) -> None:
        self._driver.execute(Command(Name.DELETE_ALL_COOKIES))

    def delete_cookie(self, name: str) -> None:
        self._driver.execute(Command(Name.DELETE_COOKIE).set_parameter("name", name))

    def get_cookies(self) -> list[dict[str, Any]]:
        return self._driver.execute(Command(Name.GET_ALL_COOKIES)) or []

    def get_cookie(self, name: str) -> dict[str, Any] | None:
        try:
            return self._driver.execute(Command(Name.GET_COOKIE).set_parameter("name", name))
        except (UnknownCommandError, UnsupportedOperationError):
            # Older remote ends only list all cookies.
            for cookie in self.get_cookies():
                if isinstance(cookie, dict) and cookie.get("name") == name:
                    return cookie
            return None

    def get_timeouts(self) -> dict[str, Any]:
        """Return the session timeouts as reported by the remote end (milliseconds)."""
        return self._driver.execute(Command(Name.GET_TIMEOUT))

    def set_timeouts(
        self,
        *,
        script: float | None = None,
        page_load: float | None = None,
        implicit: float | None = None,
    ) -> None:
        """Set session timeouts, given in seconds."""
        values = {"implicit": implicit, "pageLoad": page_load, "script": script}
        cmd = Command(Name.SET_TIMEOUT)
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(
                    f'invalid timeouts configuration: expected "{key}" to be a number, got {type(value).__name__}'
                )
            cmd.set_parameter(key, int(value * 1000))
        if not cmd.get_parameters():
            raise TypeError("no timeouts specified")

        try:
            self._driver.execute(cmd)
        except WebDriverError:
            logger.debug("Falling back to legacy timeout commands")
            for legacy_type, value in (("script", script), ("implicit", implicit), ("page load", page_load)):
                if value is not None:
                    self._driver.execute(
                        Command(Name.SET_TIMEOUT).set_parameter("type", legacy_type).set_parameter("ms", int(value * 1000))
                    )

    def logs(self) -> Logs:
        return Logs(self._driver)

    def window(self) -> Window:
        return Window(self._driver)


class Window:
    def __init__(self, driver: WebDriver) -> None:
        self._driver = driver

    def get_rect(self) -> dict[str, float]:
        return self._driver.execute(Command(Name.GET_WINDOW_RECT))

    def set_rect(
        self,
        *,
        x: float | None = None,
        y: float | None = None,
        width: float | None = None,
        height: float | None = None,
    ) -> dict[str, float]:
        rect = {k: v for k, v in (("x", x), ("y", y), ("width", width), ("height", height)) if v is not None}
        return self._driver.execute(Command(Name.SET_WINDOW_RECT).set_parameters(rect))

    def maximize(self) -> None:
        self._driver.execute(Command(Name.MAXIMIZE_WINDOW).set_parameter("windowHandle", "current"))

    def minimize(self) -> None:
        self._driver.execute(Command(Name.MINIMIZE_WINDOW))

    def fullscreen(self) -> None:
        self._driver.execute(Command(Name.FULLSCREEN_WINDOW))

    def get_size(self, window_handle: str = "current") -> dict[str, float]:
        if window_handle != "current":
            logger.warning("Only 'current' window is supported for W3C compatible browsers.")
        rect = self.get_rect()
        return {"height": rect["height"], "width": rect["width"]}

    def set_size(self, width: float, height: float, window_handle: str = "current") -> None:
        if window_handle != "current":
            logger.warning("Only 'current' window is supported for W3C compatible browsers.")
        self.set_rect(width=width, height=height)


@dataclass
class LogEntry:
    level: str
    message: str
    timestamp: float
    type: str | None = None


class Logs:
    def __init__(self, driver: WebDriver) -> None:
        self._driver = driver

    def get(self, log_type: str) -> list[LogEntry]:
        entries = self._driver.execute(Command(Name.GET_LOG).set_parameter("type", log_type)) or []
        return [
            entry
            if isinstance(entry, LogEntry)
            else LogEntry(entry.get("level"), entry.get("message"), entry.get("timestamp"), entry.get("type"))
            for entry in entries
        ]

    def get_available_log_types(self) -> list[str]:
        return self._driver.execute(Command(Name.GET_AVAILABLE_LOG_TYPES))


class TargetLocator:
    """Switches focus between frames, windows and alerts."""

    def __init__(self, driver: WebDriver) -> None:
        self._driver = driver

    def active_element(self) -> Element:
        return self._driver.execute(Command(Name.GET_ACTIVE_ELEMENT))

    def default_content(self) -> None:
        self._driver.execute(Command(Name.SWITCH_TO_FRAME).set_parameter("id", None))

    def frame(self, id: int | str | Element | None) -> None:  # noqa: A002
        reference: Any = id
        if isinstance(id, str):
            try:
                reference = self._driver.find_element(By.id(id))
            except NoSuchElementError:
                reference = self._driver.find_element(By.name(id))
        self._driver.execute(Command(Name.SWITCH_TO_FRAME).set_parameter("id", reference))

    def parent_frame(self) -> None:
        self._driver.execute(Command(Name.SWITCH_TO_FRAME_PARENT))

    def window(self, name_or_handle: str) -> None:
        self._driver.execute(
            Command(Name.SWITCH_TO_WINDOW).set_parameter("name", name_or_handle).set_parameter("handle", name_or_handle)
        )

    def new_window(self, type_hint: str) -> None:
        """Open a new ``"tab"`` or ``"window"`` and switch to it."""
        response = self._driver.execute(Command(Name.SWITCH_TO_NEW_WINDOW).set_parameter("type", type_hint))
        self.window(response["handle"])

    def alert(self) -> Alert:
        text = self._driver.execute(Command(Name.GET_ALERT_TEXT))
        return Alert(self._driver, text)


class Alert:
    def __init__(self, driver: WebDriver, text: str) -> None:
        self._driver = driver
        self._text = text

    def get_text(self) -> str:
        return self._text

    def accept(self) -> None:
        self._driver.execute(Command(Name.ACCEPT_ALERT))

    def dismiss(self) -> None:
        self._driver.execute(Command(Name.DISMISS_ALERT))

    def send_keys(self, text: str) -> None:
        self._driver.execute(Command(Name.SET_ALERT_TEXT).set_parameter("text", text))


