"""Command model for the WebDriver wire protocol.

A command is a name plus a mutable parameter dict. Names are plain strings so
vendor profiles can register their own without touching this module.
"""

from __future__ import annotations

from typing import Any


class Name:
    """Standard command names understood by the protocol router."""

    GET_SERVER_STATUS = "getStatus"

    NEW_SESSION = "newSession"

    CLOSE = "close"
    QUIT = "quit"

    GET_CURRENT_URL = "getCurrentUrl"
    GET = "get"
    GO_BACK = "goBack"
    GO_FORWARD = "goForward"
    REFRESH = "refresh"

    ADD_COOKIE = "addCookie"
    GET_COOKIE = "getCookie"
    GET_ALL_COOKIES = "getCookies"
    DELETE_COOKIE = "deleteCookie"
    DELETE_ALL_COOKIES = "deleteAllCookies"

    GET_ACTIVE_ELEMENT = "getActiveElement"
    FIND_ELEMENT = "findElement"
    FIND_ELEMENTS = "findElements"
    FIND_ELEMENTS_RELATIVE = "findElementsRelative"
    FIND_CHILD_ELEMENT = "findChildElement"
    FIND_CHILD_ELEMENTS = "findChildElements"

    CLEAR_ELEMENT = "clearElement"
    CLICK_ELEMENT = "clickElement"
    SEND_KEYS_TO_ELEMENT = "sendKeysToElement"

    GET_CURRENT_WINDOW_HANDLE = "getCurrentWindowHandle"
    GET_WINDOW_HANDLES = "getWindowHandles"
    GET_WINDOW_RECT = "getWindowRect"
    SET_WINDOW_RECT = "setWindowRect"
    MAXIMIZE_WINDOW = "maximizeWindow"
    MINIMIZE_WINDOW = "minimizeWindow"
    FULLSCREEN_WINDOW = "fullscreenWindow"

    SWITCH_TO_WINDOW = "switchToWindow"
    SWITCH_TO_NEW_WINDOW = "newWindow"
    SWITCH_TO_FRAME = "switchToFrame"
    SWITCH_TO_FRAME_PARENT = "switchToFrameParent"
    GET_PAGE_SOURCE = "getPageSource"
    GET_TITLE = "getTitle"

    EXECUTE_SCRIPT = "executeScript"
    EXECUTE_ASYNC_SCRIPT = "executeAsyncScript"

    GET_ELEMENT_TEXT = "getElementText"
    GET_COMPUTED_ROLE = "getAriaRole"
    GET_COMPUTED_LABEL = "getAccessibleName"
    GET_ELEMENT_TAG_NAME = "getElementTagName"
    IS_ELEMENT_SELECTED = "isElementSelected"
    IS_ELEMENT_ENABLED = "isElementEnabled"
    IS_ELEMENT_DISPLAYED = "isElementDisplayed"
    GET_ELEMENT_RECT = "getElementRect"
    GET_ELEMENT_ATTRIBUTE = "getElementAttribute"
    GET_DOM_ATTRIBUTE = "getDomAttribute"
    GET_ELEMENT_VALUE_OF_CSS_PROPERTY = "getElementValueOfCssProperty"
    GET_ELEMENT_PROPERTY = "getElementProperty"

    SCREENSHOT = "screenshot"
    TAKE_ELEMENT_SCREENSHOT = "takeElementScreenshot"

    PRINT_PAGE = "printPage"

    GET_TIMEOUT = "getTimeout"
    SET_TIMEOUT = "setTimeout"

    ACCEPT_ALERT = "acceptAlert"
    DISMISS_ALERT = "dismissAlert"
    GET_ALERT_TEXT = "getAlertText"
    SET_ALERT_TEXT = "setAlertValue"

    GET_SHADOW_ROOT = "getShadowRoot"
    FIND_ELEMENT_FROM_SHADOWROOT = "findElementFromShadowRoot"
    FIND_ELEMENTS_FROM_SHADOWROOT = "findElementsFromShadowRoot"

    ADD_VIRTUAL_AUTHENTICATOR = "addVirtualAuthenticator"
    REMOVE_VIRTUAL_AUTHENTICATOR = "removeVirtualAuthenticator"
    ADD_CREDENTIAL = "addCredential"
    GET_CREDENTIALS = "getCredentials"
    REMOVE_CREDENTIAL = "removeCredential"
    REMOVE_ALL_CREDENTIALS = "removeAllCredentials"
    SET_USER_VERIFIED = "setUserVerified"

    GET_AVAILABLE_LOG_TYPES = "getAvailableLogTypes"
    GET_LOG = "getLog"

    UPLOAD_FILE = "uploadFile"

    ACTIONS = "actions"
    CLEAR_ACTIONS = "clearActionSequences"


class Command:
    """Describes a command to execute against a remote end."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.parameters: dict[str, Any] = {}

    def set_parameter(self, name: str, value: Any) -> Command:
        self.parameters[name] = value
        return self

    def set_parameters(self, parameters: dict[str, Any]) -> Command:
        self.parameters = dict(parameters)
        return self

    def get_parameter(self, name: str) -> Any:
        return self.parameters.get(name)

    def get_parameters(self) -> dict[str, Any]:
        return self.parameters

    def __repr__(self) -> str:
        return f"Command({self.name!r}, {self.parameters!r})"
