"""Error taxonomy for WebDriver responses.

Two response dialects carry errors:

- W3C: ``{"value": {"error": "<code>", "message": "...", "stacktrace": "..."}}``
- legacy JSON wire protocol: ``{"status": <non-zero int>, "value": ...}``

Both are decoded into the same class hierarchy.
"""

from __future__ import annotations

import json
from typing import Any


class WebDriverError(Exception):
    """Base class for errors reported by a remote end."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.remote_stacktrace = ""


class DetachedShadowRootError(WebDriverError):
    pass


class ElementClickInterceptedError(WebDriverError):
    pass


class ElementNotInteractableError(WebDriverError):
    pass


class ElementNotSelectableError(WebDriverError):
    pass


class InsecureCertificateError(WebDriverError):
    pass


class InvalidArgumentError(WebDriverError):
    pass


class InvalidCookieDomainError(WebDriverError):
    pass


class InvalidCoordinatesError(WebDriverError):
    pass


class InvalidElementStateError(WebDriverError):
    pass


class InvalidSelectorError(WebDriverError):
    pass


class NoSuchSessionError(WebDriverError):
    pass


class JavascriptError(WebDriverError):
    pass


class MoveTargetOutOfBoundsError(WebDriverError):
    pass


class NoSuchAlertError(WebDriverError):
    pass


class NoSuchCookieError(WebDriverError):
    pass


class NoSuchElementError(WebDriverError):
    pass


class NoSuchFrameError(WebDriverError):
    pass


class NoSuchShadowRootError(WebDriverError):
    pass


class NoSuchWindowError(WebDriverError):
    pass


class ScriptTimeoutError(WebDriverError):
    pass


class SessionNotCreatedError(WebDriverError):
    pass


class StaleElementReferenceError(WebDriverError):
    pass


class WebDriverTimeoutError(WebDriverError):
    pass


class UnableToSetCookieError(WebDriverError):
    pass


class UnableToCaptureScreenError(WebDriverError):
    pass


class UnexpectedAlertOpenError(WebDriverError):
    """An unexpected alert blocked the command; carries the alert text if known."""

    def __init__(self, message: str = "", alert_text: str = "") -> None:
        super().__init__(message)
        self.alert_text = alert_text

    def get_alert_text(self) -> str:
        return self.alert_text


class UnknownCommandError(WebDriverError):
    pass


class UnknownMethodError(WebDriverError):
    pass


class UnsupportedOperationError(WebDriverError):
    pass


ERROR_CODE_TO_TYPE: dict[str, type[WebDriverError]] = {
    "unknown error": WebDriverError,
    "detached shadow root": DetachedShadowRootError,
    "element click intercepted": ElementClickInterceptedError,
    "element not interactable": ElementNotInteractableError,
    "element not selectable": ElementNotSelectableError,
    "insecure certificate": InsecureCertificateError,
    "invalid argument": InvalidArgumentError,
    "invalid cookie domain": InvalidCookieDomainError,
    "invalid coordinates": InvalidCoordinatesError,
    "invalid element state": InvalidElementStateError,
    "invalid selector": InvalidSelectorError,
    "invalid session id": NoSuchSessionError,
    "javascript error": JavascriptError,
    "move target out of bounds": MoveTargetOutOfBoundsError,
    "no such alert": NoSuchAlertError,
    "no such cookie": NoSuchCookieError,
    "no such element": NoSuchElementError,
    "no such frame": NoSuchFrameError,
    "no such shadow root": NoSuchShadowRootError,
    "no such window": NoSuchWindowError,
    "script timeout": ScriptTimeoutError,
    "session not created": SessionNotCreatedError,
    "stale element reference": StaleElementReferenceError,
    "timeout": WebDriverTimeoutError,
    "unable to set cookie": UnableToSetCookieError,
    "unable to capture screen": UnableToCaptureScreenError,
    "unexpected alert open": UnexpectedAlertOpenError,
    "unknown command": UnknownCommandError,
    "unknown method": UnknownMethodError,
    "unsupported operation": UnsupportedOperationError,
}

TYPE_TO_ERROR_CODE: dict[type[WebDriverError], str] = {
    cls: code for code, cls in ERROR_CODE_TO_TYPE.items()
}

LEGACY_ERROR_CODE_TO_TYPE: dict[int, type[WebDriverError]] = {
    6: NoSuchSessionError,
    7: NoSuchElementError,
    8: NoSuchFrameError,
    9: UnsupportedOperationError,
    10: StaleElementReferenceError,
    12: InvalidElementStateError,
    13: WebDriverError,
    15: ElementNotSelectableError,
    17: JavascriptError,
    19: InvalidSelectorError,
    21: WebDriverTimeoutError,
    23: NoSuchWindowError,
    24: InvalidCookieDomainError,
    25: UnableToSetCookieError,
    26: UnexpectedAlertOpenError,
    27: NoSuchAlertError,
    28: ScriptTimeoutError,
    29: InvalidCoordinatesError,
    32: InvalidSelectorError,
    33: SessionNotCreatedError,
    34: MoveTargetOutOfBoundsError,
    51: InvalidSelectorError,
    52: InvalidSelectorError,
    60: ElementNotInteractableError,
    61: InvalidArgumentError,
    62: NoSuchCookieError,
    63: UnableToCaptureScreenError,
    64: ElementClickInterceptedError,
    405: UnsupportedOperationError,
}


def is_error_response(data: Any) -> bool:
    """Return True if ``data`` looks like a W3C error payload."""
    return isinstance(data, dict) and isinstance(data.get("error"), str)


def encode_error(err: BaseException) -> dict[str, str]:
    """Encode an error as a W3C error payload."""
    code = TYPE_TO_ERROR_CODE.get(type(err), "unknown error") if isinstance(err, WebDriverError) else "unknown error"
    message = err.message if isinstance(err, WebDriverError) else str(err)
    return {"error": code, "message": message}


def decode_error(payload: dict[str, Any]) -> WebDriverError:
    """Build (but do not raise) the error described by a W3C error payload."""
    if not is_error_response(payload):
        return WebDriverError("Unknown error: " + json.dumps(payload, default=str))

    cls = ERROR_CODE_TO_TYPE.get(payload["error"], WebDriverError)
    message = payload.get("message")
    message = message if isinstance(message, str) else ""
    err = cls(message)

    # Some remote ends use the pre-standard casing.
    for key in ("stacktrace", "stackTrace"):
        trace = payload.get(key)
        if isinstance(trace, str):
            err.remote_stacktrace = trace
            break
    return err


def throw_decoded_error(payload: Any) -> None:
    """Raise the error described by a W3C error payload."""
    raise decode_error(payload)


def check_legacy_response(body: Any) -> Any:
    """Raise if ``body`` is a legacy response with a non-zero status.

    Returns ``body`` unchanged otherwise.
    """
    if not isinstance(body, dict):
        return body
    status = body.get("status")
    if isinstance(status, bool) or not isinstance(status, (int, float)) or status == 0:
        return body

    cls = LEGACY_ERROR_CODE_TO_TYPE.get(int(status), WebDriverError)
    value = body.get("value")
    if not isinstance(value, dict):
        raise cls("" if value is None else str(value))

    raw_message = value.get("message")
    message = "" if raw_message is None else str(raw_message)
    if cls is UnexpectedAlertOpenError:
        alert = value.get("alert")
        text = alert.get("text") if isinstance(alert, dict) else None
        raise UnexpectedAlertOpenError(message, text if isinstance(text, str) else "")
    raise cls(message)
