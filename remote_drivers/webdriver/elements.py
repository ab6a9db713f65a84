"""Handles for DOM objects living on the remote end."""

from __future__ import annotations

from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

from . import atoms
from .by import By, check_locator
from .command import Command, Name
from .futures import resolve
from .wire import ELEMENT_ID_KEY, LEGACY_ELEMENT_ID_KEY, SHADOW_ROOT_ID_KEY

if TYPE_CHECKING:
    from .driver import WebDriver


class Element:
    """A DOM element on the remote end.

    ``id`` may be a future (for example while the locating command is still in
    flight); every command resolves it first.
    """

    def __init__(self, driver: WebDriver, id: str | Future[str]) -> None:  # noqa: A002
        self._driver = driver
        self._id = id

    @staticmethod
    def build_id(id: str, no_legacy: bool = False) -> dict[str, str]:  # noqa: A002
        if no_legacy:
            return {ELEMENT_ID_KEY: id}
        return {ELEMENT_ID_KEY: id, LEGACY_ELEMENT_ID_KEY: id}

    @staticmethod
    def is_id(obj: Any) -> bool:
        return isinstance(obj, dict) and (ELEMENT_ID_KEY in obj or LEGACY_ELEMENT_ID_KEY in obj)

    @staticmethod
    def extract_id(obj: Any) -> str:
        if isinstance(obj, dict):
            if ELEMENT_ID_KEY in obj:
                return obj[ELEMENT_ID_KEY]
            if LEGACY_ELEMENT_ID_KEY in obj:
                return obj[LEGACY_ELEMENT_ID_KEY]
        raise TypeError("object is not a WebElement ID")

    @staticmethod
    def equals(a: Element, b: Element) -> bool:
        """Return True if both handles refer to the same DOM element."""
        if a is b or a.get_id() == b.get_id():
            return True
        return bool(a._driver.execute_script(atoms.IS_SAME_ELEMENT, a, b))

    @property
    def driver(self) -> WebDriver:
        return self._driver

    def get_driver(self) -> WebDriver:
        return self._driver

    def get_id(self) -> str:
        return resolve(self._id)

    def to_wire(self) -> dict[str, str]:
        return self.build_id(self.get_id())

    def _execute(self, command: Command) -> Any:
        command.set_parameter("id", self)
        return self._driver.execute(command)

    def find_element(self, locator: Any) -> Element:
        locator = check_locator(locator)
        if not isinstance(locator, By):
            return self._driver._find_element_with(locator, self)
        cmd = (
            Command(Name.FIND_CHILD_ELEMENT)
            .set_parameter("using", locator.using)
            .set_parameter("value", locator.value)
        )
        return self._execute(cmd)

    def find_elements(self, locator: Any) -> list[Element]:
        locator = check_locator(locator)
        if not isinstance(locator, By):
            return self._driver._find_elements_with(locator, self)
        cmd = (
            Command(Name.FIND_CHILD_ELEMENTS)
            .set_parameter("using", locator.using)
            .set_parameter("value", locator.value)
        )
        result = self._execute(cmd)
        return result if isinstance(result, list) else []

    def click(self) -> None:
        self._execute(Command(Name.CLICK_ELEMENT))

    def send_keys(self, *keys: str | int | float) -> None:
        chars: list[str] = []
        for key in keys:
            if isinstance(key, bool) or not isinstance(key, (str, int, float)):
                raise TypeError(f"each key must be a number or string; got {type(key).__name__}")
            # W3C wants one key per array entry.
            chars.extend(str(key))

        text = "".join(chars)
        detector = self._driver.file_detector
        if detector is not None:
            text = detector.handle_file(self._driver, text)
            chars = list(text)

        self._execute(Command(Name.SEND_KEYS_TO_ELEMENT).set_parameter("text", text).set_parameter("value", chars))

    def get_tag_name(self) -> str:
        return self._execute(Command(Name.GET_ELEMENT_TAG_NAME))

    def get_css_value(self, css_style_property: str) -> str:
        return self._execute(
            Command(Name.GET_ELEMENT_VALUE_OF_CSS_PROPERTY).set_parameter("propertyName", css_style_property)
        )

    def get_attribute(self, attribute_name: str) -> str | None:
        return self._execute(Command(Name.GET_ELEMENT_ATTRIBUTE).set_parameter("name", attribute_name))

    def get_dom_attribute(self, attribute_name: str) -> str | None:
        return self._execute(Command(Name.GET_DOM_ATTRIBUTE).set_parameter("name", attribute_name))

    def get_property(self, property_name: str) -> Any:
        return self._execute(Command(Name.GET_ELEMENT_PROPERTY).set_parameter("name", property_name))

    def get_shadow_root(self) -> ShadowRoot:
        return self._execute(Command(Name.GET_SHADOW_ROOT))

    def get_text(self) -> str:
        return self._execute(Command(Name.GET_ELEMENT_TEXT))

    def get_aria_role(self) -> str:
        return self._execute(Command(Name.GET_COMPUTED_ROLE))

    def get_accessible_name(self) -> str:
        return self._execute(Command(Name.GET_COMPUTED_LABEL))

    def get_rect(self) -> dict[str, float]:
        return self._execute(Command(Name.GET_ELEMENT_RECT))

    def is_enabled(self) -> bool:
        return self._execute(Command(Name.IS_ELEMENT_ENABLED))

    def is_selected(self) -> bool:
        return self._execute(Command(Name.IS_ELEMENT_SELECTED))

    def is_displayed(self) -> bool:
        return self._execute(Command(Name.IS_ELEMENT_DISPLAYED))

    def submit(self) -> None:
        self._driver.execute_script(atoms.SUBMIT_FORM, self)

    def clear(self) -> None:
        self._execute(Command(Name.CLEAR_ELEMENT))

    def take_screenshot(self) -> str:
        """Return the element screenshot as a base64-encoded PNG string."""
        return self._execute(Command(Name.TAKE_ELEMENT_SCREENSHOT))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        return self.get_id() == other.get_id()

    def __hash__(self) -> int:
        return hash(self.get_id())

    def __repr__(self) -> str:
        ident = "<pending>" if isinstance(self._id, Future) and not self._id.done() else self.get_id()
        return f"Element({ident!r})"


class ShadowRoot:
    """The shadow root attached to an element."""

    def __init__(self, driver: WebDriver, id: str | Future[str]) -> None:  # noqa: A002
        self._driver = driver
        self._id = id

    @staticmethod
    def is_id(obj: Any) -> bool:
        return isinstance(obj, dict) and SHADOW_ROOT_ID_KEY in obj

    @staticmethod
    def extract_id(obj: Any) -> str:
        if not ShadowRoot.is_id(obj):
            raise TypeError("object is not a ShadowRoot ID")
        return obj[SHADOW_ROOT_ID_KEY]

    @property
    def driver(self) -> WebDriver:
        return self._driver

    def get_id(self) -> str:
        return resolve(self._id)

    def to_wire(self) -> dict[str, str]:
        return {SHADOW_ROOT_ID_KEY: self.get_id()}

    def _execute(self, command: Command) -> Any:
        command.set_parameter("id", self)
        return self._driver.execute(command)

    def find_element(self, locator: Any) -> Element:
        locator = check_locator(locator)
        if not isinstance(locator, By):
            return self._driver._find_element_with(locator, self)
        cmd = (
            Command(Name.FIND_ELEMENT_FROM_SHADOWROOT)
            .set_parameter("using", locator.using)
            .set_parameter("value", locator.value)
        )
        return self._execute(cmd)

    def find_elements(self, locator: Any) -> list[Element]:
        locator = check_locator(locator)
        if not isinstance(locator, By):
            return self._driver._find_elements_with(locator, self)
        cmd = (
            Command(Name.FIND_ELEMENTS_FROM_SHADOWROOT)
            .set_parameter("using", locator.using)
            .set_parameter("value", locator.value)
        )
        result = self._execute(cmd)
        return result if isinstance(result, list) else []

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShadowRoot):
            return NotImplemented
        return self.get_id() == other.get_id()

    def __hash__(self) -> int:
        return hash(self.get_id())

    def __repr__(self) -> str:
        ident = "<pending>" if isinstance(self._id, Future) and not self._id.done() else self.get_id()
        return f"ShadowRoot({ident!r})"
