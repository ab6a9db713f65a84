"""Conditions for use with ``WebDriver.wait``."""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any

from .by import By, check_locator
from .elements import Element
from .errors import NoSuchAlertError, NoSuchFrameError, StaleElementReferenceError, WebDriverError


class Condition:
    """A predicate polled against a driver until it returns a truthy value."""

    def __init__(self, message: str, fn: Callable[[Any], Any]) -> None:
        self._message = message
        self.fn = fn

    def description(self) -> str:
        return "Waiting " + self._message

    def __call__(self, driver: Any) -> Any:
        return self.fn(driver)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._message!r})"


class ElementCondition(Condition):
    """A condition whose truthy result must be an ``Element``."""


def _locator_str(locator: Any) -> str:
    return str(locator) if isinstance(locator, By) else "by function()"


def _pattern(regex: str | re.Pattern[str]) -> re.Pattern[str]:
    return regex if isinstance(regex, re.Pattern) else re.compile(regex)


def able_to_switch_to_frame(frame: int | Element | By | Callable[[Any], Any]) -> Condition:
    def _attempt(driver: Any, target: Any) -> bool | None:
        try:
            driver.switch_to().frame(target)
        except NoSuchFrameError:
            return None
        return True

    if isinstance(frame, (int, Element)):
        return Condition("to be able to switch to frame", lambda driver: _attempt(driver, frame))

    locator = check_locator(frame)

    def _condition(driver: Any) -> bool | None:
        elements = driver.find_elements(locator)
        return _attempt(driver, elements[0]) if elements else None

    return Condition("to be able to switch to frame", _condition)


def alert_is_present() -> Condition:
    def _condition(driver: Any) -> Any:
        try:
            return driver.switch_to().alert()
        except NoSuchAlertError:
            return None
        except WebDriverError as exc:
            # geckodriver reports a missing alert this way.
            if exc.message == "can't convert null to object":
                return None
            raise

    return Condition("for alert to be present", _condition)


def title_is(title: str) -> Condition:
    return Condition(f"for title to be {json.dumps(title)}", lambda driver: driver.get_title() == title)


def title_contains(substr: str) -> Condition:
    return Condition(f"for title to contain {json.dumps(substr)}", lambda driver: substr in driver.get_title())


def title_matches(regex: str | re.Pattern[str]) -> Condition:
    pattern = _pattern(regex)
    return Condition(
        f"for title to match {pattern.pattern}", lambda driver: pattern.search(driver.get_title()) is not None
    )


def url_is(url: str) -> Condition:
    return Condition(f"for URL to be {json.dumps(url)}", lambda driver: driver.get_current_url() == url)


def url_contains(substr: str) -> Condition:
    def _condition(driver: Any) -> bool:
        current = driver.get_current_url()
        return bool(current) and substr in current

    return Condition(f"for URL to contain {json.dumps(substr)}", _condition)


def url_matches(regex: str | re.Pattern[str]) -> Condition:
    pattern = _pattern(regex)
    return Condition(
        f"for URL to match {pattern.pattern}", lambda driver: pattern.search(driver.get_current_url()) is not None
    )


def element_located(locator: Any) -> ElementCondition:
    checked = check_locator(locator)

    def _condition(driver: Any) -> Element | None:
        elements = driver.find_elements(checked)
        return elements[0] if elements else None

    return ElementCondition(f"for element to be located {_locator_str(checked)}", _condition)


def elements_located(locator: Any) -> Condition:
    checked = check_locator(locator)

    def _condition(driver: Any) -> list[Element] | None:
        elements = driver.find_elements(checked)
        return elements if elements else None

    return Condition(f"for at least one element to be located {_locator_str(checked)}", _condition)


def staleness_of(element: Element) -> Condition:
    def _condition(_driver: Any) -> bool:
        try:
            element.get_tag_name()
        except StaleElementReferenceError:
            return True
        return False

    return Condition("element to become stale", _condition)


def _element_state(message: str, element: Element, probe: Callable[[Element], Any], expect: bool) -> ElementCondition:
    def _condition(_driver: Any) -> Element | None:
        return element if bool(probe(element)) == expect else None

    return ElementCondition(message, _condition)


def element_is_visible(element: Element) -> ElementCondition:
    return _element_state("until element is visible", element, lambda el: el.is_displayed(), True)


def element_is_not_visible(element: Element) -> ElementCondition:
    return _element_state("until element is not visible", element, lambda el: el.is_displayed(), False)


def element_is_enabled(element: Element) -> ElementCondition:
    return _element_state("until element is enabled", element, lambda el: el.is_enabled(), True)


def element_is_disabled(element: Element) -> ElementCondition:
    return _element_state("until element is disabled", element, lambda el: el.is_enabled(), False)


def element_is_selected(element: Element) -> ElementCondition:
    return _element_state("until element is selected", element, lambda el: el.is_selected(), True)


def element_is_not_selected(element: Element) -> ElementCondition:
    return _element_state("until element is not selected", element, lambda el: el.is_selected(), False)


def element_text_is(element: Element, text: str) -> ElementCondition:
    return _element_state("until element text is", element, lambda el: el.get_text() == text, True)


def element_text_contains(element: Element, substr: str) -> ElementCondition:
    return _element_state("until element text contains", element, lambda el: substr in el.get_text(), True)


def element_text_matches(element: Element, regex: str | re.Pattern[str]) -> ElementCondition:
    pattern = _pattern(regex)
    return _element_state(
        "until element text matches", element, lambda el: pattern.search(el.get_text()) is not None, True
    )
