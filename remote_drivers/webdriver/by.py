"""Element locators."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union


def escape_css(css: str) -> str:
    """Escape a string for use in a CSS selector (CSS.escape semantics)."""
    if not isinstance(css, str):
        raise TypeError(f"input must be a string, got {type(css).__name__}")
    length = len(css)
    first = ord(css[0]) if css else 0
    out: list[str] = []
    for i, ch in enumerate(css):
        code = ord(ch)
        if code == 0:
            out.append("\ufffd")
        elif (
            0x1 <= code <= 0x1F
            or code == 0x7F
            or (i == 0 and 0x30 <= code <= 0x39)
            or (i == 1 and 0x30 <= code <= 0x39 and first == 0x2D)
        ):
            out.append(f"\\{code:x} ")
        elif i == 0 and length == 1 and code == 0x2D:
            out.append("\\" + ch)
        elif code >= 0x80 or ch in "-_" or ("0" <= ch <= "9") or ("a" <= ch <= "z") or ("A" <= ch <= "Z"):
            out.append(ch)
        else:
            out.append("\\" + ch)
    return "".join(out)


@dataclass(frozen=True)
class By:
    """A locator strategy plus its value, e.g. ``By.css("a.nav")``."""

    using: str
    value: str

    @classmethod
    def class_name(cls, name: str) -> By:
        names = [escape_css(part) for part in re.split(r"\s+", name) if part]
        if not names:
            raise ValueError("class name may not be empty")
        return cls.css("." + ".".join(names))

    @classmethod
    def css(cls, selector: str) -> By:
        return cls("css selector", selector)

    @classmethod
    def id(cls, id_: str) -> By:
        return cls.css('*[id="' + escape_css(id_) + '"]')

    @classmethod
    def link_text(cls, text: str) -> By:
        return cls("link text", text)

    @classmethod
    def partial_link_text(cls, text: str) -> By:
        return cls("partial link text", text)

    @classmethod
    def name(cls, name: str) -> By:
        return cls.css('*[name="' + escape_css(name) + '"]')

    @classmethod
    def tag_name(cls, name: str) -> By:
        return cls("tag name", name)

    @classmethod
    def xpath(cls, xpath: str) -> By:
        return cls("xpath", xpath)

    @staticmethod
    def js(script: Any, *args: Any) -> Callable[[Any], Any]:
        """Locate elements by evaluating ``script`` in the page."""

        def _locate(driver: Any) -> Any:
            return driver.execute_script(script, *args)

        return _locate

    def to_wire(self) -> dict[str, str]:
        return {"using": self.using, "value": self.value}

    def __str__(self) -> str:
        return f"By({self.using}, {self.value})"


Locator = Union[By, Callable[[Any], Any], Mapping[str, str]]

_SHORTHAND: dict[str, Callable[[str], Any]] = {
    "className": By.class_name,
    "class_name": By.class_name,
    "css": By.css,
    "id": By.id,
    "js": By.js,
    "linkText": By.link_text,
    "link_text": By.link_text,
    "name": By.name,
    "partialLinkText": By.partial_link_text,
    "partial_link_text": By.partial_link_text,
    "tagName": By.tag_name,
    "tag_name": By.tag_name,
    "xpath": By.xpath,
}


def check_locator(locator: Any) -> By | Callable[[Any], Any]:
    """Normalize a locator: a ``By``, a custom locator function, or ``{"css": "a"}``."""
    if isinstance(locator, By) or callable(locator):
        return locator
    if isinstance(locator, Mapping) and len(locator) == 1:
        ((key, value),) = locator.items()
        factory = _SHORTHAND.get(key)
        if factory is not None:
            return factory(value)
    raise TypeError(f"Invalid locator: {locator!r}")


@dataclass
class RelativeBy:
    """Locates elements by their position relative to other elements."""

    root: By
    filters: list[dict[str, Any]] = field(default_factory=list)

    def _anchor(self, element_or_locator: Any) -> Any:
        if isinstance(element_or_locator, (By, Mapping)):
            found = check_locator(element_or_locator)
            if not isinstance(found, By):
                raise TypeError("Relative anchors must be elements or By locators")
            return {found.using: found.value}
        return element_or_locator

    def _add(self, kind: str, *args: Any) -> RelativeBy:
        self.filters.append({"kind": kind, "args": list(args)})
        return self

    def above(self, element_or_locator: Any) -> RelativeBy:
        return self._add("above", self._anchor(element_or_locator))

    def below(self, element_or_locator: Any) -> RelativeBy:
        return self._add("below", self._anchor(element_or_locator))

    def to_left_of(self, element_or_locator: Any) -> RelativeBy:
        return self._add("left", self._anchor(element_or_locator))

    def to_right_of(self, element_or_locator: Any) -> RelativeBy:
        return self._add("right", self._anchor(element_or_locator))

    def near(self, element_or_locator: Any, distance: int = 50) -> RelativeBy:
        return self._add("near", self._anchor(element_or_locator), distance)

    def marshal(self) -> dict[str, Any]:
        return {
            "relative": {
                "root": {self.root.using: self.root.value},
                "filters": [dict(f, args=list(f["args"])) for f in self.filters],
            }
        }

    def to_wire(self) -> dict[str, Any]:
        return self.marshal()

    def __str__(self) -> str:
        return f"RelativeBy({self.root}, {len(self.filters)} filters)"


def with_tag_name(tag: str) -> RelativeBy:
    return RelativeBy(By.tag_name(tag))


def locate_with(locator: By | Mapping[str, str]) -> RelativeBy:
    found = check_locator(locator)
    if not isinstance(found, By):
        raise TypeError("Relative locators need a By root")
    return RelativeBy(found)
