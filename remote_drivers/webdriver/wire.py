"""Recursive conversion between Python values and wire (JSON) values.

Encoding resolves pending futures at any depth and lets objects supply their
own wire form. Decoding turns element and shadow-root references back into
live handles bound to their owning driver.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any

ELEMENT_ID_KEY = "element-6066-11e4-a52e-4f735466cecf"
LEGACY_ELEMENT_ID_KEY = "ELEMENT"
SHADOW_ROOT_ID_KEY = "shadow-6066-11e4-a52e-4f735466cecf"


def encode(value: Any) -> Any:
    """Convert ``value`` into a JSON-compatible structure."""
    if isinstance(value, Future):
        return encode(value.result())
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [encode(item) for item in value]

    to_wire = getattr(value, "to_wire", None)
    if callable(to_wire):
        return encode(to_wire())
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return encode(to_dict())

    if isinstance(value, dict):
        return {key: encode(item) for key, item in value.items()}
    raise TypeError(f"Cannot encode value of type {type(value).__name__} for the wire")


def decode(owner: Any, value: Any) -> Any:
    """Convert a decoded JSON value, replacing remote references with handles."""
    # Imported here: elements.py builds on the driver layer, which imports this module.
    from .elements import Element, ShadowRoot

    if isinstance(value, list):
        return [decode(owner, item) for item in value]
    if isinstance(value, dict):
        if Element.is_id(value):
            return Element(owner, Element.extract_id(value))
        if ShadowRoot.is_id(value):
            return ShadowRoot(owner, ShadowRoot.extract_id(value))
        return {key: decode(owner, item) for key, item in value.items()}
    return value
