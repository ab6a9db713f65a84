from __future__ import annotations

import pytest

from remote_drivers.webdriver.by import By, RelativeBy, check_locator, escape_css, locate_with, with_tag_name


def test_escape_css() -> None:
    assert escape_css("main") == "main"
    assert escape_css("1st") == "\\31 st"
    assert escape_css("-") == "\\-"
    assert escape_css("-2x") == "-\\32 x"
    assert escape_css("a b.c") == "a\\ b\\.c"
    assert escape_css("a\x00b") == "a\ufffdb"
    assert escape_css("é") == "é"


def test_locator_factories() -> None:
    assert By.css("a") == By("css selector", "a")
    assert By.id("x y") == By("css selector", '*[id="x\\ y"]')
    assert By.name("q") == By("css selector", '*[name="q"]')
    assert By.class_name("btn  primary") == By("css selector", ".btn.primary")
    assert By.link_text("Next").using == "link text"
    assert By.partial_link_text("Ne").using == "partial link text"
    assert By.tag_name("div").using == "tag name"
    assert str(By.xpath("//a")) == "By(xpath, //a)"


def test_class_name_cannot_be_empty() -> None:
    with pytest.raises(ValueError):
        By.class_name("   ")


def test_check_locator_shorthand() -> None:
    assert check_locator({"css": "a"}) == By.css("a")
    assert check_locator({"linkText": "Go"}) == By.link_text("Go")
    assert check_locator({"tag_name": "p"}) == By.tag_name("p")
    fn = lambda driver: None  # noqa: E731
    assert check_locator(fn) is fn
    with pytest.raises(TypeError):
        check_locator({"css": "a", "xpath": "b"})
    with pytest.raises(TypeError):
        check_locator({"bogus": "a"})
    with pytest.raises(TypeError):
        check_locator("a")


def test_js_locator_runs_script() -> None:
    class Driver:
        def execute_script(self, script, *args):
            return (script, args)

    assert By.js("return 1", 2)(Driver()) == ("return 1", (2,))


def test_relative_locator_marshal() -> None:
    anchor = object()
    locator = with_tag_name("input").above(By.css("#a")).to_left_of({"xpath": "//b"}).near(anchor, 100)
    assert locator.marshal() == {
        "relative": {
            "root": {"tag name": "input"},
            "filters": [
                {"kind": "above", "args": [{"css selector": "#a"}]},
                {"kind": "left", "args": [{"xpath": "//b"}]},
                {"kind": "near", "args": [anchor, 100]},
            ],
        }
    }
    assert locator.to_wire() == locator.marshal()


def test_locate_with_requires_by_root() -> None:
    assert isinstance(locate_with({"css": "a"}).below(By.css("b")), RelativeBy)
    with pytest.raises(TypeError):
        locate_with(lambda driver: None)  # type: ignore[arg-type]
