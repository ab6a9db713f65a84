from __future__ import annotations

import pytest

from remote_drivers.webdriver.capabilities import (
    Browser,
    Capabilities,
    PageLoadStrategy,
    filter_non_w3c_capabilities,
    manual_proxy,
    pac_proxy,
    socks_proxy,
)


def test_browser_factories() -> None:
    assert Capabilities.chrome().get_browser_name() == Browser.CHROME
    assert Capabilities.edge().get_browser_name() == Browser.EDGE
    firefox = Capabilities.firefox()
    assert firefox.get_browser_name() == "firefox"
    assert firefox.get_accept_insecure_certs() is True


def test_none_removes_key() -> None:
    caps = Capabilities({"a": 1, "b": None})
    assert caps.keys() == ["a"]
    caps.set("a", None)
    assert "a" not in caps
    assert len(caps) == 0


def test_setters_and_merge() -> None:
    caps = Capabilities().set_page_load_strategy(PageLoadStrategy.EAGER).set_platform("linux")
    caps.merge({"browserVersion": "120"})
    assert caps.get_page_load_strategy() == "eager"
    assert caps.get_platform() == "linux"
    assert caps.get_browser_version() == "120"
    assert caps == {"pageLoadStrategy": "eager", "platformName": "linux", "browserVersion": "120"}


def test_keys_must_be_strings() -> None:
    with pytest.raises(TypeError):
        Capabilities().set(1, "x")  # type: ignore[arg-type]


def test_filter_keeps_standard_and_vendor_names() -> None:
    caps = {"browserName": "chrome", "goog:chromeOptions": {}, "chromeOptions": {}, "version": "1"}
    assert filter_non_w3c_capabilities(caps) == {"browserName": "chrome", "goog:chromeOptions": {}}


def test_proxy_builders() -> None:
    assert manual_proxy(http="h:1", bypass=["x"]) == {"proxyType": "manual", "httpProxy": "h:1", "noProxy": ["x"]}
    assert socks_proxy("s:1") == {"proxyType": "manual", "socksProxy": "s:1", "socksVersion": 5}
    assert pac_proxy("http://pac") == {"proxyType": "pac", "proxyAutoconfigUrl": "http://pac"}
