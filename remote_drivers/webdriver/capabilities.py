"""Capabilities describing a requested or negotiated session."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


class Browser:
    CHROME = "chrome"
    EDGE = "MicrosoftEdge"
    FIREFOX = "firefox"
    INTERNET_EXPLORER = "internet explorer"
    SAFARI = "safari"


class PageLoadStrategy:
    NONE = "none"
    EAGER = "eager"
    NORMAL = "normal"


class Platform:
    LINUX = "linux"
    MAC = "mac"
    WINDOWS = "windows"


class UserPromptHandler:
    ACCEPT = "accept"
    DISMISS = "dismiss"
    ACCEPT_AND_NOTIFY = "accept and notify"
    DISMISS_AND_NOTIFY = "dismiss and notify"
    IGNORE = "ignore"


class Capability:
    ACCEPT_INSECURE_TLS_CERTS = "acceptInsecureCerts"
    BROWSER_NAME = "browserName"
    BROWSER_VERSION = "browserVersion"
    LOGGING_PREFS = "goog:loggingPrefs"
    PAGE_LOAD_STRATEGY = "pageLoadStrategy"
    PLATFORM_NAME = "platformName"
    PROXY = "proxy"
    SET_WINDOW_RECT = "setWindowRect"
    STRICT_FILE_INTERACTABILITY = "strictFileInteractability"
    TIMEOUTS = "timeouts"
    UNHANDLED_PROMPT_BEHAVIOR = "unhandledPromptBehavior"
    WEB_SOCKET_URL = "webSocketUrl"


W3C_CAPABILITY_NAMES = frozenset(
    {
        Capability.ACCEPT_INSECURE_TLS_CERTS,
        Capability.BROWSER_NAME,
        Capability.BROWSER_VERSION,
        Capability.PAGE_LOAD_STRATEGY,
        Capability.PLATFORM_NAME,
        Capability.PROXY,
        Capability.SET_WINDOW_RECT,
        Capability.STRICT_FILE_INTERACTABILITY,
        Capability.TIMEOUTS,
        Capability.UNHANDLED_PROMPT_BEHAVIOR,
        Capability.WEB_SOCKET_URL,
    }
)


class Capabilities:
    """A mutable mapping of capability names to values.

    ``None`` values are treated as unset: ``set(key, None)`` removes the key.
    """

    def __init__(self, other: Capabilities | Mapping[str, Any] | None = None) -> None:
        self._map: dict[str, Any] = {}
        if other is not None:
            self.merge(other)

    @classmethod
    def chrome(cls) -> Capabilities:
        return cls().set_browser_name(Browser.CHROME)

    @classmethod
    def edge(cls) -> Capabilities:
        return cls().set_browser_name(Browser.EDGE)

    @classmethod
    def firefox(cls) -> Capabilities:
        return cls().set_browser_name(Browser.FIREFOX).set(Capability.ACCEPT_INSECURE_TLS_CERTS, True)

    @classmethod
    def ie(cls) -> Capabilities:
        return cls().set_browser_name(Browser.INTERNET_EXPLORER)

    @classmethod
    def safari(cls) -> Capabilities:
        return cls().set_browser_name(Browser.SAFARI)

    def get(self, key: str, default: Any = None) -> Any:
        return self._map.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._map

    def keys(self) -> list[str]:
        return list(self._map)

    def set(self, key: str, value: Any) -> Capabilities:
        if not isinstance(key, str):
            raise TypeError(f"Capability keys must be strings: {type(key).__name__}")
        if value is None:
            self._map.pop(key, None)
        else:
            self._map[key] = value
        return self

    def delete(self, key: str) -> bool:
        return self._map.pop(key, None) is not None

    def merge(self, other: Capabilities | Mapping[str, Any]) -> Capabilities:
        items = other.to_dict() if isinstance(other, Capabilities) else dict(other)
        for key, value in items.items():
            self.set(key, value)
        return self

    def set_accept_insecure_certs(self, accept: bool) -> Capabilities:
        return self.set(Capability.ACCEPT_INSECURE_TLS_CERTS, accept)

    def get_accept_insecure_certs(self) -> bool:
        return bool(self.get(Capability.ACCEPT_INSECURE_TLS_CERTS))

    def set_browser_name(self, name: str) -> Capabilities:
        return self.set(Capability.BROWSER_NAME, name)

    def get_browser_name(self) -> str | None:
        return self.get(Capability.BROWSER_NAME)

    def set_browser_version(self, version: str) -> Capabilities:
        return self.set(Capability.BROWSER_VERSION, version)

    def get_browser_version(self) -> str | None:
        return self.get(Capability.BROWSER_VERSION)

    def set_page_load_strategy(self, strategy: str) -> Capabilities:
        return self.set(Capability.PAGE_LOAD_STRATEGY, strategy)

    def get_page_load_strategy(self) -> str | None:
        return self.get(Capability.PAGE_LOAD_STRATEGY)

    def set_platform(self, platform: str) -> Capabilities:
        return self.set(Capability.PLATFORM_NAME, platform)

    def get_platform(self) -> str | None:
        return self.get(Capability.PLATFORM_NAME)

    def set_logging_prefs(self, prefs: Mapping[str, str]) -> Capabilities:
        return self.set(Capability.LOGGING_PREFS, dict(prefs))

    def set_proxy(self, proxy: Mapping[str, Any] | None) -> Capabilities:
        return self.set(Capability.PROXY, dict(proxy) if proxy is not None else None)

    def get_proxy(self) -> dict[str, Any] | None:
        return self.get(Capability.PROXY)

    def set_alert_behavior(self, behavior: str) -> Capabilities:
        return self.set(Capability.UNHANDLED_PROMPT_BEHAVIOR, behavior)

    def get_alert_behavior(self) -> str | None:
        return self.get(Capability.UNHANDLED_PROMPT_BEHAVIOR)

    def set_strict_file_interactability(self, strict: bool) -> Capabilities:
        return self.set(Capability.STRICT_FILE_INTERACTABILITY, strict)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._map)

    def to_wire(self) -> dict[str, Any]:
        return self.to_dict()

    def __contains__(self, key: object) -> bool:
        return key in self._map

    def __iter__(self) -> Iterator[str]:
        return iter(self._map)

    def __len__(self) -> int:
        return len(self._map)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Capabilities):
            return self._map == other._map
        if isinstance(other, Mapping):
            return self._map == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Capabilities({self._map!r})"


def filter_non_w3c_capabilities(capabilities: Capabilities | Mapping[str, Any]) -> dict[str, Any]:
    """Keep standard capability names and vendor-prefixed (``vendor:name``) keys."""
    items = capabilities.to_dict() if isinstance(capabilities, Capabilities) else dict(capabilities)
    return {key: value for key, value in items.items() if key in W3C_CAPABILITY_NAMES or ":" in key}


# Proxy configuration builders.


class ProxyType:
    DIRECT = "direct"
    MANUAL = "manual"
    PAC = "pac"
    AUTODETECT = "autodetect"
    SYSTEM = "system"


def direct_proxy() -> dict[str, Any]:
    return {"proxyType": ProxyType.DIRECT}


def manual_proxy(
    *,
    ftp: str | None = None,
    http: str | None = None,
    https: str | None = None,
    bypass: list[str] | None = None,
) -> dict[str, Any]:
    config: dict[str, Any] = {"proxyType": ProxyType.MANUAL}
    for key, value in (("ftpProxy", ftp), ("httpProxy", http), ("sslProxy", https), ("noProxy", bypass)):
        if value is not None:
            config[key] = value
    return config


def socks_proxy(socks_proxy: str, socks_version: int = 5) -> dict[str, Any]:
    return {"proxyType": ProxyType.MANUAL, "socksProxy": socks_proxy, "socksVersion": socks_version}


def pac_proxy(proxy_autoconfig_url: str) -> dict[str, Any]:
    return {"proxyType": ProxyType.PAC, "proxyAutoconfigUrl": proxy_autoconfig_url}


def system_proxy() -> dict[str, Any]:
    return {"proxyType": ProxyType.SYSTEM}
