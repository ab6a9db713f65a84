from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def expand_path(raw: str) -> str:
    return str(Path(raw).expanduser())


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name) or default)
    except ValueError:
        return default


def _flag_env(name: str) -> bool:
    return (os.environ.get(name) or "").strip().lower() in {"1", "true", "yes", "on"}


def _str_env(name: str) -> str | None:
    value = (os.environ.get(name) or "").strip()
    return value or None


@dataclass
class DriverConfig:
    remote_url: str | None = None
    driver_path: str | None = None
    proxy_url: str | None = None
    http_timeout: float = 120.0
    keep_alive: bool = False
    user_agent: str | None = None
    start_timeout: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> DriverConfig:
        driver_path = _str_env("WEBDRIVER_DRIVER_PATH")
        return cls(
            remote_url=_str_env("WEBDRIVER_REMOTE_URL"),
            driver_path=expand_path(driver_path) if driver_path else None,
            proxy_url=_str_env("WEBDRIVER_HTTP_PROXY"),
            http_timeout=_float_env("WEBDRIVER_HTTP_TIMEOUT", 120.0),
            keep_alive=_flag_env("WEBDRIVER_KEEP_ALIVE"),
            user_agent=_str_env("WEBDRIVER_USER_AGENT"),
            start_timeout=_float_env("WEBDRIVER_START_TIMEOUT", 30.0),
            log_level=(_str_env("WEBDRIVER_LOG_LEVEL") or "INFO").upper(),
        )
