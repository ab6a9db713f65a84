"""Assemble a driver from capabilities and configuration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .capabilities import Capabilities
from .config import DriverConfig
from .driver import WebDriver
from .executor import create_executor
from .service import DriverService, ServiceBuilder
from .vendor import VendorProfile, get_profile

logger = logging.getLogger("webdriver.builder")


def connect(
    capabilities: Capabilities | Mapping[str, Any],
    *,
    config: DriverConfig | None = None,
    profile: VendorProfile | None = None,
    service: DriverService | None = None,
) -> WebDriver:
    """Start a session against a remote server or a local driver service.

    A configured remote URL wins. Otherwise ``service`` (or one built from
    ``config.driver_path``) is started, and killed again when the session ends
    or fails to start.
    """
    config = config or DriverConfig.from_env()
    caps = Capabilities(capabilities)
    if profile is None:
        profile = get_profile(caps.get_browser_name())

    if config.remote_url:
        logger.info("Connecting to remote end %s", config.remote_url)
        executor = create_executor(config.remote_url, config=config, profile=profile)
        return WebDriver.create_session(executor, caps, profile=profile)

    if service is None:
        service = ServiceBuilder.from_config(config).build()
    url = service.start(config.start_timeout)
    executor = create_executor(url, config=config, profile=profile)
    return WebDriver.create_session(executor, caps, on_quit=service.kill, profile=profile)
