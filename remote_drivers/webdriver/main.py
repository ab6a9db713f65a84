"""
Command line probe for WebDriver servers.

    python -m remote_drivers.webdriver.main status <url>
    python -m remote_drivers.webdriver.main wait <url> [--timeout S]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .config import DriverConfig
from .errors import WebDriverError
from .http_client import HttpClientError
from .server_probe import get_status, wait_for_server

logger = logging.getLogger("webdriver.main")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="webdriver", description="Probe a WebDriver server.")
    sub = parser.add_subparsers(dest="command", required=True)

    status = sub.add_parser("status", help="print the server status")
    status.add_argument("url")

    wait = sub.add_parser("wait", help="wait until the server is ready")
    wait.add_argument("url")
    wait.add_argument("--timeout", type=float, default=None, help="seconds (default: WEBDRIVER_START_TIMEOUT)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point; returns the process exit code."""
    config = DriverConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    args = _parser().parse_args(argv)

    try:
        if args.command == "status":
            status = get_status(args.url, timeout=config.http_timeout)
        else:
            timeout = config.start_timeout if args.timeout is None else args.timeout
            status = wait_for_server(args.url, timeout)
    except (HttpClientError, WebDriverError, TimeoutError) as exc:
        logger.error("%s: %s", args.url, exc)
        return 1

    print(json.dumps(status, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
