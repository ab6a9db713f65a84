from __future__ import annotations

import socket
from contextlib import closing


def find_free_port(host: str = "127.0.0.1") -> int:
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as sock:
        sock.bind((host, 0))
        return int(sock.getsockname()[1])


def is_free(port: int, host: str = "127.0.0.1") -> bool:
    """Return True if ``port`` can be bound on ``host``."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
        return True


def get_address(family: str = "IPv4") -> str | None:
    """Best-effort non-loopback address of this host."""
    af = socket.AF_INET6 if family == "IPv6" else socket.AF_INET
    probe = ("2001:4860:4860::8888", 80) if af == socket.AF_INET6 else ("192.0.2.1", 80)
    try:
        with closing(socket.socket(af, socket.SOCK_DGRAM)) as sock:
            # No packet is sent: connecting a UDP socket only selects a route.
            sock.connect(probe)
            address = sock.getsockname()[0]
    except OSError:
        return None
    if address.startswith("127.") or address in ("::1", "0.0.0.0", "::"):
        return None
    return address


def get_loopback_address(family: str = "IPv4") -> str:
    return "::1" if family == "IPv6" else "localhost"


def split_host_and_port(host_port: str) -> tuple[str, int | None]:
    """Split ``host:port``; bare IPv6 addresses have no port unless bracketed."""
    last = host_port.rfind(":")
    if last < 0:
        return host_port, None
    if host_port.find(":") != last and not host_port.startswith("["):
        return host_port, None

    host = host_port[:last]
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(host_port[last + 1 :])
    except ValueError:
        return host_port, None
    return host, port
