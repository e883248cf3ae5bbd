"""Local address lookup for the receiver's pairing code."""

import ipaddress
import logging
import socket

logger = logging.getLogger(__name__)

# Any routable address works; a UDP connect() sends nothing.
_PROBE_ADDRESS = ("10.255.255.255", 1)


def _is_lan_ipv4(candidate: str) -> bool:
    try:
        address = ipaddress.IPv4Address(candidate)
    except ValueError:
        return False
    return address.is_private and not address.is_loopback and not address.is_link_local


def _probe_route() -> str | None:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(_PROBE_ADDRESS)
            return sock.getsockname()[0]
    except OSError as e:
        logger.debug(f"Route probe failed: {e}")
        return None


def _resolve_hostname() -> list[str]:
    try:
        _, _, addresses = socket.gethostbyname_ex(socket.gethostname())
    except OSError as e:
        logger.debug(f"Hostname lookup failed: {e}")
        return []
    return addresses


def discover_local_ipv4() -> str | None:
    """Return this device's LAN IPv4 address, or None if it has none."""
    for candidate in [_probe_route(), *_resolve_hostname()]:
        if candidate and _is_lan_ipv4(candidate):
            logger.debug(f"Local IPv4 address: {candidate}")
            return candidate
    logger.warning("No LAN IPv4 address found")
    return None
