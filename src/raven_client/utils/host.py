"""
Module: host.py
Description: Local host discovery for event metadata.

Resolves the host name reported as ``server_name`` and the first
non-loopback IPv4 address reported in the user block.
"""

import ipaddress
import socket
from typing import Optional

from .logger import get_logger

logger = get_logger(__name__)

UNKNOWN_ADDRESS = "0.0.0.0"

# Never contacted: connecting a UDP socket only selects the outgoing interface.
_PROBE_TARGET = ("10.254.254.254", 1)


def local_host_name() -> str:
    """Return the machine host name."""
    return socket.gethostname()


def _is_usable(address: str) -> bool:
    ip = ipaddress.ip_address(address)
    return not (ip.is_loopback or ip.is_unspecified)


def _interface_address() -> Optional[str]:
    """Address of the interface the kernel routes outbound traffic through."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(_PROBE_TARGET)
            address = sock.getsockname()[0]
    except OSError as e:
        logger.debug("Interface address lookup failed", error=str(e))
        return None
    return address if _is_usable(address) else None


def _host_name_address() -> Optional[str]:
    """First non-loopback IPv4 address the host name resolves to."""
    try:
        infos = socket.getaddrinfo(local_host_name(), None, socket.AF_INET)
    except OSError as e:
        logger.debug("Host name address lookup failed", error=str(e))
        return None

    for info in infos:
        address = info[4][0]
        if _is_usable(address):
            return address
    return None


def local_address() -> str:
    """
    Return a non-loopback IPv4 address of this host.

    The outbound interface address is preferred; the host name's
    addresses are used when there is no route.

    Returns:
        Dotted-quad address, or ``0.0.0.0`` when none can be found
    """
    return _interface_address() or _host_name_address() or UNKNOWN_ADDRESS
