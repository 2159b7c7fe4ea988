#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Simple utility functions used by this package
"""

from __future__ import annotations

import netifaces
import socket
from ipaddress import IPv4Address, AddressValueError

from .internal_types import *
from .pkg_logging import logger

def get_local_ipv4_addresses() -> List[str]:
    """Returns the IPv4 addresses assigned to the local host's interfaces, including loopback."""
    result: List[str] = []
    for ifname in netifaces.interfaces():
        for addrinfo in netifaces.ifaddresses(ifname).get(netifaces.AF_INET, []):
            result.append(addrinfo['addr'])
    return result

def parse_ipv4_address(address: str) -> Optional[IPv4Address]:
    """Parses a dotted-quad IPv4 address. Returns None if it is not valid."""
    try:
        return IPv4Address(address)
    except AddressValueError:
        return None

def is_local_ipv4_address(address: str) -> bool:
    """Returns True iff address is an IPv4 unicast address assigned to a local interface."""
    ip = parse_ipv4_address(address)
    if ip is None or ip.is_multicast or ip.is_unspecified or ip == IPv4Address('255.255.255.255'):
        return False
    return str(ip) in get_local_ipv4_addresses()

def close_socket_quietly(sock: Optional[socket.socket]) -> None:
    """Closes a socket, logging rather than raising any error."""
    if not sock is None:
        try:
            sock.close()
        except OSError as e:
            logger.error(f"Error closing socket {sock}: {e}")
