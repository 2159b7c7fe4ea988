#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
DiscoveryEngine -- Finds ECP devices on the local network:

  1. Broadcast one SSDP M-SEARCH request for "roku:ecp" to 255.255.255.255:1900
  2. Receive responses until a receive attempt times out (or fails)
  3. Parse each response into a DeviceEndpoint as it arrives

One round is: send once, then receive until the first silence. The round's
length is therefore bounded by the number of responders times the receive
timeout, plus one final receive timeout.

Responses are not deduplicated by default; a device that answers twice (e.g.
on two interfaces) appears twice. Pass unique=True to keep only the first
endpoint for each (address, port).
"""

from __future__ import annotations

import re
import socket
from enum import Enum

from .internal_types import *
from .pkg_logging import logger
from .constants import (
    SSDP_BROADCAST_ADDRESS,
    SSDP_PORT,
    ECP_SEARCH_TARGET,
    DEFAULT_SEND_TIMEOUT,
    DEFAULT_RECEIVE_TIMEOUT,
    DISCOVERY_BUFFER_SIZE,
  )
from .exceptions import EcpConfigError
from .models import DeviceEndpoint
from .util import parse_ipv4_address, is_local_ipv4_address, close_socket_quietly

SEARCH_REQUEST = (
    "M-SEARCH * HTTP/1.1\r\n"
    f"HOST: {SSDP_BROADCAST_ADDRESS}:{SSDP_PORT}\r\n"
    f"ST: {ECP_SEARCH_TARGET}\r\n"
    'MAN: "ssdp:discover"\r\n'
    "\r\n"
  ).encode('utf-8')
"""The discovery request datagram."""

# Applied to the lower-cased payload
_location_re = re.compile(r'http://(\d{1,3}(?:\.\d{1,3}){3}):(\d{1,5})/')
_device_id_re = re.compile(r'roku:ecp:([a-z0-9]{12})')

def parse_discovery_response(data: bytes) -> Optional[DeviceEndpoint]:
    """Parses a discovery response datagram.

    Returns a DeviceEndpoint with the address and port from the "http://<ip>:<port>/"
    location and the upper-cased 12-character id from "roku:ecp:<id>", or None if
    the datagram is not an ECP response or any of the three is missing or invalid.
    Zero-padded octets in the location are accepted.
    """
    text = data.decode('ascii', errors='replace').lower()
    if not ECP_SEARCH_TARGET in text:
        return None
    m_location = _location_re.search(text)
    m_id = _device_id_re.search(text)
    if m_location is None or m_id is None:
        return None
    # Leading zeros ("192.168.001.005") are not octal
    address = parse_ipv4_address('.'.join(str(int(octet)) for octet in m_location.group(1).split('.')))
    port = int(m_location.group(2))
    if address is None or port > 0xFFFF:
        return None
    return DeviceEndpoint(address, port, device_id=m_id.group(1).upper())

def dedupe_endpoints(endpoints: Iterable[DeviceEndpoint]) -> List[DeviceEndpoint]:
    """Returns endpoints with later duplicates of the same (address, port) removed,
       preserving order."""
    seen: set[DeviceEndpoint] = set()
    result: List[DeviceEndpoint] = []
    for endpoint in endpoints:
        if not endpoint in seen:
            seen.add(endpoint)
            result.append(endpoint)
    return result

class DiscoveryConfig:
    """Settings for one discovery round."""

    send_timeout_secs: float
    """Timeout (in seconds) for sending the search request."""

    receive_timeout_secs: float
    """How long (in seconds) to wait for each response. The round ends at the
       first wait that times out."""

    source_address: Optional[str]
    """If not None, the local IPv4 address to bind to before sending, which selects
       the interface used on multi-homed hosts. Otherwise the OS default route is used."""

    def __init__(
            self,
            send_timeout_secs: float=DEFAULT_SEND_TIMEOUT,
            receive_timeout_secs: float=DEFAULT_RECEIVE_TIMEOUT,
            source_address: Optional[str]=None
          ):
        if not send_timeout_secs > 0:
            raise EcpConfigError(f"send_timeout_secs must be positive: {send_timeout_secs}")
        if not receive_timeout_secs > 0:
            raise EcpConfigError(f"receive_timeout_secs must be positive: {receive_timeout_secs}")
        if not source_address is None:
            if parse_ipv4_address(source_address) is None:
                raise EcpConfigError(f"source_address is not an IPv4 address: {source_address}")
            if not is_local_ipv4_address(source_address):
                raise EcpConfigError(f"source_address is not a unicast address of a local interface: {source_address}")
        self.send_timeout_secs = send_timeout_secs
        self.receive_timeout_secs = receive_timeout_secs
        self.source_address = source_address

    def __str__(self) -> str:
        return (f"DiscoveryConfig(send_timeout_secs={self.send_timeout_secs}, "
                f"receive_timeout_secs={self.receive_timeout_secs}, source_address={self.source_address})")

    def __repr__(self) -> str:
        return str(self)

class DiscoveryState(Enum):
    IDLE = "idle"
    """No socket has been created yet."""

    BROADCASTING = "broadcasting"
    """The search request is being sent."""

    LISTENING = "listening"
    """Waiting for responses."""

    DONE = "done"
    """A receive attempt failed or timed out; the result is complete."""

SocketFactory = Callable[[], socket.socket]

def _default_udp_socket_factory() -> socket.socket:
    return socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

class DiscoveryEngine:
    config: DiscoveryConfig

    socket_factory: SocketFactory
    """Creates the UDP socket used for a round."""

    broadcast_addr: HostAndPort
    """Where the search request is sent."""

    state: DiscoveryState = DiscoveryState.IDLE
    """The state of the current (or most recent) round."""

    def __init__(
            self,
            config: Optional[DiscoveryConfig]=None,
            socket_factory: Optional[SocketFactory]=None,
            broadcast_addr: HostAndPort=(SSDP_BROADCAST_ADDRESS, SSDP_PORT)
          ):
        self.config = DiscoveryConfig() if config is None else config
        self.socket_factory = _default_udp_socket_factory if socket_factory is None else socket_factory
        self.broadcast_addr = broadcast_addr

    def _set_state(self, state: DiscoveryState) -> None:
        logger.debug(f"Discovery: {self.state.name} -> {state.name}")
        self.state = state

    def discover(self, unique: bool=False) -> List[DeviceEndpoint]:
        """Runs one discovery round and returns the endpoints found, in arrival order.

        Never raises for network errors; a round that cannot send returns [].
        """
        self._set_state(DiscoveryState.IDLE)
        endpoints: List[DeviceEndpoint] = []
        sock: Optional[socket.socket] = None
        try:
            sock = self.socket_factory()
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            if not self.config.source_address is None:
                sock.bind((self.config.source_address, 0))
            self._set_state(DiscoveryState.BROADCASTING)
            sock.settimeout(self.config.send_timeout_secs)
            logger.debug(f"Sending discovery request to {self.broadcast_addr}: {SEARCH_REQUEST!r}")
            sock.sendto(SEARCH_REQUEST, self.broadcast_addr)

            self._set_state(DiscoveryState.LISTENING)
            sock.settimeout(self.config.receive_timeout_secs)
            while True:
                try:
                    data, addr = sock.recvfrom(DISCOVERY_BUFFER_SIZE)
                except OSError as e:
                    # socket.timeout is the normal end of a round
                    logger.debug(f"Discovery: receive ended: {e!r}")
                    break
                self._on_response(data, addr, endpoints)
        except OSError as e:
            logger.warning(f"Discovery round failed: {e}")
        finally:
            close_socket_quietly(sock)
            self._set_state(DiscoveryState.DONE)

        if unique:
            endpoints = dedupe_endpoints(endpoints)
        logger.info(f"Discovery found {len(endpoints)} device(s)")
        return endpoints

    def _on_response(self, data: bytes, addr: HostAndPort, endpoints: List[DeviceEndpoint]) -> None:
        endpoint = parse_discovery_response(data)
        if endpoint is None:
            statement_line = data.split(b"\n", 1)[0].rstrip(b"\r")
            logger.debug(f"Ignoring discovery response without an ECP location from {addr}: {statement_line!r}")
            return
        logger.debug(f"Discovered {endpoint} (response from {addr})")
        endpoints.append(endpoint)

    def __str__(self) -> str:
        return f"DiscoveryEngine({self.config}, state={self.state.name})"

    def __repr__(self) -> str:
        return str(self)

def discover(
        send_timeout_secs: float=DEFAULT_SEND_TIMEOUT,
        receive_timeout_secs: float=DEFAULT_RECEIVE_TIMEOUT,
        source_address: Optional[str]=None,
        unique: bool=False
      ) -> List[DeviceEndpoint]:
    """Runs one discovery round with the given settings and returns the endpoints found.

    Raises EcpConfigError if the settings are invalid (see DiscoveryConfig).
    """
    config = DiscoveryConfig(
        send_timeout_secs=send_timeout_secs,
        receive_timeout_secs=receive_timeout_secs,
        source_address=source_address,
      )
    return DiscoveryEngine(config).discover(unique=unique)
