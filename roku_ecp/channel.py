#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
DeviceCommandChannel -- Runs a single ECP command over its own TCP connection:

  1. Connect to the device
  2. Send the encoded request
  3. Read at most RESPONSE_WINDOW_SIZE bytes of the answer
  4. Close the connection, whatever happened
  5. Classify the bytes that were read

Failures of any kind (refused, reset, timed out) are reported as False. The
protocol gives no richer error information, and callers only need to know
whether the command took effect.
"""

from __future__ import annotations

import socket

from .internal_types import *
from .pkg_logging import logger
from .constants import RESPONSE_WINDOW_SIZE, PROBE_TIMEOUT
from .models import DeviceEndpoint
from .classifier import classify_response
from .util import close_socket_quietly

SocketFactory = Callable[[], socket.socket]

def _default_tcp_socket_factory() -> socket.socket:
    return socket.socket(socket.AF_INET, socket.SOCK_STREAM)

class DeviceCommandChannel:
    timeout_secs: Optional[float]
    """Timeout (in seconds) for connect/send/receive of ordinary commands. None
       (the default) blocks without limit. Liveness probes always use PROBE_TIMEOUT."""

    probe_timeout_secs: float
    """Timeout (in seconds) for connect/send/receive of liveness probes."""

    socket_factory: SocketFactory
    """Creates the unconnected TCP socket used for each command."""

    def __init__(
            self,
            timeout_secs: Optional[float]=None,
            probe_timeout_secs: float=PROBE_TIMEOUT,
            socket_factory: Optional[SocketFactory]=None
          ):
        self.timeout_secs = timeout_secs
        self.probe_timeout_secs = probe_timeout_secs
        self.socket_factory = _default_tcp_socket_factory if socket_factory is None else socket_factory

    def execute(self, endpoint: DeviceEndpoint, request: bytes, is_liveness_probe: bool=False) -> bool:
        """Sends request to endpoint and returns True iff the device's answer
           indicates success. Never raises for network errors."""
        response = self.transact(endpoint, request, is_liveness_probe=is_liveness_probe)
        if response is None:
            return False
        result = classify_response(response, is_liveness_probe=is_liveness_probe)
        logger.debug(f"Command to {endpoint} {'succeeded' if result else 'failed'}: {request!r} -> {response!r}")
        return result

    def transact(self, endpoint: DeviceEndpoint, request: bytes, is_liveness_probe: bool=False) -> Optional[bytes]:
        """Sends request to endpoint and returns the first (at most RESPONSE_WINDOW_SIZE)
           bytes of the answer, or None if the exchange failed."""
        timeout = self.probe_timeout_secs if is_liveness_probe else self.timeout_secs
        sock: Optional[socket.socket] = None
        try:
            sock = self.socket_factory()
            if not timeout is None:
                sock.settimeout(timeout)
            logger.debug(f"Connecting to {endpoint} (timeout={timeout})")
            sock.connect(endpoint.host_and_port)
            logger.debug(f"Sending to {endpoint}: {request!r}")
            sock.sendall(request)
            response = sock.recv(RESPONSE_WINDOW_SIZE)
        except OSError as e:
            logger.debug(f"Command to {endpoint} failed: {e}")
            return None
        finally:
            close_socket_quietly(sock)
        return response

    def __str__(self) -> str:
        return f"DeviceCommandChannel(timeout_secs={self.timeout_secs}, probe_timeout_secs={self.probe_timeout_secs})"

    def __repr__(self) -> str:
        return str(self)
