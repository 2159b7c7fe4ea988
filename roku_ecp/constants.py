# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by this package"""

DEFAULT_ECP_PORT = 8060
"""The TCP port on which devices accept ECP commands and queries."""

SSDP_PORT = 1900
"""The UDP port to which discovery requests are broadcast."""

SSDP_BROADCAST_ADDRESS = "255.255.255.255"
"""The limited broadcast address used for discovery requests."""

ECP_SEARCH_TARGET = "roku:ecp"
"""The SSDP search target (ST) that ECP devices answer to."""

RESPONSE_WINDOW_SIZE = 71
"""Number of response bytes read after a command. The status line and the
   first headers of a device's answer fit in this window."""

LIVENESS_MARKER = "Roku"
"""Substring that identifies a device answer to a liveness probe."""

PROBE_TIMEOUT = 0.5
"""Send/receive timeout (in seconds) for liveness probes."""

DEFAULT_SEND_TIMEOUT = 0.5
"""Default discovery send timeout, in seconds."""

DEFAULT_RECEIVE_TIMEOUT = 0.5
"""Default discovery receive timeout, in seconds. Discovery ends at the first
   receive attempt that waits this long without a datagram."""

DISCOVERY_BUFFER_SIZE = 0x1000
"""Maximum size of a single discovery response datagram."""

DEFAULT_HTTP_TIMEOUT = 5.0
"""Timeout (in seconds) for GET queries (app list, icons)."""
