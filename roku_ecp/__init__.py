# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Package roku_ecp implements a client for Roku's External Control Protocol (ECP).

ECP devices (streaming players and TVs) accept simple text commands on TCP port
8060: key presses, touch events, application launches, and a few queries such as
the list of installed applications. Each command is a bare HTTP/1.1 request line;
success is judged from the first few bytes of the answer.

Devices are located with an SSDP-style M-SEARCH broadcast for the "roku:ecp"
search target on UDP port 1900.

All operations are blocking, open and close their own sockets, and report
network failures as False, [], or b'' rather than raising.
"""

from .version import __version__

from .exceptions import EcpError, EcpConfigError, AppListParseError

from .models import (
    DeviceEndpoint,
    ApplicationRecord,
    Key,
    LiteralKey,
    KeyCommand,
    KeyAction,
    TouchAction,
    TouchPoint,
  )
from .encoder import encode_key, encode_literal, encode_touch, encode_launch, encode_custom
from .classifier import classify_response
from .channel import DeviceCommandChannel
from .apps import AppListFetcher, parse_app_list
from .discovery import (
    DiscoveryConfig,
    DiscoveryState,
    DiscoveryEngine,
    parse_discovery_response,
    dedupe_endpoints,
    discover,
  )
from .client import EcpDevice
from .constants import DEFAULT_ECP_PORT, SSDP_PORT

__all__ = [
    '__version__',
    'EcpError', 'EcpConfigError', 'AppListParseError',
    'DeviceEndpoint', 'ApplicationRecord',
    'Key', 'LiteralKey', 'KeyCommand', 'KeyAction', 'TouchAction', 'TouchPoint',
    'encode_key', 'encode_literal', 'encode_touch', 'encode_launch', 'encode_custom',
    'classify_response',
    'DeviceCommandChannel',
    'AppListFetcher', 'parse_app_list',
    'DiscoveryConfig', 'DiscoveryState', 'DiscoveryEngine',
    'parse_discovery_response', 'dedupe_endpoints', 'discover',
    'EcpDevice',
    'DEFAULT_ECP_PORT', 'SSDP_PORT',
]
