#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
EcpDevice -- The commands and queries available for one ECP device, bundled
with the endpoint they are sent to.

Each call opens and closes its own connection, so an EcpDevice holds no
network resources and may be shared between threads.

Usage:
    for endpoint in roku_ecp.discover():
        device = roku_ecp.EcpDevice(endpoint)
        if device.is_alive():
            device.send_key(KeyAction.PRESS, Key.HOME)
"""

from __future__ import annotations

from ipaddress import IPv4Address

from .internal_types import *
from .pkg_logging import logger
from .constants import DEFAULT_ECP_PORT, DEFAULT_HTTP_TIMEOUT
from .models import (
    DeviceEndpoint,
    ApplicationRecord,
    Key,
    KeyCommand,
    KeyAction,
    TouchAction,
    TouchPoint,
  )
from .encoder import encode_key, encode_literal, encode_touch, encode_launch, encode_custom
from .channel import DeviceCommandChannel
from .apps import AppListFetcher

class EcpDevice:
    endpoint: DeviceEndpoint
    channel: DeviceCommandChannel
    fetcher: AppListFetcher

    def __init__(
            self,
            endpoint: DeviceEndpoint,
            timeout_secs: Optional[float]=None,
            http_timeout_secs: float=DEFAULT_HTTP_TIMEOUT,
            channel: Optional[DeviceCommandChannel]=None,
            fetcher: Optional[AppListFetcher]=None
          ):
        """Parameters:
            endpoint:          The device to talk to.
            timeout_secs:      Timeout (in seconds) for ordinary commands. Defaults to None (no timeout).
                                  Ignored if channel is provided.
            http_timeout_secs: Timeout (in seconds) for GET queries. Ignored if fetcher is provided.
            channel:           The DeviceCommandChannel to send commands through.
            fetcher:           The AppListFetcher to run GET queries with.
        """
        self.endpoint = endpoint
        self.channel = DeviceCommandChannel(timeout_secs=timeout_secs) if channel is None else channel
        self.fetcher = AppListFetcher(timeout_secs=http_timeout_secs) if fetcher is None else fetcher

    @classmethod
    def from_address(cls, address: Union[str, IPv4Address], port: int=DEFAULT_ECP_PORT, **kwargs: Any) -> Self:
        return cls(DeviceEndpoint(address, port), **kwargs)

    def send_key(self, action: KeyAction, key: KeyCommand) -> bool:
        return self.channel.execute(self.endpoint, encode_key(action, key), is_liveness_probe=key is Key.PROBE)

    def send_literal(self, action: KeyAction, char: str) -> bool:
        """Types a single character. Raises ValueError if char is not exactly one character."""
        return self.channel.execute(self.endpoint, encode_literal(action, char))

    def send_text(self, text: str, action: KeyAction=KeyAction.PRESS) -> bool:
        """Types text one character at a time. Stops at, and returns False for, the
           first character the device does not accept."""
        for i, char in enumerate(text):
            if not self.send_literal(action, char):
                logger.debug(f"{self}: send_text stopped at character {i} ({char!r})")
                return False
        return True

    def send_touch(self, action: TouchAction, point: TouchPoint) -> bool:
        return self.channel.execute(self.endpoint, encode_touch(action, point))

    def launch_app(self, app_id: int) -> bool:
        return self.channel.execute(self.endpoint, encode_launch(app_id))

    def send_custom_post(self, path_and_query: str) -> bool:
        """Sends "POST <path_and_query> HTTP/1.1". path_and_query is not validated or escaped."""
        return self.channel.execute(self.endpoint, encode_custom(path_and_query))

    def send_custom_get(self, path: str) -> bool:
        return self.fetcher.send_custom_get(self.endpoint, path)

    def is_alive(self) -> bool:
        """Returns True iff the device answers a liveness probe within PROBE_TIMEOUT."""
        return self.send_key(KeyAction.PRESS, Key.PROBE)

    def list_applications(self) -> List[ApplicationRecord]:
        return self.fetcher.list_applications(self.endpoint)

    def fetch_icon_bytes(self, app_id: int) -> bytes:
        """Returns the raw (undecoded) icon image of an application, or b'' on failure."""
        return self.fetcher.fetch_icon_bytes(self.endpoint, app_id)

    def __str__(self) -> str:
        return f"EcpDevice({self.endpoint})"

    def __repr__(self) -> str:
        return str(self)
