#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Value types exchanged with ECP devices: device endpoints, installed application
records, key and touch commands.
"""

from __future__ import annotations

from enum import Enum
from ipaddress import IPv4Address

from .internal_types import *
from .constants import DEFAULT_ECP_PORT

class DeviceEndpoint:
    """The network location of an ECP device.

    Two endpoints are equal iff their address and port are equal; device_id and
    nickname are descriptive only. Instances are immutable.
    """

    __slots__ = ('_address', '_port', '_device_id', '_nickname')

    _address: IPv4Address
    _port: int
    _device_id: str
    _nickname: str

    def __init__(
            self,
            address: Union[str, IPv4Address],
            port: int=DEFAULT_ECP_PORT,
            device_id: Optional[str]=None,
            nickname: Optional[str]=None
          ):
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"Port out of range: {port}")
        object.__setattr__(self, '_address', IPv4Address(address))
        object.__setattr__(self, '_port', port)
        object.__setattr__(self, '_device_id', '' if device_id is None else device_id)
        object.__setattr__(self, '_nickname', '' if nickname is None else nickname)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __reduce__(self) -> Tuple[Any, ...]:
        # copy, deepcopy and pickle rebuild through __init__ rather than setattr
        return (self.__class__, (str(self._address), self._port, self._device_id, self._nickname))

    @property
    def address(self) -> IPv4Address:
        """The device's IPv4 address"""
        return self._address

    @property
    def port(self) -> int:
        """The device's ECP TCP port"""
        return self._port

    @property
    def device_id(self) -> str:
        """The 12-character device identifier reported by discovery, or '' if unknown"""
        return self._device_id

    @property
    def nickname(self) -> str:
        """A caller-assigned display name, or '' if none"""
        return self._nickname

    @property
    def host_and_port(self) -> HostAndPort:
        """The (address, port) tuple to connect to"""
        return (str(self._address), self._port)

    @property
    def base_url(self) -> str:
        """The http:// URL prefix for GET queries against this device"""
        return f"http://{self._address}:{self._port}"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, DeviceEndpoint):
            return NotImplemented
        return self._address == other._address and self._port == other._port

    def __hash__(self) -> int:
        return hash((self._address, self._port))

    def __str__(self) -> str:
        result = f"DeviceEndpoint({self._address}:{self._port}"
        if self._device_id != '':
            result += f", device_id={self._device_id}"
        if self._nickname != '':
            result += f", nickname='{self._nickname}'"
        return result + ")"

    def __repr__(self) -> str:
        return str(self)

class ApplicationRecord:
    """An application installed on a device, as reported by /query/apps"""

    name: str
    """The application's display name"""

    version: str
    """The application's version string"""

    id: int
    """The numeric application id, as used by /launch/<id> and /query/icon/<id>"""

    def __init__(self, name: str, version: str, id: int):
        self.name = name
        self.version = version
        self.id = id

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ApplicationRecord):
            return NotImplemented
        return (self.name, self.version, self.id) == (other.name, other.version, other.id)

    def __hash__(self) -> int:
        return hash((self.name, self.version, self.id))

    def __str__(self) -> str:
        return f"ApplicationRecord(id={self.id}, name='{self.name}', version='{self.version}')"

    def __repr__(self) -> str:
        return str(self)

class Key(Enum):
    """Named remote keys. The value of each member is its canonical ECP name."""
    HOME = "Home"
    REV = "Rev"
    FWD = "Fwd"
    PLAY = "Play"
    SELECT = "Select"
    LEFT = "Left"
    RIGHT = "Right"
    DOWN = "Down"
    UP = "Up"
    BACK = "Back"
    INSTANT_REPLAY = "InstantReplay"
    INFO = "Info"
    BACKSPACE = "Backspace"
    SEARCH = "Search"
    ENTER = "Enter"

    PROBE = ""
    """Sentinel sent only to test whether a device is reachable. A probe is
       answered with the device's banner rather than an HTTP status line, and
       uses short timeouts."""

    @property
    def wire_name(self) -> str:
        return self.value

class LiteralKey:
    """A key command that types a single character."""

    char: str
    """The character to send; always exactly one code point."""

    def __init__(self, char: str):
        if not isinstance(char, str) or len(char) != 1:
            raise ValueError(f"LiteralKey requires exactly one character, got {char!r}")
        self.char = char

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, LiteralKey):
            return NotImplemented
        return self.char == other.char

    def __hash__(self) -> int:
        return hash(self.char)

    def __str__(self) -> str:
        return f"LiteralKey({self.char!r})"

    def __repr__(self) -> str:
        return str(self)

KeyCommand = Union[Key, LiteralKey]
"""Anything that can be sent with a /key<action>/ command."""

class KeyAction(Enum):
    """The verb applied to a key. The value is the suffix used in /key<action>/."""
    PRESS = "press"
    UP = "up"
    DOWN = "down"

class TouchAction(Enum):
    """The verb applied to a touch point. The value is the suffix used in /touch<action>/."""
    DRAG = "drag"
    UP = "up"
    DOWN = "down"

class TouchPoint:
    """A screen coordinate in device resolution units. Not range-checked here;
       devices reject out-of-range points themselves."""

    x: int
    y: int

    def __init__(self, x: int, y: int):
        self.x = x
        self.y = y

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TouchPoint):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def __str__(self) -> str:
        return f"TouchPoint({self.x}, {self.y})"

    def __repr__(self) -> str:
        return str(self)
