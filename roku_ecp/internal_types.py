# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type names shared by the modules of this package.

Modules pull these in with `from .internal_types import *`.
"""

from __future__ import annotations

from typing import (
    Any,
    Callable,
    Iterable,
    List,
    Optional,
    Tuple,
    Union,
  )
from typing_extensions import Self

HostAndPort = Tuple[str, int]
"""An (ip_address, port) pair as accepted by socket.connect() and socket.sendto()."""

__all__ = [
    'Any', 'Callable', 'Iterable', 'List', 'Optional', 'Tuple', 'Union',
    'Self',
    'HostAndPort',
  ]
