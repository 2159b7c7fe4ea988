#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Builds the request bytes for ECP commands. Nothing here touches the network.

Every command is a bare HTTP request line followed by an empty header block:

    POST /key<action>/<key> HTTP/1.1\\r\\n\\r\\n
    POST /touch<action>/<x>.<y> HTTP/1.1\\r\\n\\r\\n
    POST /launch/<app_id> HTTP/1.1\\r\\n\\r\\n
    POST <path_and_query> HTTP/1.1\\r\\n\\r\\n
"""

from __future__ import annotations

import re

from .internal_types import *
from .models import Key, LiteralKey, KeyCommand, KeyAction, TouchAction, TouchPoint

LITERAL_PREFIX = "Lit_"

_unescaped_literal_re = re.compile(r'^[a-zA-Z0-9]$')

def _post_request(path: str) -> bytes:
    return f"POST {path} HTTP/1.1\r\n\r\n".encode('utf-8')

def literal_key_name(char: str) -> str:
    """Returns the ECP key name for a literal character.

    ASCII letters and digits are sent as-is. Any other character is sent as
    the %XX escape of each byte of its UTF-8 encoding (uppercase hex, without
    zero padding); e.g. 'é' -> "Lit_%C3%A9", ' ' -> "Lit_%20".
    """
    if _unescaped_literal_re.match(char):
        return LITERAL_PREFIX + char
    return LITERAL_PREFIX + ''.join(f"%{b:X}" for b in char.encode('utf-8'))

def key_name(key: KeyCommand) -> str:
    if isinstance(key, LiteralKey):
        return literal_key_name(key.char)
    return key.wire_name

def encode_key(action: KeyAction, key: KeyCommand) -> bytes:
    """Encodes a key press/up/down command for a named key, a literal
       character, or the liveness probe sentinel."""
    return _post_request(f"/key{action.value}/{key_name(key)}")

def encode_literal(action: KeyAction, char: str) -> bytes:
    """Encodes a key command that types a single character."""
    return encode_key(action, LiteralKey(char))

def encode_touch(action: TouchAction, point: TouchPoint) -> bytes:
    return _post_request(f"/touch{action.value}/{point.x}.{point.y}")

def encode_launch(app_id: int) -> bytes:
    return _post_request(f"/launch/{app_id}")

def encode_custom(path_and_query: str) -> bytes:
    """Encodes an arbitrary POST. path_and_query is passed through verbatim;
       the caller is responsible for it being a well-formed request target."""
    return _post_request(path_and_query)
