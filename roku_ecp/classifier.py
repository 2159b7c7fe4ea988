#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Decides whether a device accepted a command, from the first bytes of its answer."""

from __future__ import annotations

import re

from .constants import RESPONSE_WINDOW_SIZE, LIVENESS_MARKER

_success_status_re = re.compile(r'HTTP(.+?)200\sOK')

def classify_response(response: bytes, is_liveness_probe: bool=False) -> bool:
    """Returns True iff response indicates success.

    Only the first RESPONSE_WINDOW_SIZE bytes are considered. For a liveness probe,
    success means the device banner ("Roku") is present; otherwise an HTTP status
    line reading "200 OK" must be present. Never raises; empty or undecodable
    input is a failure.
    """
    window = response[:RESPONSE_WINDOW_SIZE].decode('utf-8', errors='replace')
    if is_liveness_probe:
        return LIVENESS_MARKER in window
    return not _success_status_re.search(window) is None
