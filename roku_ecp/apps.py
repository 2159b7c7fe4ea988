#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AppListFetcher -- GET queries against an ECP device:

  1. /query/apps, parsed into ApplicationRecord's in document order
  2. /query/icon/<app_id>, returned as raw image bytes for the caller to decode
  3. arbitrary GETs, reported as success/failure

The app list is a small XML document of the form

    <apps>
      <app id="12" version="4.1.218" type="appl">Netflix</app>
      ...
    </apps>

It is picked apart with regular expressions, element by element, so that one
garbled <app> element costs only that entry.
"""

from __future__ import annotations

import html
import re

import requests

from .internal_types import *
from .pkg_logging import logger
from .constants import DEFAULT_HTTP_TIMEOUT
from .exceptions import AppListParseError
from .models import DeviceEndpoint, ApplicationRecord

APPS_QUERY_PATH = "/query/apps"
ICON_QUERY_PATH = "/query/icon/"

_app_element_re = re.compile(r'<app\s(.+?)</app>', re.DOTALL)
_app_id_re = re.compile(r'\bid="(\d+)"')
_app_version_re = re.compile(r'\bversion="([^"]*)"')
_app_name_re = re.compile(r'>([^<]+)')

def parse_app_element(blob: str) -> ApplicationRecord:
    """Parses the text between "<app " and "</app>" into an ApplicationRecord.

    Raises AppListParseError if the id, version, or name is missing.
    """
    m_id = _app_id_re.search(blob)
    if m_id is None:
        raise AppListParseError(f"Missing or non-numeric id in <app> element: {blob!r}")
    m_version = _app_version_re.search(blob)
    if m_version is None:
        raise AppListParseError(f"Missing version in <app> element: {blob!r}")
    m_name = _app_name_re.search(blob)
    if m_name is None:
        raise AppListParseError(f"Missing name in <app> element: {blob!r}")
    return ApplicationRecord(
        name=html.unescape(m_name.group(1)),
        version=html.unescape(m_version.group(1)),
        id=int(m_id.group(1)),
      )

def parse_app_list(text: str) -> List[ApplicationRecord]:
    """Extracts every <app> element of an app list document, in document order.
       Malformed elements are logged and skipped."""
    result: List[ApplicationRecord] = []
    for m in _app_element_re.finditer(text):
        try:
            result.append(parse_app_element(m.group(1)))
        except AppListParseError as e:
            logger.warning(f"Skipping app list entry: {e}")
    return result

class AppListFetcher:
    timeout_secs: float
    """Timeout (in seconds) for each GET request."""

    session: Optional[requests.Session]
    """Session used for requests. If None, module-level requests.get() is used."""

    def __init__(self, timeout_secs: float=DEFAULT_HTTP_TIMEOUT, session: Optional[requests.Session]=None):
        self.timeout_secs = timeout_secs
        self.session = session

    def get(self, endpoint: DeviceEndpoint, path: str) -> Optional[requests.Response]:
        """Issues a GET for path on endpoint. Returns the response if it has a 2xx
           status, or None on any failure."""
        url = endpoint.base_url + path
        logger.debug(f"GET {url}")
        try:
            if self.session is None:
                resp = requests.get(url, timeout=self.timeout_secs)
            else:
                resp = self.session.get(url, timeout=self.timeout_secs)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"GET {url} failed: {e}")
            return None
        return resp

    def list_applications(self, endpoint: DeviceEndpoint) -> List[ApplicationRecord]:
        """Returns the applications installed on the device, in on-device order.
           Returns an empty list if the query fails."""
        resp = self.get(endpoint, APPS_QUERY_PATH)
        if resp is None:
            return []
        # The app list is declared as UTF-8 XML; don't let requests guess ISO-8859-1.
        text = resp.content.decode('utf-8', errors='replace')
        apps = parse_app_list(text)
        logger.debug(f"{endpoint} reported {len(apps)} applications")
        return apps

    def fetch_icon_bytes(self, endpoint: DeviceEndpoint, app_id: int) -> bytes:
        """Returns the raw image data of an application's icon, or b'' if the query fails."""
        resp = self.get(endpoint, f"{ICON_QUERY_PATH}{app_id}")
        if resp is None:
            return b''
        return resp.content

    def send_custom_get(self, endpoint: DeviceEndpoint, path: str) -> bool:
        """Issues a GET for an arbitrary path. Returns True iff the device answered 200 OK."""
        if not path.startswith('/'):
            path = '/' + path
        resp = self.get(endpoint, path)
        return not resp is None and resp.status_code == 200
