#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Fake sockets and HTTP responses shared by the tests."""

from __future__ import annotations

import socket
from typing import List, Optional, Tuple, Union

import requests


class FakeTcpSocket:
    """Stands in for a connected TCP socket and records what was done with it."""

    def __init__(
            self,
            response: bytes = b"",
            connect_error: Optional[OSError] = None,
            send_error: Optional[OSError] = None,
            recv_error: Optional[OSError] = None,
          ):
        self.response = response
        self.connect_error = connect_error
        self.send_error = send_error
        self.recv_error = recv_error
        self.timeouts: List[Optional[float]] = []
        self.connected_to: Optional[Tuple[str, int]] = None
        self.sent = b""
        self.recv_sizes: List[int] = []
        self.closed = False

    def settimeout(self, timeout: Optional[float]) -> None:
        self.timeouts.append(timeout)

    def connect(self, addr: Tuple[str, int]) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected_to = addr

    def sendall(self, data: bytes) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent += data

    def recv(self, bufsize: int) -> bytes:
        self.recv_sizes.append(bufsize)
        if self.recv_error is not None:
            raise self.recv_error
        return self.response[:bufsize]

    def close(self) -> None:
        self.closed = True


class FakeUdpSocket:
    """Stands in for a UDP broadcast socket. recvfrom() returns the queued datagrams
       (or raises queued exceptions) in order, then raises socket.timeout."""

    def __init__(self, datagrams: Optional[List[Union[bytes, OSError]]] = None, send_error: Optional[OSError] = None):
        self.datagrams = list(datagrams or [])
        self.send_error = send_error
        self.sockopts: List[Tuple[int, int, int]] = []
        self.bound_to: Optional[Tuple[str, int]] = None
        self.timeouts: List[Optional[float]] = []
        self.sent: List[Tuple[bytes, Tuple[str, int]]] = []
        self.recv_count = 0
        self.closed = False

    def setsockopt(self, level: int, option: int, value: int) -> None:
        self.sockopts.append((level, option, value))

    def bind(self, addr: Tuple[str, int]) -> None:
        self.bound_to = addr

    def settimeout(self, timeout: Optional[float]) -> None:
        self.timeouts.append(timeout)

    def sendto(self, data: bytes, addr: Tuple[str, int]) -> int:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((data, addr))
        return len(data)

    def recvfrom(self, bufsize: int) -> Tuple[bytes, Tuple[str, int]]:
        self.recv_count += 1
        if not self.datagrams:
            raise socket.timeout("timed out")
        item = self.datagrams.pop(0)
        if isinstance(item, OSError):
            raise item
        return item[:bufsize], ("192.168.1.2", 1900)

    def close(self) -> None:
        self.closed = True


def make_response(status_code: int = 200, content: bytes = b"", url: str = "http://192.168.1.134:8060/") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = content
    resp.url = url
    resp.reason = "OK" if status_code == 200 else "Error"
    return resp


def ecp_search_response(ip: str = "192.168.1.134", port: int = 8060, device_id: str = "P0A070000007") -> bytes:
    return (
        "HTTP/1.1 200 OK\r\n"
        "Cache-Control: max-age=3600\r\n"
        "ST: roku:ecp\r\n"
        f"LOCATION: http://{ip}:{port}/\r\n"
        f"USN: uuid:roku:ecp:{device_id}\r\n"
        "Ext: \r\n"
        "Server: Roku/9.0.0 UPnP/1.0 Roku/9.0.0\r\n"
        "\r\n"
    ).encode("ascii")


def tcp_factory(*socks: FakeTcpSocket):
    pending = list(socks)

    def factory() -> FakeTcpSocket:
        return pending.pop(0)

    return factory
