#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

import socket
from ipaddress import IPv4Address

import pytest

from roku_ecp import (
    DeviceEndpoint,
    DiscoveryConfig,
    DiscoveryEngine,
    DiscoveryState,
    EcpConfigError,
    dedupe_endpoints,
    parse_discovery_response,
)
from roku_ecp import discovery as discovery_module
from roku_ecp.discovery import SEARCH_REQUEST

from conftest import FakeUdpSocket, ecp_search_response


def run_round(sock, config=None, unique=False):
    engine = DiscoveryEngine(config=config, socket_factory=lambda: sock)
    return engine, engine.discover(unique=unique)


def test_search_request_is_exact():
    assert SEARCH_REQUEST == (
        b"M-SEARCH * HTTP/1.1\r\n"
        b"HOST: 255.255.255.255:1900\r\n"
        b"ST: roku:ecp\r\n"
        b'MAN: "ssdp:discover"\r\n'
        b"\r\n"
    )


def test_two_responses_then_silence():
    sock = FakeUdpSocket([
        ecp_search_response("192.168.1.134", 8060, "P0A070000007"),
        ecp_search_response("192.168.1.135", 8060, "YN00AA123456"),
    ])
    engine, found = run_round(sock)
    assert found == [DeviceEndpoint("192.168.1.134", 8060), DeviceEndpoint("192.168.1.135", 8060)]
    assert [e.device_id for e in found] == ["P0A070000007", "YN00AA123456"]
    assert sock.recv_count == 3
    assert sock.closed
    assert engine.state is DiscoveryState.DONE


def test_request_is_broadcast_once():
    sock = FakeUdpSocket()
    run_round(sock)
    assert sock.sent == [(SEARCH_REQUEST, ("255.255.255.255", 1900))]
    assert (socket.SOL_SOCKET, socket.SO_BROADCAST, 1) in sock.sockopts
    assert sock.bound_to is None


def test_no_responses_returns_empty_list():
    sock = FakeUdpSocket()
    engine, found = run_round(sock)
    assert found == []
    assert sock.recv_count == 1
    assert engine.state is DiscoveryState.DONE


def test_timeouts_are_applied_in_order():
    sock = FakeUdpSocket()
    run_round(sock, config=DiscoveryConfig(send_timeout_secs=0.25, receive_timeout_secs=1.5))
    assert sock.timeouts == [0.25, 1.5]


def test_duplicates_are_kept_by_default():
    response = ecp_search_response()
    _, found = run_round(FakeUdpSocket([response, response]))
    assert len(found) == 2


def test_unique_keeps_first_of_each_endpoint():
    sock = FakeUdpSocket([
        ecp_search_response("192.168.1.134", 8060, "P0A070000007"),
        ecp_search_response("192.168.1.135", 8060, "YN00AA123456"),
        ecp_search_response("192.168.1.134", 8060, "P0A070000007"),
    ])
    _, found = run_round(sock, unique=True)
    assert found == [DeviceEndpoint("192.168.1.134"), DeviceEndpoint("192.168.1.135")]


def test_non_ecp_responses_are_ignored():
    other = (
        b"HTTP/1.1 200 OK\r\n"
        b"ST: upnp:rootdevice\r\n"
        b"LOCATION: http://192.168.1.1:49152/rootDesc.xml\r\n"
        b"USN: uuid:1234::upnp:rootdevice\r\n\r\n"
    )
    _, found = run_round(FakeUdpSocket([other, ecp_search_response()]))
    assert found == [DeviceEndpoint("192.168.1.134", 8060)]


def test_response_parsing_is_case_insensitive():
    data = (
        b"HTTP/1.1 200 OK\r\n"
        b"st: ROKU:ECP\r\n"
        b"location: HTTP://10.0.0.7:8060/\r\n"
        b"usn: uuid:Roku:Ecp:p0a070000007\r\n\r\n"
    )
    endpoint = parse_discovery_response(data)
    assert endpoint == DeviceEndpoint("10.0.0.7", 8060)
    assert endpoint.address == IPv4Address("10.0.0.7")
    assert endpoint.device_id == "P0A070000007"


@pytest.mark.parametrize("data", [
    ecp_search_response(ip="192.168.1.300"),
    ecp_search_response(port=70000),
    ecp_search_response(device_id="SHORT"),
    b"HTTP/1.1 200 OK\r\nST: roku:ecp\r\nUSN: uuid:roku:ecp:P0A070000007\r\n\r\n",
    b"\xff\xfe garbage",
    b"",
])
def test_invalid_responses_parse_to_none(data):
    assert parse_discovery_response(data) is None


def test_invalid_response_does_not_end_round():
    sock = FakeUdpSocket([ecp_search_response(ip="192.168.1.300"), ecp_search_response()])
    _, found = run_round(sock)
    assert found == [DeviceEndpoint("192.168.1.134")]


def test_receive_error_ends_round():
    sock = FakeUdpSocket([ecp_search_response(), ConnectionResetError("reset"), ecp_search_response("192.168.1.135")])
    _, found = run_round(sock)
    assert found == [DeviceEndpoint("192.168.1.134")]
    assert sock.closed


def test_send_error_returns_empty_list():
    sock = FakeUdpSocket([ecp_search_response()], send_error=OSError(101, "Network is unreachable"))
    engine, found = run_round(sock)
    assert found == []
    assert sock.closed
    assert engine.state is DiscoveryState.DONE


def test_socket_creation_error_returns_empty_list():
    def factory():
        raise OSError(24, "Too many open files")

    engine = DiscoveryEngine(socket_factory=factory)
    assert engine.discover() == []
    assert engine.state is DiscoveryState.DONE


def test_source_address_is_bound(monkeypatch):
    monkeypatch.setattr(discovery_module, "is_local_ipv4_address", lambda address: address == "192.168.1.20")
    sock = FakeUdpSocket()
    run_round(sock, config=DiscoveryConfig(source_address="192.168.1.20"))
    assert sock.bound_to == ("192.168.1.20", 0)


@pytest.mark.parametrize("kwargs", [
    dict(send_timeout_secs=0),
    dict(send_timeout_secs=-1.0),
    dict(receive_timeout_secs=0),
    dict(source_address="not-an-address"),
    dict(source_address="fe80::1"),
])
def test_invalid_config_is_rejected(kwargs):
    with pytest.raises(EcpConfigError):
        DiscoveryConfig(**kwargs)


def test_non_local_source_address_is_rejected(monkeypatch):
    monkeypatch.setattr(discovery_module, "is_local_ipv4_address", lambda address: False)
    with pytest.raises(EcpConfigError):
        DiscoveryConfig(source_address="203.0.113.9")


def test_dedupe_endpoints_preserves_order():
    a = DeviceEndpoint("10.0.0.1")
    b = DeviceEndpoint("10.0.0.2")
    a2 = DeviceEndpoint("10.0.0.1", device_id="X00000000001")
    assert dedupe_endpoints([b, a, b, a2]) == [b, a]


def test_module_level_discover(monkeypatch):
    sock = FakeUdpSocket([ecp_search_response(), ecp_search_response()])
    monkeypatch.setattr(discovery_module, "_default_udp_socket_factory", lambda: sock)
    found = discovery_module.discover(receive_timeout_secs=0.1, unique=True)
    assert found == [DeviceEndpoint("192.168.1.134", 8060)]
    assert sock.timeouts == [0.5, 0.1]


class StateRecordingSocket(FakeUdpSocket):
    """Records the engine's state at each send and receive."""

    def __init__(self, datagrams=None):
        super().__init__(datagrams)
        self.engine = None
        self.seen = []

    def sendto(self, data, addr):
        self.seen.append(self.engine.state)
        return super().sendto(data, addr)

    def recvfrom(self, bufsize):
        self.seen.append(self.engine.state)
        return super().recvfrom(bufsize)


def test_state_sequence_and_fresh_second_round():
    socks = [StateRecordingSocket([ecp_search_response()]), StateRecordingSocket()]
    pending = list(socks)
    engine = DiscoveryEngine(socket_factory=lambda: pending.pop(0))
    for sock in socks:
        sock.engine = engine
    assert engine.state is DiscoveryState.IDLE

    assert len(engine.discover()) == 1
    assert socks[0].seen == [DiscoveryState.BROADCASTING, DiscoveryState.LISTENING, DiscoveryState.LISTENING]
    assert engine.state is DiscoveryState.DONE

    transitions = []
    original_set_state = engine._set_state

    def record(state):
        transitions.append(state)
        original_set_state(state)

    engine._set_state = record
    assert engine.discover() == []
    assert transitions == [
        DiscoveryState.IDLE,
        DiscoveryState.BROADCASTING,
        DiscoveryState.LISTENING,
        DiscoveryState.DONE,
    ]
    assert socks[1].sent == [(SEARCH_REQUEST, ("255.255.255.255", 1900))]
    assert socks[1].closed


def test_zero_padded_octets_are_accepted():
    endpoint = parse_discovery_response(ecp_search_response(ip="192.168.001.005"))
    assert endpoint == DeviceEndpoint("192.168.1.5", 8060)


def test_zero_padded_octet_out_of_range_is_rejected():
    assert parse_discovery_response(ecp_search_response(ip="192.168.001.256")) is None
