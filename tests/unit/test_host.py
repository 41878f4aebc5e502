"""
Module: test_host.py
Description: Unit tests for local host discovery.
"""

import socket

from raven_client.utils import host


class FakeUdpSocket:
    """UDP socket reporting a fixed local address."""

    address = "192.0.2.2"
    fail = False

    def __init__(self, *args, **kwargs):
        self.connected_to = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def connect(self, target):
        if self.fail:
            raise OSError("Network is unreachable")
        self.connected_to = target

    def getsockname(self):
        return (self.address, 40000)


def _loopback_addrinfo(*args, **kwargs):
    return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.1.1", 0))]


class TestLocalAddress:
    """Test cases for local_address."""

    def test_interface_address_when_host_name_is_loopback(self, monkeypatch):
        """Test a real interface address wins over a loopback host name entry."""
        monkeypatch.setattr(host.socket, "socket", FakeUdpSocket)
        monkeypatch.setattr(host.socket, "getaddrinfo", _loopback_addrinfo)

        assert host.local_address() == "192.0.2.2"

    def test_host_name_address_without_route(self, monkeypatch):
        """Test the host name's address is used when no interface route exists."""
        class Unrouted(FakeUdpSocket):
            fail = True

        def addrinfo(*args, **kwargs):
            return [
                (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", 0)),
                (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.1.2.3", 0)),
            ]

        monkeypatch.setattr(host.socket, "socket", Unrouted)
        monkeypatch.setattr(host.socket, "getaddrinfo", addrinfo)

        assert host.local_address() == "10.1.2.3"

    def test_loopback_interface_ignored(self, monkeypatch):
        """Test a loopback interface address is not reported."""
        class Loopback(FakeUdpSocket):
            address = "127.0.0.1"

        monkeypatch.setattr(host.socket, "socket", Loopback)
        monkeypatch.setattr(host.socket, "getaddrinfo", _loopback_addrinfo)

        assert host.local_address() == host.UNKNOWN_ADDRESS

    def test_unknown_address(self, monkeypatch):
        """Test 0.0.0.0 is reported when nothing resolves."""
        class Unrouted(FakeUdpSocket):
            fail = True

        def no_addrinfo(*args, **kwargs):
            raise socket.gaierror("Name or service not known")

        monkeypatch.setattr(host.socket, "socket", Unrouted)
        monkeypatch.setattr(host.socket, "getaddrinfo", no_addrinfo)

        assert host.local_address() == "0.0.0.0"
