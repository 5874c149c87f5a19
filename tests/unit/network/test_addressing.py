"""
Unit tests for socket address and prefix parsing.
"""

import ipaddress

import pytest

from scionsim.errors import InvalidAddress
from scionsim.network.addressing import SocketAddr, parse_prefix, parse_socket_addr


class TestParseSocketAddr:
    def test_ipv4(self):
        addr = parse_socket_addr("10.0.100.20:9001")

        assert addr == SocketAddr(ipaddress.ip_address("10.0.100.20"), 9001)
        assert addr.host == "10.0.100.20"
        assert str(addr) == "10.0.100.20:9001"

    def test_ipv6(self):
        addr = parse_socket_addr("[::1]:8082")

        assert addr.ip == ipaddress.ip_address("::1")
        assert addr.port == 8082
        assert str(addr) == "[::1]:8082"

    def test_port_zero_allowed(self):
        assert parse_socket_addr("127.0.0.1:0").port == 0

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "127.0.0.1",
            "127.0.0.1:",
            ":80",
            "localhost:80",
            "127.0.0.1:65536",
            "127.0.0.1:-1",
            "127.0.0.1:http",
            "::1:80",
            "[::1]80",
            "300.0.0.1:80",
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(InvalidAddress):
            parse_socket_addr(text)

    def test_non_string_rejected(self):
        with pytest.raises(InvalidAddress):
            parse_socket_addr(8080)


class TestParsePrefix:
    def test_ipv4_prefix(self):
        assert parse_prefix("10.0.0.0/24") == ipaddress.ip_network("10.0.0.0/24")

    def test_ipv6_prefix(self):
        assert parse_prefix("fd00::/64").version == 6

    def test_host_bits_are_masked(self):
        assert parse_prefix("10.0.0.7/24") == ipaddress.ip_network("10.0.0.0/24")

    @pytest.mark.parametrize("text", ["10.0.0.0/33", "not-a-prefix", "10.0.0/24x", ""])
    def test_malformed(self, text):
        with pytest.raises(InvalidAddress):
            parse_prefix(text)
