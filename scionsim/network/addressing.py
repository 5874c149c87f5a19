"""
Socket address and network prefix parsing.
"""

import ipaddress
from dataclasses import dataclass

from scionsim.errors import InvalidAddress

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address
IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


@dataclass(frozen=True)
class SocketAddr:
    ip: IPAddress
    port: int

    @property
    def host(self) -> str:
        return str(self.ip)

    def __str__(self) -> str:
        if self.ip.version == 6:
            return f"[{self.ip}]:{self.port}"
        return f"{self.ip}:{self.port}"


def parse_socket_addr(text: str) -> SocketAddr:
    """Parse "a.b.c.d:port" or "[v6]:port"."""
    if not isinstance(text, str):
        raise InvalidAddress(f"expected a socket address string, got {text!r}")

    text = text.strip()
    if text.startswith("["):
        host, sep, port = text[1:].partition("]:")
    else:
        host, sep, port = text.rpartition(":")

    if not sep or not host:
        raise InvalidAddress(f"'{text}' is not of the form <ip>:<port>")

    try:
        ip = ipaddress.ip_address(host)
    except ValueError as e:
        raise InvalidAddress(f"'{text}': {e}") from None

    if ip.version == 6 and not text.startswith("["):
        raise InvalidAddress(f"'{text}': IPv6 addresses must be bracketed")

    if not (port.isascii() and port.isdigit()) or int(port) > 0xFFFF:
        raise InvalidAddress(f"'{text}': invalid port '{port}'")

    return SocketAddr(ip=ip, port=int(port))


def parse_prefix(text: str) -> IPNetwork:
    """Parse a network prefix such as "10.0.0.0/24"; host bits are masked off."""
    if not isinstance(text, str):
        raise InvalidAddress(f"expected a network prefix string, got {text!r}")

    try:
        return ipaddress.ip_network(text.strip(), strict=False)
    except ValueError as e:
        raise InvalidAddress(f"'{text}': {e}") from None
