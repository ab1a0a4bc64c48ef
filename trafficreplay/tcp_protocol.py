"""Protocol selection and address parsing for raw traffic interception."""

from __future__ import annotations

import re
from enum import IntEnum

_INTEGER = re.compile(r"[+-]?[0-9]+")


class TCPProtocol(IntEnum):
    """Application protocol carried over intercepted TCP streams."""

    HTTP = 0
    BINARY = 1

    @classmethod
    def parse(cls, value: str) -> "TCPProtocol":
        """Parse a protocol name as given on the command line."""
        if value in ("", "http"):
            return cls.HTTP
        if value == "binary":
            return cls.BINARY
        raise ValueError(f"unsupported protocol {value}")

    def __str__(self) -> str:
        return "binary" if self is TCPProtocol.BINARY else "http"


def _split_host_port(hostport: str) -> tuple[str, str]:
    colon = hostport.rfind(":")
    if colon < 0:
        raise ValueError(f"address {hostport}: missing port in address")

    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise ValueError(f"address {hostport}: missing ']' in address")
        if end + 1 == len(hostport):
            raise ValueError(f"address {hostport}: missing port in address")
        if end + 1 != colon:
            if hostport[end + 1] == ":":
                raise ValueError(f"address {hostport}: too many colons in address")
            raise ValueError(f"address {hostport}: missing port in address")
        host = hostport[1:end]
        open_from, close_from = 1, end + 1
    else:
        host = hostport[:colon]
        if ":" in host:
            raise ValueError(f"address {hostport}: too many colons in address")
        open_from, close_from = 0, 0

    if "[" in hostport[open_from:]:
        raise ValueError(f"address {hostport}: unexpected '[' in address")
    if "]" in hostport[close_from:]:
        raise ValueError(f"address {hostport}: unexpected ']' in address")
    return host, hostport[colon + 1:]


def parse_address(address: str) -> tuple[str, list[int]]:
    """Split ``host:port[,port...]`` into the host and its list of ports.

    IPv6 hosts are written in brackets. An empty port part gives no ports.
    """
    host, port_part = _split_host_port(address)
    ports: list[int] = []
    if port_part:
        for item in port_part.split(","):
            text = item.strip()
            if not _INTEGER.fullmatch(text):
                raise ValueError(f"parsing port error: invalid port {item!r}")
            ports.append(int(text) & 0xFFFF)
    return host, ports