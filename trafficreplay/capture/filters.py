"""Capture engine selection, BPF filter construction and link-layer helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Optional, Sequence


class EngineType(IntEnum):
    """Available engines for intercepting traffic."""

    PCAP = 1
    PCAP_FILE = 2
    RAW_SOCKET = 4
    AF_PACKET = 8

    @classmethod
    def parse(cls, value: str) -> "EngineType":
        """Parse an engine name as given on the command line."""
        try:
            return _ENGINE_NAMES[value]
        except KeyError:
            raise ValueError(f"invalid engine {value}") from None

    def __str__(self) -> str:
        return _ENGINE_LABELS[self]


_ENGINE_NAMES = {
    "": EngineType.PCAP,
    "libpcap": EngineType.PCAP,
    "pcap_file": EngineType.PCAP_FILE,
    "raw_socket": EngineType.RAW_SOCKET,
    "af_packet": EngineType.AF_PACKET,
}

_ENGINE_LABELS = {
    EngineType.PCAP: "libpcap",
    EngineType.PCAP_FILE: "pcap_file",
    EngineType.RAW_SOCKET: "raw_socket",
    EngineType.AF_PACKET: "af_packet",
}


@dataclass(frozen=True)
class InterfaceInfo:
    """A capture interface: its name and the IP addresses bound to it."""

    name: str = ""
    addresses: tuple[str, ...] = field(default_factory=tuple)


def listen_all(addr: str) -> bool:
    """True when ``addr`` means every local address."""
    return addr in ("", "0.0.0.0", "[::]", "::")


def is_device(addr: str, iface: InterfaceInfo) -> bool:
    """True when ``addr`` names the interface or one of its addresses."""
    return addr == iface.name or addr in iface.addresses


def interface_addresses(iface: InterfaceInfo) -> list[str]:
    """The interface's addresses as strings."""
    return list(iface.addresses)


def ports_filter(transport: str, direction: str, ports: Sequence[int]) -> str:
    """BPF expression matching the given ports, or every port when none is set."""
    if not ports or ports[0] == 0:
        return f"{transport} {direction} portrange 0-{(1 << 16) - 1}"
    return " or ".join(f"{transport} {direction} port {port}" for port in ports)


def hosts_filter(direction: str, hosts: Iterable[str]) -> str:
    """BPF expression matching any of the given hosts."""
    return " or ".join(f"{direction} host {host}" for host in hosts)


def _directional(transport: str, direction: str, ports: Sequence[int], hosts: list[str]) -> str:
    expr = ports_filter(transport, direction, ports)
    if hosts:
        return f"(({expr}) and ({hosts_filter(direction, hosts)}))"
    return f"({expr})"


def build_filter(
    host: str,
    ports: Sequence[int],
    transport: str = "tcp",
    track_response: bool = False,
    iface: Optional[InterfaceInfo] = None,
) -> str:
    """Build the automatic BPF filter applied to a capture handle.

    ``host`` may be an address, an interface name, "localhost" or empty.
    With ``iface`` None the filter applies to no particular interface, as
    for reading a capture file.
    """
    if iface is None:
        iface = InterfaceInfo()
    if host == "localhost":
        host = "127.0.0.1"
    transport = transport or "tcp"

    hosts = [host]
    if listen_all(host) or is_device(host, iface):
        hosts = interface_addresses(iface)

    expr = _directional(transport, "dst", ports, hosts)
    if track_response:
        expr = f"{expr} or {_directional(transport, 'src', ports, hosts)}"
    return expr


_LINK_TYPE_LENGTHS = {
    1: 14,  # Ethernet
    0: 4,  # Null
    108: 4,  # Loop
    101: 0,  # Raw
    12: 0,
    14: 0,
    228: 0,  # IPv4
    229: 0,  # IPv6
    113: 16,  # Linux SLL
    10: 13,  # FDDI
    226: 24,  # IPNET
}


def link_type_length(link_type: int) -> Optional[int]:
    """Length of the link-layer header for a link type, or None if unknown."""
    return _LINK_TYPE_LENGTHS.get(int(link_type))


def afpacket_compute_size(target_size_mb: int, snaplen: int, page_size: int) -> tuple[int, int, int]:
    """Compute (frame size, block size, block count) for an AF_PACKET ring.

    The ring stays just under ``target_size_mb`` and the block size is a
    multiple of both the frame size and the page size.
    """
    if snaplen < page_size:
        frame_size = page_size // (page_size // snaplen)
    else:
        frame_size = (snaplen // page_size + 1) * page_size
    block_size = frame_size * 128
    num_blocks = (target_size_mb * 1024 * 1024) // block_size
    if num_blocks == 0:
        raise ValueError("Interface buffersize is too small")
    return frame_size, block_size, num_blocks