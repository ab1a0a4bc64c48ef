"""Writing captured packets to a stream in the classic libpcap file format."""

from __future__ import annotations

import struct
import time
from dataclasses import dataclass
from typing import BinaryIO, Optional

MAGIC_MICROSECONDS = 0xA1B2C3D4
MAGIC_NANOSECONDS = 0xA1B23C4D
VERSION_MAJOR = 2
VERSION_MINOR = 4

_NANOS_PER_SECOND = 1_000_000_000
_NANOS_PER_MICRO = 1000
_NANOS_PER_NANO = 1

_FILE_HEADER = struct.Struct("<IHHIIII")
_PACKET_HEADER = struct.Struct("<IIII")


@dataclass(frozen=True)
class CaptureInfo:
    """Metadata of one captured packet.

    ``timestamp_ns`` is nanoseconds since the Unix epoch; None means the
    packet is stamped with the current time when written.
    """

    timestamp_ns: Optional[int] = None
    capture_length: int = 0
    length: int = 0
    interface_index: int = 0


class PcapWriter:
    """Writes a pcap v2.4 little-endian file to a binary stream.

    Call :meth:`write_file_header` exactly once on a new stream before
    writing packets; when appending to an existing file, skip it.
    """

    def __init__(self, stream: BinaryIO, nanos: bool = False) -> None:
        self.stream = stream
        self.nanos = nanos
        self._ts_scaler = _NANOS_PER_NANO if nanos else _NANOS_PER_MICRO

    def write_file_header(self, snaplen: int, linktype: int) -> None:
        """Write the global file header."""
        magic = MAGIC_NANOSECONDS if self.nanos else MAGIC_MICROSECONDS
        self.stream.write(
            _FILE_HEADER.pack(
                magic,
                VERSION_MAJOR,
                VERSION_MINOR,
                0,  # timezone: UTC
                0,  # sigfigs: always zero
                snaplen & 0xFFFFFFFF,
                int(linktype) & 0xFFFFFFFF,
            )
        )

    def _write_packet_header(self, info: CaptureInfo) -> None:
        stamp = info.timestamp_ns
        if stamp is None:
            stamp = time.time_ns()
        secs, nanos = divmod(stamp, _NANOS_PER_SECOND)
        self.stream.write(
            _PACKET_HEADER.pack(
                secs & 0xFFFFFFFF,
                (nanos // self._ts_scaler) & 0xFFFFFFFF,
                info.capture_length & 0xFFFFFFFF,
                info.length & 0xFFFFFFFF,
            )
        )

    def write_packet(self, info: CaptureInfo, data: bytes) -> None:
        """Write one packet record; ``info`` must describe ``data``."""
        if info.capture_length != len(data):
            raise ValueError(
                f"capture length {info.capture_length} does not match "
                f"data length {len(data)}"
            )
        if info.capture_length > info.length:
            raise ValueError(f"invalid capture info {info}: capture length > length")
        self._write_packet_header(info)
        self.stream.write(data)