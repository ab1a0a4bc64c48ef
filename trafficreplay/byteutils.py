"""Range-based editing helpers for byte strings."""

from __future__ import annotations


def _check_range(data: bytes, start: int, end: int) -> None:
    if not 0 <= start <= end <= len(data):
        raise IndexError(
            f"range [{start}:{end}] out of bounds for length {len(data)}"
        )


def cut(data: bytes, start: int, end: int) -> bytes:
    """Return ``data`` with the bytes in ``[start, end)`` removed."""
    _check_range(data, start, end)
    return data[:start] + data[end:]


def insert(data: bytes, index: int, chunk: bytes) -> bytes:
    """Return ``data`` with ``chunk`` inserted before position ``index``."""
    _check_range(data, index, index)
    return data[:index] + chunk + data[index:]


def replace(data: bytes, start: int, end: int, new: bytes) -> bytes:
    """Return ``data`` with the bytes in ``[start, end)`` replaced by ``new``."""
    _check_range(data, start, end)
    return data[:start] + new + data[end:]