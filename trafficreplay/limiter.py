"""Rate limiting wrapper for input and output plugins."""

from __future__ import annotations

import random
import re
import time
from typing import Any

_INTEGER = re.compile(r"[+-]?[0-9]+")
_SECOND_NS = 1_000_000_000


def _atoi(text: str) -> int:
    return int(text) if _INTEGER.fullmatch(text) else 0


def parse_limit_options(options: str) -> tuple[int, bool]:
    """Parse ``"N"`` (requests per second) or ``"N%"`` (percentage)."""
    index = options.find("%")
    if index > 0:
        return _atoi(options[:index]), True
    return _atoi(options), False


class Limiter:
    """Wraps a plugin and drops messages above an absolute or relative limit.

    Plugins that pace themselves (those with a ``speed_factor`` attribute) are
    slowed down or sped up instead of having messages dropped when a
    percentage is given.
    """

    def __init__(self, plugin: Any, options: str) -> None:
        self.plugin = plugin
        self.limit, self.is_percent = parse_limit_options(options)
        self._current_rps = 0
        self._current_time = time.monotonic_ns()
        if self._paces_itself():
            plugin.speed_factor = self.limit / 100

    def _paces_itself(self) -> bool:
        return self.is_percent and hasattr(self.plugin, "speed_factor")

    def is_limited(self) -> bool:
        """Decide whether the next message should be dropped."""
        if self._paces_itself():
            return False
        if self.is_percent:
            return self.limit <= random.randrange(100)

        now = time.monotonic_ns()
        if now - self._current_time > _SECOND_NS:
            self._current_time = now
            self._current_rps = 0
        if self._current_rps >= self.limit:
            return True
        self._current_rps += 1
        return False

    def plugin_write(self, msg: Any) -> int:
        """Forward ``msg`` unless limited; return the number of bytes written."""
        if self.is_limited():
            return 0
        write = getattr(self.plugin, "plugin_write", None)
        if write is None:
            raise BrokenPipeError("wrapped plugin cannot be written to")
        return write(msg)

    def plugin_read(self) -> Any:
        """Read from the wrapped plugin; return None when the message is dropped."""
        read = getattr(self.plugin, "plugin_read", None)
        if read is None:
            raise BrokenPipeError("wrapped plugin cannot be read from")
        msg = read()
        if self.is_limited():
            return None
        return msg

    def close(self) -> None:
        """Close the wrapped plugin if it can be closed."""
        close = getattr(self.plugin, "close", None)
        if close is not None:
            close()

    def __str__(self) -> str:
        flag = "true" if self.is_percent else "false"
        return f"Limiting {self.plugin} to: {self.limit} (isPercent: {flag})"