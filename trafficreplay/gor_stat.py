"""Simple running statistics with optional periodic logging."""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


def _div_trunc(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


class GorStat:
    """Tracks latest, mean, maximum and count of reported values.

    When enabled, values are recorded and a background thread logs the
    statistics every ``rate_ms`` milliseconds, resetting them each time.
    """

    def __init__(self, name: str, rate_ms: int, enabled: bool) -> None:
        self.name = name
        self.rate_ms = rate_ms
        self.enabled = enabled
        self.latest = 0
        self.mean = 0
        self.max = 0
        self.count = 0
        self._lock = threading.Lock()
        if enabled:
            threading.Thread(
                target=self._report, name=f"stats-{name}", daemon=True
            ).start()

    def write(self, latest: int) -> None:
        """Record a value when statistics are enabled."""
        if not self.enabled:
            return
        with self._lock:
            if latest > self.max:
                self.max = latest
            if latest != 0:
                self.mean = _div_trunc(self.mean * self.count + latest, self.count + 1)
            self.latest = latest
            self.count += 1

    def reset(self) -> None:
        """Clear all recorded values."""
        with self._lock:
            self.latest = 0
            self.max = 0
            self.mean = 0
            self.count = 0

    def header(self) -> str:
        """Column names matching the output of ``str()``."""
        return f"{self.name}:latest,mean,max,count,count/second,gcount"

    def __str__(self) -> str:
        per_second = _div_trunc(self.count, self.rate_ms // 1000)
        fields = (
            self.latest,
            self.mean,
            self.max,
            self.count,
            per_second,
            threading.active_count(),
        )
        return f"{self.name}:" + ",".join(str(value) for value in fields)

    def _report(self) -> None:
        logger.info("\n%s", self.header())
        idle = threading.Event()
        while not idle.wait(self.rate_ms / 1000):
            logger.info("\n%s", self)
            self.reset()