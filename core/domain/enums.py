from __future__ import annotations

from enum import Enum, IntEnum

from core.domain.errors import UnsupportedIntervalError


class ChartInterval(IntEnum):
    """
    Supported candle widths, in minutes.
    """

    M5 = 5
    M10 = 10
    M15 = 15
    M30 = 30
    H1 = 60
    H4 = 240
    D1 = 1440

    @property
    def millis(self) -> int:
        return int(self.value) * 60_000

    @property
    def label(self) -> str:
        """
        Short label, e.g. "15m", "4h", "1d".
        """
        minutes = int(self.value)
        if minutes % 1440 == 0:
            return f"{minutes // 1440}d"
        if minutes % 60 == 0:
            return f"{minutes // 60}h"
        return f"{minutes}m"

    @classmethod
    def from_minutes(cls, minutes: int) -> "ChartInterval":
        """
        Resolve a minute count into a supported interval.

        Raises:
            UnsupportedIntervalError: if the width is not one of the supported values.
        """
        try:
            return cls(int(minutes))
        except (TypeError, ValueError):
            supported = ", ".join(str(int(i)) for i in cls)
            raise UnsupportedIntervalError(
                f"unsupported interval {minutes!r} (minutes); expected one of: {supported}"
            ) from None


class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    UNKNOWN = "UNKNOWN"


class VolumeSide(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"
