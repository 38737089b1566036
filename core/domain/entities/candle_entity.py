# core/domain/entities/candle_entity.py
from __future__ import annotations

from typing import Any, Dict

from pydantic import model_validator

from core.domain.entities.base_entity import DomainEntity


class CandleEntity(DomainEntity):
    """
    One OHLC candle for a UTC-epoch-aligned bucket.

    bucket_start is in epoch milliseconds; the renderer receives epoch seconds
    through to_chart(). A candle with trade_count == 0 is a forward-filled bucket
    (flat at the previous close).
    """

    bucket_start: int
    interval_minutes: int

    open: float
    high: float
    low: float
    close: float

    trade_count: int = 0

    @model_validator(mode="after")
    def _check_bounds(self) -> "CandleEntity":
        if not (self.low <= self.open <= self.high and self.low <= self.close <= self.high):
            raise ValueError(
                f"OHLC out of bounds at {self.bucket_start}: "
                f"o={self.open} h={self.high} l={self.low} c={self.close}"
            )
        return self

    @property
    def time(self) -> int:
        """
        Bucket start in epoch seconds.
        """
        return self.bucket_start // 1000

    @property
    def close_time(self) -> int:
        return self.bucket_start + self.interval_minutes * 60_000 - 1

    @property
    def is_filled(self) -> bool:
        return self.trade_count == 0

    def to_chart(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
        }
