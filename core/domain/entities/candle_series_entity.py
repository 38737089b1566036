from __future__ import annotations

from typing import Any, Dict, Tuple

from core.domain.entities.base_entity import DomainEntity
from core.domain.entities.candle_entity import CandleEntity
from core.domain.entities.volume_bar_entity import VolumeBarEntity


class CandleSeriesEntity(DomainEntity):
    """
    Output of one aggregation run: a gap-free candle sequence and its parallel
    volume sequence (same bucket_start at every index).

    An empty series means "no data for this selection" (no trade had a
    derivable price). dropped_trades counts trades excluded because their price
    was undefined.
    """

    interval_minutes: int
    inverted: bool

    candles: Tuple[CandleEntity, ...] = ()
    volumes: Tuple[VolumeBarEntity, ...] = ()

    trade_count: int = 0
    dropped_trades: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.candles

    @property
    def last_candle(self) -> CandleEntity | None:
        return self.candles[-1] if self.candles else None

    def to_chart(self) -> Dict[str, Any]:
        """
        Rendering-agnostic payload: epoch-second keyed candles and volumes.
        """
        return {
            "candles": [c.to_chart() for c in self.candles],
            "volumes": [v.to_chart() for v in self.volumes],
        }
