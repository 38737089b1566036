from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.domain.entities.base_entity import DomainEntity


class AggregationCursorEntity(DomainEntity):
    """
    Watermark of the most recent trade folded into the live series.

    watermark is the collaborator's own timestamp string (sent back verbatim as
    the "created after" filter); watermark_ts is the parsed instant used to
    compare cursors. Both are None before the first aggregation.
    """

    watermark: Optional[str] = None
    watermark_ts: Optional[datetime] = None

    @property
    def is_set(self) -> bool:
        return self.watermark is not None

    def advance(self, *, watermark: str, watermark_ts: datetime) -> "AggregationCursorEntity":
        """
        Return a cursor moved forward to (watermark, watermark_ts), or self if that
        would not move it forward. Never regresses.
        """
        if self.watermark_ts is not None and watermark_ts <= self.watermark_ts:
            return self
        return AggregationCursorEntity(watermark=watermark, watermark_ts=watermark_ts)
