from __future__ import annotations

from typing import Any, Dict

from pydantic import Field

from core.domain.entities.base_entity import DomainEntity
from core.domain.entities.candle_entity import CandleEntity
from core.domain.enums import VolumeSide


class VolumeBarEntity(DomainEntity):
    """
    Quote-asset volume for one bucket, paired 1:1 with a CandleEntity.
    """

    bucket_start: int
    value: float = Field(ge=0.0)
    side: VolumeSide

    @classmethod
    def for_candle(cls, candle: CandleEntity, value: float) -> "VolumeBarEntity":
        """
        Build the bar for a candle; side follows the candle direction, zero volume is neutral.
        """
        if value == 0:
            side = VolumeSide.NEUTRAL
        elif candle.close >= candle.open:
            side = VolumeSide.UP
        else:
            side = VolumeSide.DOWN
        return cls(bucket_start=candle.bucket_start, value=float(value), side=side)

    @property
    def time(self) -> int:
        return self.bucket_start // 1000

    def to_chart(self) -> Dict[str, Any]:
        return {"time": self.time, "value": self.value, "side": self.side.value}
