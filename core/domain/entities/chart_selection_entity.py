from __future__ import annotations

from pydantic import field_validator

from core.domain.entities.base_entity import DomainEntity
from core.domain.enums import ChartInterval


class ChartSelectionEntity(DomainEntity):
    """
    The (pair, interval, inversion) a chart is built for.

    Hashable; one live cursor runs per selection.
    """

    pair_id: str
    interval: ChartInterval = ChartInterval.H1
    inverted: bool = False

    @field_validator("pair_id")
    @classmethod
    def _strip_pair(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("pair_id is required")
        return v

    @field_validator("interval", mode="before")
    @classmethod
    def _resolve_interval(cls, v):
        return ChartInterval.from_minutes(v)

    def describe(self) -> str:
        return f"{self.pair_id}:{self.interval.label}:{'inv' if self.inverted else 'std'}"
