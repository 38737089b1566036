from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from core.domain.entities.base_entity import DomainEntity
from core.domain.entities.candle_series_entity import CandleSeriesEntity
from core.domain.entities.chart_selection_entity import ChartSelectionEntity
from core.domain.entities.trade_record_entity import TradeRecordEntity


class ChartSnapshotEntity(DomainEntity):
    """
    What a chart view renders for a selection at one point in time:
    the aggregated series plus the trades it was built from.
    """

    selection: ChartSelectionEntity
    series: CandleSeriesEntity
    trades: Tuple[TradeRecordEntity, ...] = ()
    watermark: Optional[str] = None
    built_at: datetime

    @property
    def is_empty(self) -> bool:
        return self.series.is_empty
