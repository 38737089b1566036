from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from core.domain.entities.chart_selection_entity import ChartSelectionEntity
from core.domain.entities.chart_snapshot_entity import ChartSnapshotEntity
from core.domain.entities.trade_record_entity import unique_trades
from core.repositories.trade_repository import TradeRepository
from core.services.candle_aggregation_service import CandleAggregationService


class LoadChartUseCase:
    """
    Cold load: fetch every trade for a pair and aggregate it for a selection.

    Behavior:
      - Trades are fetched oldest first and aggregated against the current instant.
      - Rows repeated by the source are folded once (same identity as the live cursor).
      - An empty series is returned (not raised) when no trade has a price.
      - TradeFetchError from the repository propagates unchanged.
    """

    def __init__(
        self,
        *,
        trade_repository: TradeRepository,
        aggregation_service: CandleAggregationService | None = None,
        clock: Callable[[], datetime] | None = None,
        logger: logging.Logger | None = None,
    ):
        self._trades = trade_repository
        self._aggregator = aggregation_service or CandleAggregationService()
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    async def execute(
        self,
        *,
        selection: ChartSelectionEntity,
        now: Optional[datetime] = None,
    ) -> ChartSnapshotEntity:
        trades = unique_trades(await self._trades.list_trades(selection.pair_id, ascending=True))
        now = now or self._clock()

        series = self._aggregator.aggregate(
            trades,
            int(selection.interval),
            selection.inverted,
            now,
        )

        if series.is_empty:
            self._logger.info("No priced trades for %s (fetched=%s)", selection.describe(), len(trades))
        else:
            self._logger.info(
                "Loaded %s: trades=%s candles=%s dropped=%s",
                selection.describe(),
                len(trades),
                len(series.candles),
                series.dropped_trades,
            )

        latest = max(trades, key=lambda t: t.timestamp) if trades else None
        return ChartSnapshotEntity(
            selection=selection,
            series=series,
            trades=tuple(trades),
            watermark=latest.created if latest else None,
            built_at=now,
        )
