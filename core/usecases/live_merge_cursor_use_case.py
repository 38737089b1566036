# core/usecases/live_merge_cursor_use_case.py
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Set, Tuple

from core.domain.entities.aggregation_cursor_entity import AggregationCursorEntity
from core.domain.entities.chart_selection_entity import ChartSelectionEntity
from core.domain.entities.chart_snapshot_entity import ChartSnapshotEntity
from core.domain.entities.trade_record_entity import TradeRecordEntity, unique_trades
from core.domain.errors import TradeFetchError
from core.repositories.trade_repository import TradeRepository
from core.services.candle_aggregation_service import CandleAggregationService
from core.services.trade_normalization_service import TradeNormalizationService


class LiveMergeCursorUseCase:
    """
    Keeps one selection's chart live by polling for trades newer than a watermark.

    Every successful fold re-aggregates the complete known trade set, so the
    published series is always identical to a cold rebuild of the same trades
    at the same instant. The currently-open candle and any trailing forward-filled
    candles are regenerated on each fold.

    State (known trades + cursor) is owned by this instance and only mutated by
    initialize()/refresh_once(), after the fetch has fully succeeded.

    Scheduling:
      - start() runs a timer that fires every poll_every_s.
      - A tick that fires while a refresh is still in flight is dropped, not queued.
      - pause() stops the timer; resume() restarts it without an immediate fetch.
    """

    def __init__(
        self,
        *,
        selection: ChartSelectionEntity,
        trade_repository: TradeRepository,
        aggregation_service: CandleAggregationService | None = None,
        poll_every_s: float = 30.0,
        grace_window_s: float = 5.0,
        clock: Callable[[], datetime] | None = None,
        on_publish: Callable[[ChartSnapshotEntity], None] | None = None,
        logger: logging.Logger | None = None,
    ):
        self._selection = selection
        self._trades = trade_repository
        self._aggregator = aggregation_service or CandleAggregationService()
        self._poll_every_s = float(poll_every_s)
        self._grace = timedelta(seconds=float(grace_window_s))
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))
        self._on_publish = on_publish
        self._logger = logger or logging.getLogger(self.__class__.__name__)

        self._known: List[TradeRecordEntity] = []
        self._known_keys: Set[Tuple] = set()
        self._cursor = AggregationCursorEntity()
        self._snapshot: ChartSnapshotEntity | None = None

        self._in_flight = False
        self.last_error: Optional[str] = None

        self._task: asyncio.Task | None = None
        self._refresh_task: asyncio.Task | None = None

    @property
    def selection(self) -> ChartSelectionEntity:
        return self._selection

    @property
    def cursor(self) -> AggregationCursorEntity:
        return self._cursor

    @property
    def snapshot(self) -> ChartSnapshotEntity | None:
        """
        Last published snapshot (None before the first successful load).
        """
        return self._snapshot

    @property
    def known_trades(self) -> Tuple[TradeRecordEntity, ...]:
        return tuple(self._known)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def initialize(self) -> ChartSnapshotEntity:
        """
        Full fetch + full aggregation. Sets the cursor to the newest trade folded in,
        or to now - grace window when the pair has no trades yet.
        """
        self._in_flight = True
        try:
            trades = await self._trades.list_trades(self._selection.pair_id, ascending=True)
            now = self._clock()

            keys: Set[Tuple] = set()
            known = unique_trades(trades, keys)
            known.sort(key=lambda t: t.timestamp)

            if known:
                newest = known[-1]
                cursor = AggregationCursorEntity().advance(watermark=newest.created, watermark_ts=newest.timestamp)
            else:
                start = now - self._grace
                cursor = AggregationCursorEntity(
                    watermark=TradeNormalizationService.format_timestamp(start),
                    watermark_ts=start,
                )

            self._known = known
            self._known_keys = keys
            self._cursor = cursor
            snapshot = self._publish(now)
            self.last_error = None

            self._logger.info(
                "Live chart initialized %s: trades=%s candles=%s watermark=%s",
                self._selection.describe(),
                len(known),
                len(snapshot.series.candles),
                cursor.watermark,
            )
            return snapshot
        finally:
            self._in_flight = False

    async def refresh_once(self) -> bool:
        """
        Fold trades created after the watermark into the known set and re-aggregate.

        Returns:
            True if the published series was replaced.

        Raises:
            TradeFetchError: the fetch failed; state and cursor are unchanged.
        """
        if self._in_flight:
            self._logger.debug("Refresh already in flight for %s; skipping", self._selection.describe())
            return False

        if not self._cursor.is_set:
            await self.initialize()
            return True

        self._in_flight = True
        try:
            fresh = await self._trades.list_trades(
                self._selection.pair_id,
                created_after=self._cursor.watermark,
                ascending=True,
            )
            if not fresh:
                return False

            keys = set(self._known_keys)
            folded = unique_trades(fresh, keys)
            newest = max(fresh, key=lambda t: t.timestamp)
            cursor = self._cursor.advance(watermark=newest.created, watermark_ts=newest.timestamp)

            if not folded:
                self._cursor = cursor
                return False

            self._known_keys = keys
            # re-sort: a late trade may belong to the open candle, not a new one
            self._known = sorted([*self._known, *folded], key=lambda t: t.timestamp)
            self._cursor = cursor

            snapshot = self._publish(self._clock())
            self.last_error = None
            self._logger.info(
                "Folded %s new trade(s) into %s: candles=%s watermark=%s",
                len(folded),
                self._selection.describe(),
                len(snapshot.series.candles),
                cursor.watermark,
            )
            return True
        finally:
            self._in_flight = False

    def start(self) -> None:
        """Start the live timer in background."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the timer and any refresh still running."""
        for task in (self._task, self._refresh_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._task = None
        self._refresh_task = None

    async def pause(self) -> None:
        """Stop ticking (view went inactive). Known trades and cursor are kept."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._logger.debug("Live chart paused %s", self._selection.describe())

    def resume(self) -> None:
        """Restart ticking on the normal cadence (no immediate fetch)."""
        self.start()
        self._logger.debug("Live chart resumed %s", self._selection.describe())

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._poll_every_s)
            self._tick()

    def _tick(self) -> None:
        if self._in_flight or (self._refresh_task is not None and not self._refresh_task.done()):
            self._logger.debug("Tick dropped, refresh in flight for %s", self._selection.describe())
            return
        self._refresh_task = asyncio.create_task(self._refresh_safely())

    async def _refresh_safely(self) -> None:
        try:
            await self.refresh_once()
        except TradeFetchError as exc:
            self.last_error = str(exc)
            self._logger.warning(
                "Live refresh failed for %s, keeping last series (watermark=%s): %s",
                self._selection.describe(),
                self._cursor.watermark,
                exc,
            )
        except Exception as exc:
            self.last_error = str(exc)
            self._logger.exception("Live refresh error %s: %s", self._selection.describe(), exc)

    def _publish(self, now: datetime) -> ChartSnapshotEntity:
        series = self._aggregator.aggregate(
            self._known,
            int(self._selection.interval),
            self._selection.inverted,
            now,
        )
        self._snapshot = ChartSnapshotEntity(
            selection=self._selection,
            series=series,
            trades=tuple(self._known),
            watermark=self._cursor.watermark,
            built_at=now,
        )
        if self._on_publish is not None:
            self._on_publish(self._snapshot)
        return self._snapshot
