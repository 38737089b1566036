from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from adapters.external.xian.trade_repository_graphql import TradeRepositoryGraphQL
from adapters.external.xian.xian_dex_client import XianDexClient
from adapters.external.xian.xian_graphql_client import XianGraphQLClient
from config.settings import settings
from core.domain.entities.chart_selection_entity import ChartSelectionEntity
from core.domain.entities.chart_snapshot_entity import ChartSnapshotEntity
from core.domain.errors import ChartDataError, PairNotFoundError
from core.repositories.trade_repository import TradeRepository
from core.services.candle_aggregation_service import CandleAggregationService
from core.usecases.live_merge_cursor_use_case import LiveMergeCursorUseCase


class ChartSupervisor:
    """
    High-level supervisor for api-dex-chart.

    Responsibilities:
    - Own the GraphQL client and the trade repository.
    - Run exactly one live cursor for the active (pair, interval, inversion) selection;
      concurrent switches are serialized.
    - On a selection switch: stop the timer, drop the old cursor and its trades,
      cold-load the new selection, restart the timer. Nothing is reused across switches.
    - Pause/resume the timer when the consuming view goes inactive/active.
    """

    def __init__(self, *, trade_repository: TradeRepository | None = None) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)
        self._dex_client: XianDexClient | None = None
        self._repo: TradeRepository | None = trade_repository
        self._aggregator = CandleAggregationService()
        self._live: LiveMergeCursorUseCase | None = None
        self._select_lock = asyncio.Lock()

    @property
    def repository(self) -> TradeRepository:
        if self._repo is None:
            raise RuntimeError("ChartSupervisor is not started")
        return self._repo

    @property
    def aggregator(self) -> CandleAggregationService:
        return self._aggregator

    @property
    def live(self) -> LiveMergeCursorUseCase | None:
        return self._live

    @property
    def snapshot(self) -> Optional[ChartSnapshotEntity]:
        return self._live.snapshot if self._live is not None else None

    async def start(self) -> None:
        """
        Build external clients and, if enabled, open the default live selection.
        """
        if self._repo is None:
            http = XianGraphQLClient(
                endpoint=settings.GRAPHQL_ENDPOINT,
                timeout_s=settings.GRAPHQL_TIMEOUT_S,
            )
            self._dex_client = XianDexClient(http=http, pairs_contract=settings.PAIRS_CONTRACT)
            self._repo = TradeRepositoryGraphQL(self._dex_client)

        if not settings.LIVE_AUTOSTART:
            self._logger.info("Live autostart disabled; waiting for a selection.")
            return

        try:
            selection = await self._default_selection()
            if selection is None:
                self._logger.error("No trading pairs found; live chart not started.")
                return
            await self.select(selection)
        except ChartDataError as exc:
            # the service stays up; a later PUT /live/selection retries
            self._logger.error("Could not open default live selection: %s", exc)

    async def stop(self) -> None:
        """
        Stop the live cursor and close external clients.
        """
        async with self._select_lock:
            if self._live is not None:
                with contextlib.suppress(Exception):
                    await self._live.stop()
                self._live = None

            if self._dex_client is not None:
                with contextlib.suppress(Exception):
                    await self._dex_client.aclose()
                self._dex_client = None

    async def select(self, selection: ChartSelectionEntity) -> ChartSnapshotEntity:
        """
        Switch the live chart to a new selection (cold load + restart timer).

        Raises:
            TradeFetchError: the cold load failed; no live selection is active afterwards.
        """
        async with self._select_lock:
            return await self._switch(selection)

    async def _switch(self, selection: ChartSelectionEntity) -> ChartSnapshotEntity:
        if self._live is not None:
            await self._live.stop()
            self._logger.info(
                "Live selection %s -> %s",
                self._live.selection.describe(),
                selection.describe(),
            )
            self._live = None

        live = LiveMergeCursorUseCase(
            selection=selection,
            trade_repository=self.repository,
            aggregation_service=self._aggregator,
            poll_every_s=settings.LIVE_POLL_EVERY_S,
            grace_window_s=settings.LIVE_GRACE_WINDOW_S,
        )
        snapshot = await live.initialize()
        live.start()
        self._live = live
        return snapshot

    async def pause(self) -> bool:
        if self._live is None:
            return False
        await self._live.pause()
        return True

    def resume(self) -> bool:
        if self._live is None:
            return False
        self._live.resume()
        return True

    async def _default_selection(self) -> ChartSelectionEntity | None:
        pair_id = (settings.DEFAULT_PAIR_ID or "").strip()
        if pair_id:
            if await self.repository.get_pair(pair_id) is None:
                raise PairNotFoundError(f"DEFAULT_PAIR_ID={pair_id} not found")
        else:
            pairs = await self.repository.list_pairs()
            if not pairs:
                return None
            pair_id = pairs[0].id

        return ChartSelectionEntity(
            pair_id=pair_id,
            interval=settings.DEFAULT_INTERVAL_MINUTES,
            inverted=settings.DEFAULT_INVERTED,
        )
