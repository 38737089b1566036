from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.domain.entities.chart_selection_entity import ChartSelectionEntity
from core.domain.enums import ChartInterval
from core.domain.errors import TradeFetchError, UnsupportedIntervalError
from core.repositories.trade_repository import TradeRepository
from core.services.trade_history_service import TradeHistoryService
from core.usecases.load_chart_use_case import LoadChartUseCase

from .deps import get_trade_repository
from .dtos.chart_dtos import ChartOutDTO, PairOutDTO, TradeRowOutDTO

router = APIRouter(tags=["chart"])

NO_DATA_DETAIL = "No data available for this pair"


def _interval(tf: int) -> ChartInterval:
    try:
        return ChartInterval.from_minutes(tf)
    except UnsupportedIntervalError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/pairs", response_model=List[PairOutDTO])
async def list_pairs(repo: TradeRepository = Depends(get_trade_repository)) -> List[PairOutDTO]:
    """
    List DEX pairs with token symbols and logos.
    """
    try:
        pairs = await repo.list_pairs()
    except TradeFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return [PairOutDTO.from_entity(p) for p in pairs]


@router.get("/chart", response_model=ChartOutDTO)
async def get_chart(
    pair: str = Query(..., description="Pair id"),
    tf: int = Query(60, description="Interval in minutes"),
    inverted: bool = Query(False),
    repo: TradeRepository = Depends(get_trade_repository),
) -> ChartOutDTO:
    """
    Cold-load and aggregate a chart for (pair, tf, inverted).

    Stateless: does not touch the live selection.
    """
    try:
        selection = ChartSelectionEntity(pair_id=pair, interval=_interval(tf), inverted=inverted)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    uc = LoadChartUseCase(trade_repository=repo)
    try:
        snap = await uc.execute(selection=selection)
    except TradeFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    if snap.is_empty:
        raise HTTPException(status_code=404, detail=NO_DATA_DETAIL)
    return ChartOutDTO.from_snapshot(snap)


@router.get("/trades", response_model=List[TradeRowOutDTO])
async def list_trades(
    pair: str = Query(..., description="Pair id"),
    inverted: bool = Query(False),
    limit: Optional[int] = Query(200, ge=1, le=5000),
    repo: TradeRepository = Depends(get_trade_repository),
) -> List[TradeRowOutDTO]:
    """
    Trade history for a pair, newest first.
    """
    try:
        trades = await repo.list_trades(pair, ascending=False)
    except TradeFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    rows = TradeHistoryService.rows(trades, inverted=inverted, limit=limit)
    return [TradeRowOutDTO.from_entity(r) for r in rows]
