from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from core.domain.entities.chart_selection_entity import ChartSelectionEntity
from core.domain.errors import TradeFetchError
from workers.chart_supervisor import ChartSupervisor

from .chart_router import NO_DATA_DETAIL
from .deps import get_supervisor
from .dtos.chart_dtos import ChartOutDTO, LiveChartOutDTO, SelectionUpdateDTO

router = APIRouter(prefix="/live", tags=["live"])


def _live_out(supervisor: ChartSupervisor) -> LiveChartOutDTO:
    live = supervisor.live
    if live is None or live.snapshot is None:
        raise HTTPException(status_code=404, detail="no live selection")
    if live.snapshot.is_empty:
        raise HTTPException(status_code=404, detail=NO_DATA_DETAIL)

    base = ChartOutDTO.from_snapshot(live.snapshot)
    return LiveChartOutDTO(**base.model_dump(), running=live.is_running, last_error=live.last_error)


@router.get("", response_model=LiveChartOutDTO)
async def get_live_chart(supervisor: ChartSupervisor = Depends(get_supervisor)) -> LiveChartOutDTO:
    """
    Latest series published by the live cursor of the active selection.
    """
    return _live_out(supervisor)


@router.put("/selection", response_model=LiveChartOutDTO)
async def switch_selection(
    dto: SelectionUpdateDTO,
    supervisor: ChartSupervisor = Depends(get_supervisor),
) -> LiveChartOutDTO:
    """
    Switch the live selection. Cached trades and the cursor are discarded and a
    full load is performed before the timer restarts.
    """
    selection = ChartSelectionEntity(pair_id=dto.pair, interval=dto.tf, inverted=dto.inverted)
    try:
        await supervisor.select(selection)
    except TradeFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return _live_out(supervisor)


@router.post("/pause")
async def pause_live(supervisor: ChartSupervisor = Depends(get_supervisor)) -> dict:
    """
    Pause the live timer (consuming view went inactive).
    """
    if not await supervisor.pause():
        raise HTTPException(status_code=404, detail="no live selection")
    return {"status": "paused"}


@router.post("/resume")
async def resume_live(supervisor: ChartSupervisor = Depends(get_supervisor)) -> dict:
    """
    Resume the live timer; the next fetch happens on the normal tick cadence.
    """
    if not supervisor.resume():
        raise HTTPException(status_code=404, detail="no live selection")
    return {"status": "running"}
