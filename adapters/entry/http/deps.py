from __future__ import annotations

from fastapi import HTTPException, Request

from core.repositories.trade_repository import TradeRepository
from workers.chart_supervisor import ChartSupervisor


def get_supervisor(request: Request) -> ChartSupervisor:
    """
    Supervisor attached to app.state during lifespan startup.
    """
    supervisor = getattr(request.app.state, "supervisor", None)
    if supervisor is None:
        raise HTTPException(status_code=503, detail="service not started")
    return supervisor


def get_trade_repository(request: Request) -> TradeRepository:
    return get_supervisor(request).repository
