from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from core.domain.entities.chart_snapshot_entity import ChartSnapshotEntity
from core.domain.entities.pair_entity import PairEntity, TokenMetadataEntity
from core.domain.entities.trade_row_entity import TradeRowEntity
from core.domain.enums import ChartInterval


class CandleOutDTO(BaseModel):
    """
    Candle as consumed by a candlestick widget (time in epoch seconds).
    """
    time: int
    open: float
    high: float
    low: float
    close: float


class VolumeOutDTO(BaseModel):
    time: int
    value: float
    side: str = Field(..., description="up | down | neutral")


class ChartOutDTO(BaseModel):
    """
    Response DTO for an aggregated chart.
    """
    pair: str
    interval: int
    interval_label: str
    inverted: bool

    candles: List[CandleOutDTO]
    volumes: List[VolumeOutDTO]

    trade_count: int
    dropped_trades: int
    watermark: Optional[str] = None
    built_at: datetime

    @classmethod
    def from_snapshot(cls, snap: ChartSnapshotEntity) -> "ChartOutDTO":
        series = snap.series
        chart = series.to_chart()
        return cls(
            pair=snap.selection.pair_id,
            interval=int(snap.selection.interval),
            interval_label=snap.selection.interval.label,
            inverted=snap.selection.inverted,
            candles=[CandleOutDTO(**c) for c in chart["candles"]],
            volumes=[VolumeOutDTO(**v) for v in chart["volumes"]],
            trade_count=series.trade_count,
            dropped_trades=series.dropped_trades,
            watermark=snap.watermark,
            built_at=snap.built_at,
        )


class LiveChartOutDTO(ChartOutDTO):
    running: bool
    last_error: Optional[str] = None


class SelectionUpdateDTO(BaseModel):
    """
    DTO for switching the live selection. Field names match the chart URL parameters.
    """
    pair: str = Field(..., description="Pair id")
    tf: int = Field(default=60, description="Interval in minutes: 5, 10, 15, 30, 60, 240, 1440")
    inverted: bool = Field(default=False)

    @field_validator("pair")
    @classmethod
    def _strip_pair(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("pair is required")
        return v

    @field_validator("tf")
    @classmethod
    def _supported_tf(cls, v: int) -> int:
        return int(ChartInterval.from_minutes(v))


class TokenOutDTO(BaseModel):
    contract: str
    symbol: str
    logo: Optional[str] = None

    @classmethod
    def from_entity(cls, meta: Optional[TokenMetadataEntity], contract: str) -> "TokenOutDTO":
        if meta is None:
            return cls(contract=contract, symbol=contract)
        return cls(contract=meta.contract, symbol=meta.symbol, logo=meta.logo)


class PairOutDTO(BaseModel):
    id: str
    label: str
    token0: TokenOutDTO
    token1: TokenOutDTO

    @classmethod
    def from_entity(cls, pair: PairEntity) -> "PairOutDTO":
        return cls(
            id=pair.id,
            label=pair.label(),
            token0=TokenOutDTO.from_entity(pair.token0_meta, pair.token0),
            token1=TokenOutDTO.from_entity(pair.token1_meta, pair.token1),
        )


class TradeRowOutDTO(BaseModel):
    timestamp: datetime
    created: str
    side: str
    price: Optional[float] = None
    amount: float
    value: float
    signer: Optional[str] = None
    tx_hash: Optional[str] = None

    @classmethod
    def from_entity(cls, row: TradeRowEntity) -> "TradeRowOutDTO":
        return cls(
            timestamp=row.timestamp,
            created=row.created,
            side=row.side.value,
            price=row.price,
            amount=row.amount,
            value=row.value,
            signer=row.signer,
            tx_hash=row.tx_hash,
        )
