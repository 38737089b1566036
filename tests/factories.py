from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from core.domain.entities.pair_entity import PairEntity, TokenMetadataEntity
from core.domain.entities.trade_record_entity import TradeRecordEntity
from core.domain.errors import TradeFetchError
from core.repositories.trade_repository import TradeRepository
from core.services.trade_normalization_service import TradeNormalizationService

DAY = "2025-03-31"


def at(hhmm: str, day: str = DAY) -> datetime:
    """UTC instant for "HH:MM" (or "HH:MM:SS") on the test day."""
    if hhmm.count(":") == 1:
        hhmm += ":00"
    return datetime.fromisoformat(f"{day}T{hhmm}").replace(tzinfo=timezone.utc)


def make_trade(
    hhmm: str,
    *,
    in0: float = 0.0,
    out0: float = 0.0,
    in1: float = 0.0,
    out1: float = 0.0,
    pair: str = "1",
    signer: str = "alice",
    day: str = DAY,
) -> TradeRecordEntity:
    ts = at(hhmm, day)
    return TradeRecordEntity(
        pair_id=pair,
        created=TradeNormalizationService.format_timestamp(ts),
        timestamp=ts,
        amount0_in=in0,
        amount0_out=out0,
        amount1_in=in1,
        amount1_out=out1,
        signer=signer,
    )


def scenario_trades() -> List[TradeRecordEntity]:
    """
    00:05 buy 10 base for 100 quote  -> 10
    00:40 sell 5 base for 60 quote   -> 12
    01:10 buy 2 base for 30 quote    -> 15
    """
    return [
        make_trade("00:05", out0=10, in1=100),
        make_trade("00:40", in0=5, out1=60),
        make_trade("01:10", out0=2, in1=30),
    ]


class FakeTradeRepository(TradeRepository):
    """
    In-memory TradeRepository. `created_after` is compared as an instant, strictly.
    """

    def __init__(self, trades: Optional[List[TradeRecordEntity]] = None, pairs: Optional[List[PairEntity]] = None):
        self.trades: List[TradeRecordEntity] = list(trades or [])
        self.pairs: List[PairEntity] = list(pairs or [])
        self.fail = False
        self.calls: List[dict] = []

    def add(self, *trades: TradeRecordEntity) -> None:
        self.trades.extend(trades)

    async def list_trades(self, pair_id, *, created_after=None, ascending=True):
        self.calls.append({"pair_id": pair_id, "created_after": created_after, "ascending": ascending})
        if self.fail:
            raise TradeFetchError("node unreachable")

        out = [t for t in self.trades if t.pair_id == pair_id]
        if created_after is not None:
            boundary = TradeNormalizationService.parse_timestamp(created_after)
            out = [t for t in out if t.timestamp > boundary]
        return sorted(out, key=lambda t: t.timestamp, reverse=not ascending)

    async def list_pairs(self):
        if self.fail:
            raise TradeFetchError("node unreachable")
        return list(self.pairs)

    async def get_token_metadata(self, contracts):
        return {c: TokenMetadataEntity(contract=c, symbol=c) for c in contracts}


class Clock:
    """Mutable clock for use cases that take a `clock` callable."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now
