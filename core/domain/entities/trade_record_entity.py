from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Set, Tuple

from pydantic import Field, field_validator

from core.domain.entities.base_entity import DomainEntity

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


class TradeRecordEntity(DomainEntity):
    """
    A single swap event on a pair, normalized.

    The four transfer legs are relative to the pair contract:
      - amount0_in/out: base asset (token0) sent to / received from the pair
      - amount1_in/out: quote asset (token1) sent to / received from the pair

    `created` is the collaborator's timestamp string kept verbatim (full precision,
    no zone offset); it is what the live cursor sends back as its watermark.
    `timestamp` is the same instant as an aware UTC datetime; an offset-less
    value is read as UTC.
    """

    pair_id: str
    created: str
    timestamp: datetime

    amount0_in: float = Field(default=0.0, ge=0.0)
    amount0_out: float = Field(default=0.0, ge=0.0)
    amount1_in: float = Field(default=0.0, ge=0.0)
    amount1_out: float = Field(default=0.0, ge=0.0)

    # identity, carried through untouched
    signer: Optional[str] = None
    caller: Optional[str] = None
    tx_hash: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def ts_ms(self) -> int:
        """
        Epoch milliseconds (floored), computed without float rounding.
        """
        return (self.timestamp - _EPOCH) // _ONE_MS

    @property
    def quote_volume(self) -> float:
        """
        Quote-asset (token1) quantity moved by this trade.
        """
        return float(self.amount1_in) + float(self.amount1_out)

    @property
    def is_well_formed(self) -> bool:
        """
        Exactly one of amount0_in / amount0_out is positive.
        """
        return (self.amount0_in > 0) != (self.amount0_out > 0)

    def identity_key(self) -> Tuple:
        """
        Key used to deduplicate trades when folding a new batch into a known set.
        """
        return (
            self.pair_id,
            self.created,
            self.tx_hash,
            self.signer,
            self.caller,
            self.amount0_in,
            self.amount0_out,
            self.amount1_in,
            self.amount1_out,
        )


def unique_trades(
    trades: Iterable[TradeRecordEntity],
    seen: Optional[Set[Tuple]] = None,
) -> List[TradeRecordEntity]:
    """
    First occurrence of each identity_key(), input order kept.

    When `seen` is given, keys already in it are skipped and new keys are added to it.
    """
    seen = set() if seen is None else seen
    out: List[TradeRecordEntity] = []
    for t in trades:
        k = t.identity_key()
        if k in seen:
            continue
        seen.add(k)
        out.append(t)
    return out
