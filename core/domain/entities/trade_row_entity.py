from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.domain.entities.base_entity import DomainEntity
from core.domain.enums import TradeSide


class TradeRowEntity(DomainEntity):
    """
    One trade as displayed in the history feed, in the displayed orientation.

    price is None for trades whose price cannot be derived; they are still listed.
    """

    timestamp: datetime
    created: str
    side: TradeSide
    price: Optional[float] = None
    amount: float
    value: float
    signer: Optional[str] = None
    tx_hash: Optional[str] = None
