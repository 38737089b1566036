from __future__ import annotations

from typing import Iterable, List, Optional

from core.domain.entities.trade_record_entity import TradeRecordEntity
from core.domain.entities.trade_row_entity import TradeRowEntity
from core.services.price_calculation_service import PriceCalculationService


class TradeHistoryService:
    """
    Builds the live trade feed: newest first, priced in the displayed orientation.
    """

    @staticmethod
    def rows(
        trades: Iterable[TradeRecordEntity],
        *,
        inverted: bool,
        limit: Optional[int] = None,
    ) -> List[TradeRowEntity]:
        ordered = sorted(trades, key=lambda t: t.timestamp, reverse=True)
        if limit is not None:
            ordered = ordered[: int(limit)]

        out: List[TradeRowEntity] = []
        for t in ordered:
            amount, value = PriceCalculationService.trade_legs(t, inverted)
            out.append(
                TradeRowEntity(
                    timestamp=t.timestamp,
                    created=t.created,
                    side=PriceCalculationService.trade_side(t, inverted),
                    price=PriceCalculationService.price(t, inverted),
                    amount=amount,
                    value=value,
                    signer=t.signer,
                    tx_hash=t.tx_hash,
                )
            )
        return out
