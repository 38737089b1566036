from __future__ import annotations

import math
from typing import Optional, Tuple

from core.domain.entities.trade_record_entity import TradeRecordEntity
from core.domain.enums import TradeSide


class PriceCalculationService:
    """
    Derives a trade's price and side, in the displayed pair orientation.

    Pricing convention (not inverted), quote (token1) per base (token0):
      - out0 > 0 and in1 > 0: base bought, price = in1 / out0
      - in0 > 0 and out1 > 0: base sold,   price = out1 / in0
      - anything else: undefined (None)

    Inverted, the price is the reciprocal (base per quote) and BUY/SELL swap so
    they always describe the displayed base asset.
    """

    @staticmethod
    def base_price(trade: TradeRecordEntity) -> Optional[float]:
        in0, out0 = float(trade.amount0_in), float(trade.amount0_out)
        in1, out1 = float(trade.amount1_in), float(trade.amount1_out)

        if out0 > 0 and in1 > 0:
            price = in1 / out0
        elif in0 > 0 and out1 > 0:
            price = out1 / in0
        else:
            return None

        if not math.isfinite(price):
            return None
        return price

    @classmethod
    def price(cls, trade: TradeRecordEntity, inverted: bool) -> Optional[float]:
        price = cls.base_price(trade)
        if price is None or not inverted:
            return price

        # reciprocal of zero (or an underflowed ratio) is undefined, not inf
        if price <= 0:
            return None
        inv = 1.0 / price
        return inv if math.isfinite(inv) else None

    @staticmethod
    def trade_side(trade: TradeRecordEntity, inverted: bool) -> TradeSide:
        if trade.amount0_in > 0:
            return TradeSide.BUY if inverted else TradeSide.SELL
        if trade.amount0_out > 0:
            return TradeSide.SELL if inverted else TradeSide.BUY
        return TradeSide.UNKNOWN

    @classmethod
    def trade_legs(cls, trade: TradeRecordEntity, inverted: bool) -> Tuple[float, float]:
        """
        (amount, value) for a trade-history row.

        amount is the displayed base asset, value the displayed quote asset,
        both taken from the legs that actually moved for this side.
        """
        side = cls.trade_side(trade, inverted)
        if side is TradeSide.BUY:
            amount = trade.amount1_out if inverted else trade.amount0_out
            value = trade.amount0_in if inverted else trade.amount1_in
        else:
            amount = trade.amount1_in if inverted else trade.amount0_in
            value = trade.amount0_out if inverted else trade.amount1_out
        return float(amount), float(value)
