import pytest

from core.domain.enums import TradeSide
from core.services.price_calculation_service import PriceCalculationService
from factories import make_trade


def test_buy_price_is_quote_in_per_base_out():
    t = make_trade("00:05", out0=10, in1=100)
    assert PriceCalculationService.price(t, inverted=False) == pytest.approx(10.0)
    assert PriceCalculationService.trade_side(t, inverted=False) is TradeSide.BUY


def test_sell_price_is_quote_out_per_base_in():
    t = make_trade("00:40", in0=5, out1=60)
    assert PriceCalculationService.price(t, inverted=False) == pytest.approx(12.0)
    assert PriceCalculationService.trade_side(t, inverted=False) is TradeSide.SELL


def test_inversion_reciprocates_price_and_swaps_side():
    buy = make_trade("00:05", out0=10, in1=100)
    sell = make_trade("00:40", in0=5, out1=60)

    assert PriceCalculationService.price(buy, inverted=True) == pytest.approx(0.1)
    assert PriceCalculationService.price(sell, inverted=True) == pytest.approx(1 / 12)
    assert PriceCalculationService.trade_side(buy, inverted=True) is TradeSide.SELL
    assert PriceCalculationService.trade_side(sell, inverted=True) is TradeSide.BUY


@pytest.mark.parametrize(
    "amounts",
    [
        {},
        {"out0": 10},
        {"in1": 100},
        {"out0": 10, "out1": 5},
        {"in0": 3, "in1": 7},
    ],
)
def test_unpaired_legs_have_no_price(amounts):
    t = make_trade("00:05", **amounts)
    assert PriceCalculationService.price(t, inverted=False) is None
    assert PriceCalculationService.price(t, inverted=True) is None


def test_side_unknown_without_base_leg():
    t = make_trade("00:05", in1=5, out1=5)
    assert PriceCalculationService.trade_side(t, inverted=False) is TradeSide.UNKNOWN
    assert PriceCalculationService.trade_side(t, inverted=True) is TradeSide.UNKNOWN


def test_underflowed_price_is_not_inverted_to_infinity():
    t = make_trade("00:05", out0=1e308, in1=1e-308)
    assert PriceCalculationService.price(t, inverted=False) == 0.0
    assert PriceCalculationService.price(t, inverted=True) is None


def test_trade_legs_follow_displayed_orientation():
    buy = make_trade("00:05", out0=10, in1=100)
    assert PriceCalculationService.trade_legs(buy, inverted=False) == (10.0, 100.0)
    # inverted, the same trade is a SELL of the quote token
    assert PriceCalculationService.trade_legs(buy, inverted=True) == (100.0, 10.0)

    sell = make_trade("00:40", in0=5, out1=60)
    assert PriceCalculationService.trade_legs(sell, inverted=False) == (5.0, 60.0)
    assert PriceCalculationService.trade_legs(sell, inverted=True) == (60.0, 5.0)
