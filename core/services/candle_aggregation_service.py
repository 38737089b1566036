from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from core.domain.entities.candle_entity import CandleEntity
from core.domain.entities.candle_series_entity import CandleSeriesEntity
from core.domain.entities.trade_record_entity import TradeRecordEntity
from core.domain.entities.volume_bar_entity import VolumeBarEntity
from core.domain.enums import ChartInterval
from core.services.interval_bucket_service import IntervalBucketService
from core.services.price_calculation_service import PriceCalculationService

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class CandleAggregationService:
    """
    Builds a gap-free OHLCV series from irregular swap events.

    Rules:
      - Trades without a derivable price (in the requested orientation) are dropped
        and counted in `dropped_trades`.
      - The timeline runs from the first priced trade's bucket to the bucket of
        `now`, one candle per bucket, no gaps.
      - open = previous candle's close (first candle: first trade's price);
        high/low include the open; close = last trade's price.
      - Empty buckets are forward-filled flat at the previous close, zero volume.
      - Volume is the quote leg (amount1In + amount1Out), whatever the orientation.

    Inversion reruns the whole walk on reciprocal prices; it is never derived
    from the non-inverted candles.

    The service is stateless: same arguments, same output.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def aggregate(
        self,
        trades: Iterable[TradeRecordEntity],
        interval_minutes: int,
        inverted: bool,
        now: datetime,
    ) -> CandleSeriesEntity:
        interval = ChartInterval.from_minutes(interval_minutes)
        minutes = int(interval)

        priced, dropped = self._price_points(trades, inverted)
        if dropped:
            self._logger.warning(
                "Dropped %s trade(s) without a derivable price (interval=%s inverted=%s)",
                dropped,
                interval.label,
                inverted,
            )

        if not priced:
            return CandleSeriesEntity(
                interval_minutes=minutes,
                inverted=bool(inverted),
                dropped_trades=dropped,
            )

        buckets: Dict[int, List[Tuple[float, float]]] = defaultdict(list)
        for ts_ms, price, volume in priced:
            buckets[IntervalBucketService.bucket_key(ts_ms, minutes)].append((price, volume))

        first_key = IntervalBucketService.bucket_key(priced[0][0], minutes)
        now_key = IntervalBucketService.bucket_key(_to_ms(now), minutes)
        # a trade stamped after `now` (clock skew) still gets its candle
        last_key = max(now_key, IntervalBucketService.bucket_key(priced[-1][0], minutes))

        candles: List[CandleEntity] = []
        volumes: List[VolumeBarEntity] = []
        previous_close: Optional[float] = None

        for key in IntervalBucketService.iter_bucket_keys(first_key, last_key, minutes):
            points = buckets.get(key)

            if points:
                prices = [p for p, _ in points]
                open_ = previous_close if previous_close is not None else prices[0]
                candle = CandleEntity(
                    bucket_start=key,
                    interval_minutes=minutes,
                    open=open_,
                    high=max(open_, *prices),
                    low=min(open_, *prices),
                    close=prices[-1],
                    trade_count=len(points),
                )
                volume = sum(v for _, v in points)
            elif previous_close is not None:
                candle = CandleEntity(
                    bucket_start=key,
                    interval_minutes=minutes,
                    open=previous_close,
                    high=previous_close,
                    low=previous_close,
                    close=previous_close,
                    trade_count=0,
                )
                volume = 0.0
            else:
                continue

            previous_close = candle.close
            candles.append(candle)
            volumes.append(VolumeBarEntity.for_candle(candle, volume))

        self._logger.debug(
            "Aggregated %s trade(s) into %s candle(s) interval=%s inverted=%s",
            len(priced),
            len(candles),
            interval.label,
            inverted,
        )

        return CandleSeriesEntity(
            interval_minutes=minutes,
            inverted=bool(inverted),
            candles=tuple(candles),
            volumes=tuple(volumes),
            trade_count=len(priced),
            dropped_trades=dropped,
        )

    @staticmethod
    def _price_points(
        trades: Iterable[TradeRecordEntity],
        inverted: bool,
    ) -> Tuple[List[Tuple[int, float, float]], int]:
        """
        (ts_ms, price, quote_volume) for every priced trade, chronological
        (stable for equal timestamps), plus the number of trades dropped.
        """
        points: List[Tuple[int, float, float]] = []
        dropped = 0
        for trade in sorted(trades, key=lambda t: t.timestamp):
            price = PriceCalculationService.price(trade, inverted)
            if price is None:
                dropped += 1
                continue
            points.append((trade.ts_ms, price, trade.quote_volume))
        return points, dropped


def _to_ms(ts: datetime) -> int:
    """
    Epoch milliseconds (floored) of a datetime; naive values are UTC.
    """
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (ts - _EPOCH) // timedelta(milliseconds=1)
