import pytest

from core.domain.enums import ChartInterval
from core.domain.errors import UnsupportedIntervalError
from core.services.interval_bucket_service import IntervalBucketService
from factories import at, make_trade


def _ms(hhmm):
    return make_trade(hhmm, out0=1, in1=1).ts_ms


def test_bucket_key_floors_to_epoch_aligned_boundary():
    ts = _ms("01:10:59")
    assert IntervalBucketService.bucket_key(ts, 60) == _ms("01:00")
    assert IntervalBucketService.bucket_key(ts, 15) == _ms("01:00")
    assert IntervalBucketService.bucket_key(ts, 10) == _ms("01:10")
    assert IntervalBucketService.bucket_key(ts, 240) == _ms("00:00")


def test_bucket_key_is_identity_on_boundaries():
    key = 1_743_379_200_000  # 2025-03-31T00:00:00Z
    for minutes in ChartInterval:
        assert IntervalBucketService.bucket_key(key, int(minutes)) == key


def test_daily_buckets_start_at_utc_midnight():
    ms = make_trade("23:59:59", out0=1, in1=1).ts_ms
    assert IntervalBucketService.bucket_key(ms, 1440) == 1_743_379_200_000


def test_iter_bucket_keys_is_inclusive_and_gap_free():
    first = 1_743_379_200_000
    keys = list(IntervalBucketService.iter_bucket_keys(first, first + 4 * 300_000, 5))
    assert keys == [first + i * 300_000 for i in range(5)]


def test_iter_bucket_keys_empty_when_reversed():
    assert list(IntervalBucketService.iter_bucket_keys(10 * 60_000, 0, 5)) == []


def test_non_positive_interval_rejected():
    with pytest.raises(ValueError):
        IntervalBucketService.bucket_key(0, 0)


def test_ts_ms_keeps_sub_second_precision_without_rounding_up():
    t = make_trade("00:00:00.999999", out0=1, in1=1)
    assert t.ts_ms % 1000 == 999
    assert at("00:00").timestamp() * 1000 + 999 == t.ts_ms


@pytest.mark.parametrize(
    "minutes,label",
    [(5, "5m"), (10, "10m"), (15, "15m"), (30, "30m"), (60, "1h"), (240, "4h"), (1440, "1d")],
)
def test_supported_intervals(minutes, label):
    interval = ChartInterval.from_minutes(minutes)
    assert interval.label == label
    assert interval.millis == minutes * 60_000


@pytest.mark.parametrize("minutes", [0, 1, 45, 120, "abc", None])
def test_unsupported_interval(minutes):
    with pytest.raises(UnsupportedIntervalError):
        ChartInterval.from_minutes(minutes)
