from __future__ import annotations

from typing import Iterator


class IntervalBucketService:
    """
    Maps instants to fixed-width buckets aligned on the UTC epoch.

    Alignment is arithmetic on epoch milliseconds, never on calendar/local time,
    so boundaries are the same for every viewer.
    """

    @staticmethod
    def interval_ms(interval_minutes: int) -> int:
        ms = int(interval_minutes) * 60_000
        if ms <= 0:
            raise ValueError(f"interval must be positive, got {interval_minutes!r} minutes")
        return ms

    @classmethod
    def bucket_key(cls, ts_ms: int, interval_minutes: int) -> int:
        width = cls.interval_ms(interval_minutes)
        return (int(ts_ms) // width) * width

    @classmethod
    def iter_bucket_keys(cls, first_key: int, last_key: int, interval_minutes: int) -> Iterator[int]:
        """
        Every bucket key from first_key to last_key inclusive.
        """
        width = cls.interval_ms(interval_minutes)
        key = int(first_key)
        while key <= last_key:
            yield key
            key += width
