from __future__ import annotations


class ChartDataError(Exception):
    """Base error for the chart data core and its collaborators."""


class MalformedTradeError(ChartDataError):
    """
    A raw swap event that cannot become a TradeRecordEntity
    (missing/unparsable timestamp or pair id).
    """


class TradeFetchError(ChartDataError):
    """
    The trade-data collaborator failed (unreachable, HTTP error, GraphQL errors,
    unexpected payload shape).
    """


class UnsupportedIntervalError(ChartDataError, ValueError):
    """Interval width is not one of the supported ChartInterval values."""


class PairNotFoundError(ChartDataError):
    """The requested pair id is not known to the collaborator."""
