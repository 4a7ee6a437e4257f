"""Daily portfolio value series for the performance chart.

The series replays BUY fills day by day with the same accumulator and
valuation rules as the current-portfolio view, so the last point agrees with
``valuate(replay(...))`` over the same logs.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from itertools import groupby
from typing import Iterable, Sequence

from dca_dashboard.models import ChartPoint, PricePoint, Transaction
from dca_dashboard.services.prices import PriceBook, PriceLookup
from dca_dashboard.services.replay import PositionAccumulator
from dca_dashboard.services.valuation import sum_valuations, value_positions

_END_OF_DAY = time(23, 59, 59, tzinfo=timezone.utc)
_DISPLAY_TIME = time(12, 0, tzinfo=timezone.utc)


class TimeRange(str, Enum):
    LAST_24H = "24h"
    LAST_7D = "7d"
    LAST_30D = "30d"
    ALL = "all"


_RANGE_WINDOWS = {
    TimeRange.LAST_24H: timedelta(hours=24),
    TimeRange.LAST_7D: timedelta(days=7),
    TimeRange.LAST_30D: timedelta(days=30),
}


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, _END_OF_DAY)


def _utc_day(tx: Transaction) -> date:
    return tx.timestamp.astimezone(timezone.utc).date()


def build_series(
    transactions: Iterable[Transaction],
    price_series: Iterable[PricePoint] | PriceBook,
) -> list[ChartPoint]:
    """Return one ``ChartPoint`` per UTC day that has at least one BUY.

    Each point values the running positions at the last known price as of
    23:59:59 UTC that day. An empty log yields an empty series.
    """

    buys = sorted((tx for tx in transactions if tx.is_buy), key=lambda tx: tx.timestamp)
    if not buys:
        return []
    price_lookup: PriceLookup = (
        price_series if isinstance(price_series, PriceBook) else PriceBook(price_series)
    )

    accumulator = PositionAccumulator()
    points: list[ChartPoint] = []
    for day, day_buys in groupby(buys, key=_utc_day):
        accumulator.extend(day_buys)
        valued = value_positions(accumulator.positions(), price_lookup, end_of_day(day))
        totals = sum_valuations(valued)
        points.append(
            ChartPoint(
                date=day,
                invested=accumulator.total_invested,
                market_value=totals.market_value,
                unrealized_pl=totals.unrealized_pl,
                timestamp=datetime.combine(day, _DISPLAY_TIME),
            )
        )
    return points


def filter_series(
    points: Sequence[ChartPoint],
    time_range: TimeRange | str = TimeRange.ALL,
    *,
    now: datetime | None = None,
) -> list[ChartPoint]:
    """Keep the points whose display timestamp falls inside ``time_range``."""

    time_range = TimeRange(time_range)
    window = _RANGE_WINDOWS.get(time_range)
    if window is None:
        return list(points)
    cutoff = (now or datetime.now(timezone.utc)) - window
    return [point for point in points if point.timestamp >= cutoff]


__all__ = [
    "TimeRange",
    "build_series",
    "end_of_day",
    "filter_series",
]
