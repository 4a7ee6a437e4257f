"""Point-in-time price lookups over the bot's price log."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from dca_dashboard.models import PricePoint, as_utc

PriceLookup = Callable[[str, Optional[datetime]], Optional[Decimal]]


class PriceBook:
    """Per-symbol price history indexed for as-of lookups.

    Points sharing a timestamp keep their input order; a lookup landing on
    such a group resolves to the first of them.
    """

    def __init__(self, points: Iterable[PricePoint] = ()):
        grouped: dict[str, list[PricePoint]] = {}
        for point in points:
            grouped.setdefault(point.symbol, []).append(point)
        self._series: dict[str, list[PricePoint]] = {}
        self._times: dict[str, list[datetime]] = {}
        for symbol, symbol_points in grouped.items():
            ordered = sorted(symbol_points, key=lambda p: p.timestamp)
            self._series[symbol] = ordered
            self._times[symbol] = [p.timestamp for p in ordered]

    def __len__(self) -> int:
        return sum(len(points) for points in self._series.values())

    def __call__(self, symbol: str, cutoff: datetime | None = None) -> Decimal | None:
        return self.latest_price_as_of(symbol, cutoff)

    def symbols(self) -> list[str]:
        return sorted(self._series)

    def point_as_of(self, symbol: str, cutoff: datetime | None = None) -> PricePoint | None:
        """Return the most recent point for ``symbol`` at or before ``cutoff``.

        ``cutoff=None`` returns the newest known point however stale it is.
        """

        times = self._times.get(symbol)
        if not times:
            return None
        index = len(times) if cutoff is None else bisect_right(times, as_utc(cutoff))
        if index == 0:
            return None
        first_of_group = bisect_left(times, times[index - 1])
        return self._series[symbol][first_of_group]

    def latest_price_as_of(self, symbol: str, cutoff: datetime | None = None) -> Decimal | None:
        point = self.point_as_of(symbol, cutoff)
        return point.price if point is not None else None

    def latest_prices(self, cutoff: datetime | None = None) -> dict[str, Decimal]:
        prices: dict[str, Decimal] = {}
        for symbol in self.symbols():
            price = self.latest_price_as_of(symbol, cutoff)
            if price is not None:
                prices[symbol] = price
        return prices


def latest_price_as_of(
    symbol: str,
    cutoff: datetime | None,
    price_series: Iterable[PricePoint],
) -> Decimal | None:
    """One-off lookup; build a ``PriceBook`` when querying repeatedly."""

    return PriceBook(p for p in price_series if p.symbol == symbol).latest_price_as_of(symbol, cutoff)


__all__ = ["PriceBook", "PriceLookup", "latest_price_as_of"]
