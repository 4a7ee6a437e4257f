"""Fetch-then-compute pipeline behind the dashboard views.

Transactions and prices are fetched concurrently and merged before any
computation starts. A missing price feed degrades to "no market data"; a
missing transaction log is fatal and propagates to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from dca_dashboard.models import ChartPoint, Portfolio, PricePoint, Transaction
from dca_dashboard.providers.data_reader import DataReader, FetchError, ParseError
from dca_dashboard.services.prices import PriceBook
from dca_dashboard.services.replay import replay
from dca_dashboard.services.timeseries import build_series
from dca_dashboard.services.valuation import valuate

logger = logging.getLogger(__name__)


async def fetch_prices_or_empty(reader: DataReader) -> list[PricePoint]:
    try:
        return await reader.fetch_prices()
    except (FetchError, ParseError) as exc:
        logger.warning("Price feed unavailable, market values will be missing: %s", exc)
        return []


async def fetch_inputs(reader: DataReader) -> tuple[list[Transaction], list[PricePoint]]:
    transactions, prices = await asyncio.gather(
        reader.fetch_transactions(),
        fetch_prices_or_empty(reader),
    )
    return transactions, prices


async def load_portfolio(reader: DataReader, *, as_of: datetime | None = None) -> Portfolio:
    """Replay the transaction log and value it against the price feed.

    Raises:
        FetchError: if the transaction log cannot be fetched.
        EmptyLogError: if the log holds no transactions.
    """

    transactions, prices = await fetch_inputs(reader)
    replayed = replay(transactions)
    return valuate(replayed, PriceBook(prices), as_of=as_of)


async def load_series(reader: DataReader) -> list[ChartPoint]:
    transactions, prices = await fetch_inputs(reader)
    return build_series(transactions, prices)


class PortfolioRefresher:
    """Recompute the portfolio on demand, keeping only the newest result.

    Callers own the schedule (timer, button, push). Every ``refresh`` takes a
    ticket; a result is published only if no later ticket published first, so
    a slow refresh never overwrites a faster, newer one.
    """

    def __init__(self, reader: DataReader):
        self._reader = reader
        self._issued = 0
        self._published = 0
        self.latest: Portfolio | None = None

    async def refresh(self) -> Portfolio | None:
        """Run one refresh and return the newest published portfolio."""

        self._issued += 1
        ticket = self._issued
        portfolio = await load_portfolio(self._reader)
        if ticket > self._published:
            self._published = ticket
            self.latest = portfolio
        else:
            logger.debug("Discarding superseded portfolio refresh #%s", ticket)
        return self.latest


__all__ = [
    "PortfolioRefresher",
    "fetch_inputs",
    "fetch_prices_or_empty",
    "load_portfolio",
    "load_series",
]
