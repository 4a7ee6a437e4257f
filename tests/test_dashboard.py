"""Fetch-then-compute pipeline tests."""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from dca_dashboard.providers.data_reader import FetchError, ParseError
from dca_dashboard.services.dashboard import PortfolioRefresher, load_portfolio, load_series
from dca_dashboard.services.replay import EmptyLogError
from factories import buy, price, utc


class FakeReader:
    def __init__(self, transactions=None, prices=None, *, transactions_error=None, prices_error=None):
        self.transactions = transactions or []
        self.prices = prices or []
        self.transactions_error = transactions_error
        self.prices_error = prices_error

    async def fetch_transactions(self):
        if self.transactions_error is not None:
            raise self.transactions_error
        return list(self.transactions)

    async def fetch_prices(self):
        if self.prices_error is not None:
            raise self.prices_error
        return list(self.prices)


def _log():
    return [
        buy("BTCUSDC", "50000", "0.01", "500", utc(2024, 3, 1, 9)),
        buy("BTCUSDC", "60000", "0.01", "600", utc(2024, 3, 2, 9)),
    ]


def _prices():
    return [price("BTCUSDC", "58000", utc(2024, 3, 2, 10))]


@pytest.mark.asyncio
async def test_load_portfolio_values_log_at_latest_price():
    portfolio = await load_portfolio(FakeReader(_log(), _prices()))

    assert portfolio.total_invested == Decimal("1100")
    assert portfolio.total_market_value == Decimal("1160")
    assert portfolio.total_unrealized_pl == Decimal("60")
    assert portfolio.last_updated == utc(2024, 3, 2, 9)


@pytest.mark.asyncio
async def test_price_feed_failure_degrades_to_missing_market_data(caplog):
    reader = FakeReader(_log(), prices_error=FetchError("prices.ndjson", status=503))

    with pytest.warns(UserWarning):
        portfolio = await load_portfolio(reader)

    assert portfolio.total_invested == Decimal("1100")
    assert portfolio.total_market_value == Decimal("0")
    assert portfolio.stale_symbols == ("BTCUSDC",)
    assert "Price feed unavailable" in caplog.text


@pytest.mark.asyncio
async def test_unparseable_price_feed_also_degrades():
    reader = FakeReader(_log(), prices_error=ParseError("prices.ndjson", 1, "bad"))

    series = await load_series(reader)

    assert [p.market_value for p in series] == [Decimal("0"), Decimal("0")]


@pytest.mark.asyncio
async def test_transaction_fetch_failure_propagates():
    reader = FakeReader(transactions_error=FetchError("transactions.ndjson", status=404), prices=_prices())

    with pytest.raises(FetchError):
        await load_portfolio(reader)
    with pytest.raises(FetchError):
        await load_series(reader)


@pytest.mark.asyncio
async def test_empty_log_is_reported():
    with pytest.raises(EmptyLogError):
        await load_portfolio(FakeReader([], _prices()))
    assert await load_series(FakeReader([], _prices())) == []


class GatedReader(FakeReader):
    """Blocks each transactions fetch until its gate is opened."""

    def __init__(self, logs):
        super().__init__(prices=_prices())
        self._logs = list(logs)
        self.gates: list[asyncio.Event] = []

    async def fetch_transactions(self):
        log = self._logs.pop(0)
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return log


async def _wait_for_gates(reader: GatedReader, count: int) -> None:
    while len(reader.gates) < count:
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_refresher_discards_superseded_results():
    older_log = _log()[:1]
    newer_log = _log()
    reader = GatedReader([older_log, newer_log])
    refresher = PortfolioRefresher(reader)

    older = asyncio.create_task(refresher.refresh())
    await _wait_for_gates(reader, 1)
    newer = asyncio.create_task(refresher.refresh())
    await _wait_for_gates(reader, 2)

    reader.gates[1].set()
    newest = await newer
    assert newest.total_invested == Decimal("1100")

    reader.gates[0].set()
    result = await older
    assert result is newest
    assert refresher.latest.total_invested == Decimal("1100")


@pytest.mark.asyncio
async def test_refresher_publishes_sequential_results():
    reader = FakeReader(_log()[:1], _prices())
    refresher = PortfolioRefresher(reader)

    first = await refresher.refresh()
    reader.transactions = _log()
    second = await refresher.refresh()

    assert first.total_invested == Decimal("500")
    assert second.total_invested == Decimal("1100")
    assert refresher.latest is second


@pytest.mark.asyncio
async def test_sample_bot_output_end_to_end(sample_data_dir):
    from dca_dashboard.providers.data_reader import DataReader

    reader = DataReader(str(sample_data_dir))

    portfolio = await load_portfolio(reader)
    series = await load_series(reader)

    assert portfolio.base_currency == "USDC"
    assert portfolio.total_invested == Decimal("249.92937055")
    assert portfolio.total_market_value == Decimal("256.43567085")
    btc = portfolio.positions[0]
    assert btc.symbol == "BTCUSDC"
    assert btc.open_quantity == Decimal("0.002313")
    assert len(series) == 3
    assert series[-1].invested == portfolio.total_invested
    assert series[-1].market_value == portfolio.total_market_value

    snapshot = await reader.fetch_positions_snapshot()
    assert snapshot.total_quote_invested == portfolio.total_invested
