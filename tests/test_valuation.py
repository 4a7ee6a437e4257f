from decimal import Decimal

import pytest

from dca_dashboard.services.prices import PriceBook
from dca_dashboard.services.replay import replay
from dca_dashboard.services.valuation import StalePriceWarning, valuate
from factories import buy, price, sell, utc


def _btc_log():
    return [
        buy("BTCUSDC", "50000", "0.01", "500", utc(2024, 3, 1, 9)),
        buy("BTCUSDC", "60000", "0.01", "600", utc(2024, 3, 2, 9)),
    ]


def test_marks_position_to_latest_price():
    book = PriceBook([price("BTCUSDC", "58000", utc(2024, 3, 2, 10))])
    portfolio = valuate(replay(_btc_log()), book)
    (position,) = portfolio.positions
    assert position.market_value == Decimal("1160.00")
    assert position.unrealized_pl == Decimal("60.00")
    assert position.has_price
    assert portfolio.total_market_value == Decimal("1160")
    assert portfolio.total_unrealized_pl == Decimal("60")
    assert portfolio.total_invested == Decimal("1100")
    assert portfolio.stale_symbols == ()
    assert portfolio.last_updated == utc(2024, 3, 2, 9)


def test_symbol_without_price_is_unavailable_not_a_total_loss():
    transactions = _btc_log() + [buy("ETHUSDC", "3000", "0.1", "300", utc(2024, 3, 2, 10))]
    book = PriceBook([price("BTCUSDC", "58000", utc(2024, 3, 2, 10))])
    with pytest.warns(StalePriceWarning, match="ETHUSDC"):
        portfolio = valuate(replay(transactions), book)

    eth = next(p for p in portfolio.positions if p.symbol == "ETHUSDC")
    assert eth.price == Decimal("0")
    assert eth.market_value == Decimal("0")
    assert eth.unrealized_pl == Decimal("0")
    assert not eth.has_price
    assert portfolio.stale_symbols == ("ETHUSDC",)
    # Totals only carry the priced line items
    assert portfolio.total_market_value == Decimal("1160")
    assert portfolio.total_unrealized_pl == Decimal("60")
    assert portfolio.total_invested == Decimal("1400")


def test_totals_equal_sum_of_rounded_line_items():
    transactions = [
        buy("BTCUSDC", "50000", "0.000000333", "0.01665", utc(2024, 1, 1)),
        buy("ETHUSDC", "3000", "0.000000333", "0.000999", utc(2024, 1, 1)),
        buy("SOLUSDC", "100", "0.000000333", "0.0000333", utc(2024, 1, 1)),
    ]
    book = PriceBook(
        [
            price("BTCUSDC", "50000.5", utc(2024, 1, 2)),
            price("ETHUSDC", "3000.5", utc(2024, 1, 2)),
            price("SOLUSDC", "100.5", utc(2024, 1, 2)),
        ]
    )
    portfolio = valuate(replay(transactions), book)
    assert portfolio.total_market_value == sum(p.market_value for p in portfolio.positions)
    assert portfolio.total_unrealized_pl == sum(p.unrealized_pl for p in portfolio.positions)


def test_as_of_values_at_historic_prices():
    book = PriceBook(
        [
            price("BTCUSDC", "55000", utc(2024, 3, 2, 10)),
            price("BTCUSDC", "70000", utc(2024, 4, 1)),
        ]
    )
    portfolio = valuate(replay(_btc_log()), book, as_of=utc(2024, 3, 15))
    assert portfolio.total_market_value == Decimal("1100")
    assert portfolio.total_unrealized_pl == Decimal("0")


def test_accepts_any_price_callable():
    portfolio = valuate(replay(_btc_log()), lambda symbol, cutoff: Decimal("40000"))
    assert portfolio.total_unrealized_pl == Decimal("-300")


def test_empty_portfolio_uses_valuation_time_for_last_updated():
    replayed = replay([sell("BTCUSDC", "1", "1", "1", utc(2024, 1, 1))])
    portfolio = valuate(replayed, PriceBook(), as_of=utc(2024, 6, 1))
    assert portfolio.positions == ()
    assert portfolio.last_updated == utc(2024, 6, 1)
    assert portfolio.total_market_value == Decimal("0")
