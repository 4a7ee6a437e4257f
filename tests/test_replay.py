from datetime import datetime, timedelta, timezone
import random
from decimal import Decimal

import pytest

from dca_dashboard.models import Position
from dca_dashboard.services.replay import EmptyLogError, infer_quote_currency, replay
from factories import buy, sell, utc


def _scenario_a():
    return [
        buy("BTCUSDC", "50000", "0.01", "500", utc(2024, 3, 1, 9)),
        buy("BTCUSDC", "60000", "0.01", "600", utc(2024, 3, 2, 9)),
    ]


def test_two_buys_accumulate_into_one_position():
    result = replay(_scenario_a())
    assert result.positions == (
        Position(
            symbol="BTCUSDC",
            open_quantity=Decimal("0.02"),
            total_cost=Decimal("1100"),
            avg_cost=Decimal("55000"),
        ),
    )
    assert result.total_invested == Decimal("1100")
    assert result.base_currency == "USDC"
    assert result.last_transaction_time == utc(2024, 3, 2, 9)


def test_empty_log_is_an_error():
    with pytest.raises(EmptyLogError):
        replay([])


def test_replay_is_idempotent():
    transactions = _scenario_a() + [buy("ETHUSDC", "3000", "0.1", "300", utc(2024, 3, 3))]
    assert replay(transactions) == replay(transactions)


def test_totals_do_not_depend_on_input_order():
    transactions = [
        buy("BTCUSDC", "50000", "0.01", "500", utc(2024, 3, 1)),
        buy("ETHUSDC", "3000", "0.1", "300.5", utc(2024, 3, 4)),
        buy("BTCUSDC", "60000", "0.01", "600", utc(2024, 3, 2)),
        buy("ETHUSDC", "3100", "0.2", "620.25", utc(2024, 3, 3)),
    ]
    expected = replay(transactions)
    shuffled = list(transactions)
    random.Random(7).shuffle(shuffled)
    result = replay(reversed(shuffled))

    by_symbol = {p.symbol: p for p in result.positions}
    for position in expected.positions:
        assert by_symbol[position.symbol] == position
    assert result.total_invested == expected.total_invested
    assert result.last_transaction_time == utc(2024, 3, 4)


def test_positions_keep_first_seen_symbol_order():
    transactions = [
        buy("ETHUSDC", "3000", "0.1", "300", utc(2024, 3, 1)),
        buy("BTCUSDC", "50000", "0.01", "500", utc(2024, 3, 2)),
        buy("ETHUSDC", "3000", "0.1", "300", utc(2024, 3, 3)),
    ]
    assert [p.symbol for p in replay(transactions).positions] == ["ETHUSDC", "BTCUSDC"]


def test_sells_do_not_reduce_holdings():
    transactions = _scenario_a() + [sell("BTCUSDC", "70000", "0.01", "700", utc(2024, 3, 5))]
    result = replay(transactions)
    (position,) = result.positions
    assert position.open_quantity == Decimal("0.02")
    assert position.total_cost == Decimal("1100")
    assert result.total_invested == Decimal("1100")
    assert result.last_transaction_time == utc(2024, 3, 2, 9)


def test_sell_only_log_yields_empty_portfolio():
    result = replay([sell("BTCUSDC", "70000", "0.01", "700", utc(2024, 3, 5))])
    assert result.positions == ()
    assert result.total_invested == Decimal("0")
    assert result.last_transaction_time is None
    assert result.base_currency == "USDC"


def test_zero_quantity_buy_has_zero_average_cost():
    result = replay([buy("DOGEUSDT", "0.1", "0", "0", utc(2024, 1, 1))])
    (position,) = result.positions
    assert position.avg_cost == Decimal("0")


def test_quote_spent_is_authoritative_over_price_times_quantity():
    # 0.01 * 50000 = 500, but the exchange charged a fee on top
    result = replay([buy("BTCUSDC", "50000", "0.01", "500.5", utc(2024, 1, 1))])
    assert result.positions[0].total_cost == Decimal("500.5")
    assert result.positions[0].avg_cost == Decimal("50050")


def test_base_currency_follows_last_processed_suffix():
    transactions = [
        buy("BTCUSDC", "50000", "0.01", "500", utc(2024, 1, 1)),
        buy("ETHUSDT", "3000", "0.1", "300", utc(2024, 1, 2)),
    ]
    assert replay(transactions).base_currency == "USDT"
    assert replay(list(reversed(transactions))).base_currency == "USDC"


def test_unknown_suffix_keeps_default_currency():
    result = replay([buy("BTCEUR", "45000", "0.01", "450", utc(2024, 1, 1))])
    assert result.base_currency == "USDC"
    assert infer_quote_currency("BTCEUR") is None
    assert infer_quote_currency("SOLUSDT") == "USDT"


def test_naive_timestamps_are_read_as_utc():
    naive = buy("BTCUSDC", "50000", "0.01", "500", datetime(2024, 3, 2, 9))
    aware = buy("BTCUSDC", "60000", "0.01", "600", utc(2024, 3, 1, 9))

    assert naive.timestamp == utc(2024, 3, 2, 9)
    replayed = replay([naive, aware])
    assert replayed.last_transaction_time == utc(2024, 3, 2, 9)
    assert replayed.total_invested == Decimal("1100")


def test_offset_timestamps_are_converted_to_utc():
    tx = buy("BTCUSDC", "50000", "0.01", "500", datetime(2024, 3, 2, 1, tzinfo=timezone(timedelta(hours=4))))
    assert tx.timestamp == utc(2024, 3, 1, 21)
    assert tx.timestamp.tzinfo is timezone.utc
