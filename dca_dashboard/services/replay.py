"""Rebuild positions by replaying the bot's transaction log.

Only BUY fills accumulate. SELL fills are read but never reduce quantity or
cost basis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from dca_dashboard.models import Position, ReplayedPortfolio, Transaction
from dca_dashboard.services import decimals
from dca_dashboard.services.decimals import ZERO

DEFAULT_BASE_CURRENCY = "USDC"
QUOTE_CURRENCIES = ("USDC", "USDT")


class EmptyLogError(ValueError):
    """Raised when a portfolio is requested from an empty transaction log."""

    def __init__(self, message: str = "No transaction history"):
        super().__init__(message)


def infer_quote_currency(symbol: str) -> str | None:
    """Return the settlement currency encoded as the symbol's suffix."""

    for quote in QUOTE_CURRENCIES:
        if symbol.endswith(quote):
            return quote
    return None


@dataclass
class _RunningTotals:
    quantity: Decimal = ZERO
    cost: Decimal = ZERO


@dataclass
class PositionAccumulator:
    """Running per-symbol totals fed one transaction at a time.

    Dict insertion order keeps symbols in first-seen order.
    """

    base_currency: str = DEFAULT_BASE_CURRENCY
    total_invested: Decimal = ZERO
    last_transaction_time: datetime | None = None
    _symbols: dict[str, _RunningTotals] = field(default_factory=dict)

    def apply(self, tx: Transaction) -> bool:
        """Fold ``tx`` into the totals; return whether it contributed."""

        if not tx.is_buy:
            return False
        running = self._symbols.setdefault(tx.symbol, _RunningTotals())
        running.quantity = decimals.add(running.quantity, tx.quantity)
        running.cost = decimals.add(running.cost, tx.quote_spent)
        self.total_invested = decimals.add(self.total_invested, tx.quote_spent)
        if self.last_transaction_time is None or tx.timestamp > self.last_transaction_time:
            self.last_transaction_time = tx.timestamp
        quote = infer_quote_currency(tx.symbol)
        if quote is not None:
            self.base_currency = quote
        return True

    def extend(self, transactions: Iterable[Transaction]) -> None:
        for tx in transactions:
            self.apply(tx)

    def positions(self) -> tuple[Position, ...]:
        return tuple(
            Position(
                symbol=symbol,
                open_quantity=running.quantity,
                total_cost=running.cost,
                avg_cost=decimals.divide(running.cost, running.quantity),
            )
            for symbol, running in self._symbols.items()
        )

    def snapshot(self) -> ReplayedPortfolio:
        return ReplayedPortfolio(
            base_currency=self.base_currency,
            total_invested=self.total_invested,
            positions=self.positions(),
            last_transaction_time=self.last_transaction_time,
        )


def replay(transactions: Iterable[Transaction]) -> ReplayedPortfolio:
    """Fold ``transactions`` into positions and grand totals.

    Raises:
        EmptyLogError: if ``transactions`` is empty.
    """

    log = list(transactions)
    if not log:
        raise EmptyLogError()
    accumulator = PositionAccumulator()
    accumulator.extend(log)
    return accumulator.snapshot()


__all__ = [
    "DEFAULT_BASE_CURRENCY",
    "EmptyLogError",
    "PositionAccumulator",
    "infer_quote_currency",
    "replay",
]
