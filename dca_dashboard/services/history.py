"""Transaction history views for the dashboard's transactions table."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from dca_dashboard.models import Transaction
from dca_dashboard.services import decimals


@dataclass(frozen=True)
class TransactionSummary:
    count: int
    total_spent: Decimal
    average_price: Decimal


def list_symbols(transactions: Iterable[Transaction]) -> list[str]:
    return sorted({tx.symbol for tx in transactions})


def filter_transactions(
    transactions: Iterable[Transaction],
    symbol: str | None = None,
) -> list[Transaction]:
    """Return the transactions for ``symbol`` in log order; all of them when ``None``."""

    if symbol is None:
        return list(transactions)
    wanted = symbol.upper()
    return [tx for tx in transactions if tx.symbol == wanted]


def summarize_transactions(transactions: Sequence[Transaction]) -> TransactionSummary:
    """Count, quote spent and plain mean fill price over ``transactions``."""

    total_spent = decimals.total(tx.quote_spent for tx in transactions)
    price_sum = decimals.total(tx.price for tx in transactions)
    return TransactionSummary(
        count=len(transactions),
        total_spent=total_spent,
        average_price=decimals.divide(price_sum, len(transactions)),
    )


__all__ = [
    "TransactionSummary",
    "filter_transactions",
    "list_symbols",
    "summarize_transactions",
]
