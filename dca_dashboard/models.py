"""Domain models for the DCA dashboard portfolio engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional


def as_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC; naive datetimes are taken to already be UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Transaction:
    """A single fill logged by the DCA bot."""

    timestamp: datetime
    symbol: str
    side: TradeSide
    price: Decimal
    quantity: Decimal
    quote_spent: Decimal
    exchange: Optional[str] = None
    order_type: Optional[str] = None
    iteration_id: Optional[str] = None
    filters_validated: Optional[bool] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", as_utc(self.timestamp))

    @property
    def is_buy(self) -> bool:
        return self.side == TradeSide.BUY


@dataclass(frozen=True)
class PricePoint:
    """An observed market price for a trading pair."""

    timestamp: datetime
    symbol: str
    price: Decimal
    source: Optional[str] = None
    iteration_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", as_utc(self.timestamp))


@dataclass(frozen=True)
class Position:
    """Aggregated holding of one symbol derived from its BUY history."""

    symbol: str
    open_quantity: Decimal
    total_cost: Decimal
    avg_cost: Decimal


@dataclass(frozen=True)
class ReplayedPortfolio:
    """Positions and totals reconstructed from the transaction log alone."""

    base_currency: str
    total_invested: Decimal
    positions: tuple[Position, ...]
    last_transaction_time: Optional[datetime] = None


@dataclass(frozen=True)
class ValuedPosition:
    """A position priced against the market.

    ``has_price`` is false when no price was known for the symbol; the market
    fields then read zero instead of a loss of the whole cost basis.
    """

    symbol: str
    open_quantity: Decimal
    total_cost: Decimal
    avg_cost: Decimal
    price: Decimal
    market_value: Decimal
    unrealized_pl: Decimal
    has_price: bool = True


@dataclass(frozen=True)
class Portfolio:
    """Point-in-time portfolio view built fresh on every refresh."""

    base_currency: str
    total_invested: Decimal
    total_market_value: Decimal
    total_unrealized_pl: Decimal
    positions: tuple[ValuedPosition, ...]
    last_updated: datetime
    stale_symbols: tuple[str, ...] = ()


@dataclass(frozen=True)
class ChartPoint:
    """Cumulative portfolio figures at the close of one UTC calendar day."""

    date: date
    invested: Decimal
    market_value: Decimal
    unrealized_pl: Decimal
    timestamp: datetime


@dataclass(frozen=True)
class Iteration:
    """One run of the DCA bot."""

    iteration_id: str
    started_at: datetime
    status: str
    ended_at: Optional[datetime] = None
    assets_total: Optional[int] = None
    buys_executed: Optional[int] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class SnapshotPosition:
    symbol: str
    total_cost: Decimal
    open_quantity: Optional[Decimal] = None
    avg_cost: Optional[Decimal] = None
    price: Optional[Decimal] = None
    market_value: Optional[Decimal] = None
    unrealized_pl: Optional[Decimal] = None


@dataclass(frozen=True)
class PositionsSnapshot:
    """Pre-computed snapshot written by the bot to ``positions_current.json``."""

    updated_at: datetime
    base_currency: str
    total_quote_invested: Decimal
    positions: tuple[SnapshotPosition, ...] = field(default_factory=tuple)
