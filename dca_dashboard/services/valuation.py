"""Mark replayed positions to market."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from dca_dashboard.models import Portfolio, Position, ReplayedPortfolio, ValuedPosition
from dca_dashboard.services import decimals
from dca_dashboard.services.decimals import ZERO
from dca_dashboard.services.prices import PriceLookup

logger = logging.getLogger(__name__)


class StalePriceWarning(UserWarning):
    """Issued when held symbols have no resolvable market price."""


@dataclass(frozen=True)
class ValuationTotals:
    market_value: Decimal
    unrealized_pl: Decimal


def value_position(position: Position, price: Decimal | None) -> ValuedPosition:
    """Price one position; ``price=None`` marks it as lacking market data."""

    if price is None:
        return ValuedPosition(
            symbol=position.symbol,
            open_quantity=position.open_quantity,
            total_cost=position.total_cost,
            avg_cost=position.avg_cost,
            price=ZERO,
            market_value=ZERO,
            unrealized_pl=ZERO,
            has_price=False,
        )
    market_value = decimals.multiply(position.open_quantity, price)
    return ValuedPosition(
        symbol=position.symbol,
        open_quantity=position.open_quantity,
        total_cost=position.total_cost,
        avg_cost=position.avg_cost,
        price=price,
        market_value=market_value,
        unrealized_pl=decimals.subtract(market_value, position.total_cost),
    )


def value_positions(
    positions: Iterable[Position],
    price_lookup: PriceLookup,
    cutoff: datetime | None = None,
) -> list[ValuedPosition]:
    return [value_position(p, price_lookup(p.symbol, cutoff)) for p in positions]


def sum_valuations(valued: Iterable[ValuedPosition]) -> ValuationTotals:
    """Add up the already-rounded per-symbol figures."""

    market_value = ZERO
    unrealized_pl = ZERO
    for position in valued:
        market_value = decimals.add(market_value, position.market_value)
        unrealized_pl = decimals.add(unrealized_pl, position.unrealized_pl)
    return ValuationTotals(market_value=market_value, unrealized_pl=unrealized_pl)


def valuate(
    replayed: ReplayedPortfolio,
    price_lookup: PriceLookup,
    *,
    as_of: datetime | None = None,
) -> Portfolio:
    """Build a ``Portfolio`` from replayed positions.

    ``as_of=None`` values every symbol at its most recent known price.
    Symbols without any price are reported with zero market value and listed
    in ``stale_symbols``; a ``StalePriceWarning`` is issued for them.
    """

    valued = value_positions(replayed.positions, price_lookup, as_of)
    totals = sum_valuations(valued)
    stale = tuple(p.symbol for p in valued if not p.has_price)
    if stale:
        message = f"No market price for {', '.join(stale)}; market value unavailable"
        logger.warning(message)
        warnings.warn(message, StalePriceWarning, stacklevel=2)

    last_updated = replayed.last_transaction_time or as_of or datetime.now(timezone.utc)
    return Portfolio(
        base_currency=replayed.base_currency,
        total_invested=replayed.total_invested,
        total_market_value=totals.market_value,
        total_unrealized_pl=totals.unrealized_pl,
        positions=tuple(valued),
        last_updated=last_updated,
        stale_symbols=stale,
    )


__all__ = [
    "StalePriceWarning",
    "ValuationTotals",
    "sum_valuations",
    "valuate",
    "value_position",
    "value_positions",
]
