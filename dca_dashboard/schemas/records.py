"""Pydantic schemas for the files written by the DCA bot.

The bot writes decimals as JSON strings (``"0.00123400"``); they are parsed
straight into ``Decimal`` so no binary float rounding leaks into the engine.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dca_dashboard.models import (
    Iteration,
    PositionsSnapshot,
    PricePoint,
    SnapshotPosition,
    TradeSide,
    Transaction,
    as_utc,
)


def _non_negative_amount(value: Decimal) -> Decimal:
    if not value.is_finite():
        raise ValueError("must be a finite number")
    if value < 0:
        raise ValueError("must not be negative")
    return value


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class TransactionRecord(_Record):
    ts: datetime
    symbol: str = Field(..., min_length=1, examples=["BTCUSDC"])
    side: TradeSide
    price: Decimal
    qty: Decimal
    quote_spent: Decimal
    exchange: str | None = None
    order_type: str | None = None
    iteration_id: str | None = None
    filters_validated: bool | None = None
    notes: str | None = None

    @field_validator("ts")
    @classmethod
    def _normalize_ts(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        return value.upper()

    @field_validator("side", mode="before")
    @classmethod
    def _normalize_side(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("price", "qty", "quote_spent")
    @classmethod
    def _finite_non_negative(cls, value: Decimal) -> Decimal:
        return _non_negative_amount(value)

    def to_domain(self) -> Transaction:
        return Transaction(
            timestamp=self.ts,
            symbol=self.symbol,
            side=self.side,
            price=self.price,
            quantity=self.qty,
            quote_spent=self.quote_spent,
            exchange=self.exchange,
            order_type=self.order_type,
            iteration_id=self.iteration_id,
            filters_validated=self.filters_validated,
            notes=self.notes,
        )


class PriceRecord(_Record):
    ts: datetime
    symbol: str = Field(..., min_length=1)
    price: Decimal
    source: str | None = None
    iteration_id: str | None = None

    @field_validator("ts")
    @classmethod
    def _normalize_ts(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        return value.upper()

    @field_validator("price")
    @classmethod
    def _finite_non_negative(cls, value: Decimal) -> Decimal:
        return _non_negative_amount(value)

    def to_domain(self) -> PricePoint:
        return PricePoint(
            timestamp=self.ts,
            symbol=self.symbol,
            price=self.price,
            source=self.source,
            iteration_id=self.iteration_id,
        )


class IterationRecord(_Record):
    iteration_id: str
    started_at: datetime
    status: str
    ended_at: datetime | None = None
    assets_total: int | None = None
    buys_executed: int | None = None
    notes: str | None = None

    @field_validator("started_at", "ended_at")
    @classmethod
    def _normalize_ts(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None

    def to_domain(self) -> Iteration:
        return Iteration(
            iteration_id=self.iteration_id,
            started_at=self.started_at,
            status=self.status,
            ended_at=self.ended_at,
            assets_total=self.assets_total,
            buys_executed=self.buys_executed,
            notes=self.notes,
        )


class SnapshotPositionRecord(_Record):
    symbol: str
    total_cost: Decimal
    open_quantity: Decimal | None = None
    open_qty: Decimal | None = None
    avg_cost: Decimal | None = None
    price: Decimal | None = None
    market_value: Decimal | None = None
    unrealized_pl: Decimal | None = None

    @model_validator(mode="after")
    def _merge_legacy_quantity(self) -> "SnapshotPositionRecord":
        # Older bot versions wrote a numeric ``open_qty`` instead of ``open_quantity``.
        if self.open_quantity is None and self.open_qty is not None:
            self.open_quantity = self.open_qty
        return self

    def to_domain(self) -> SnapshotPosition:
        return SnapshotPosition(
            symbol=self.symbol,
            total_cost=self.total_cost,
            open_quantity=self.open_quantity,
            avg_cost=self.avg_cost,
            price=self.price,
            market_value=self.market_value,
            unrealized_pl=self.unrealized_pl,
        )


class PositionsSnapshotRecord(_Record):
    updated_at: datetime
    base_currency: str
    total_quote_invested: Decimal
    positions: list[SnapshotPositionRecord] = Field(default_factory=list)

    @field_validator("updated_at")
    @classmethod
    def _normalize_ts(cls, value: datetime) -> datetime:
        return as_utc(value)

    def to_domain(self) -> PositionsSnapshot:
        return PositionsSnapshot(
            updated_at=self.updated_at,
            base_currency=self.base_currency,
            total_quote_invested=self.total_quote_invested,
            positions=tuple(p.to_domain() for p in self.positions),
        )


__all__ = [
    "TransactionRecord",
    "PriceRecord",
    "IterationRecord",
    "SnapshotPositionRecord",
    "PositionsSnapshotRecord",
]
