"""Pydantic response schemas for the dashboard API."""

from __future__ import annotations

import datetime as dt
from datetime import datetime

from pydantic import BaseModel, Field

from dca_dashboard.models import (
    ChartPoint,
    Iteration,
    Portfolio,
    PositionsSnapshot,
    SnapshotPosition,
    Transaction,
    ValuedPosition,
)
from dca_dashboard.services.history import TransactionSummary


def _opt_float(value) -> float | None:
    return float(value) if value is not None else None


class PositionSchema(BaseModel):
    symbol: str = Field(..., examples=["BTCUSDC"])
    open_quantity: float
    total_cost: float
    avg_cost: float
    price: float
    market_value: float
    unrealized_pl: float
    has_price: bool = Field(
        default=True,
        description="False when no market price is known; market figures are then placeholders.",
    )

    @classmethod
    def from_domain(cls, position: ValuedPosition) -> "PositionSchema":
        return cls(
            symbol=position.symbol,
            open_quantity=float(position.open_quantity),
            total_cost=float(position.total_cost),
            avg_cost=float(position.avg_cost),
            price=float(position.price),
            market_value=float(position.market_value),
            unrealized_pl=float(position.unrealized_pl),
            has_price=position.has_price,
        )


class PortfolioSchema(BaseModel):
    base_currency: str
    total_quote_invested: float
    total_market_value: float
    total_unrealized_pl: float
    positions: list[PositionSchema]
    last_updated: datetime
    stale_symbols: list[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "base_currency": "USDC",
                "total_quote_invested": 1100.0,
                "total_market_value": 1160.0,
                "total_unrealized_pl": 60.0,
                "positions": [
                    {
                        "symbol": "BTCUSDC",
                        "open_quantity": 0.02,
                        "total_cost": 1100.0,
                        "avg_cost": 55000.0,
                        "price": 58000.0,
                        "market_value": 1160.0,
                        "unrealized_pl": 60.0,
                        "has_price": True,
                    }
                ],
                "last_updated": "2024-03-02T09:00:00Z",
                "stale_symbols": [],
            }
        }

    @classmethod
    def from_domain(cls, portfolio: Portfolio) -> "PortfolioSchema":
        return cls(
            base_currency=portfolio.base_currency,
            total_quote_invested=float(portfolio.total_invested),
            total_market_value=float(portfolio.total_market_value),
            total_unrealized_pl=float(portfolio.total_unrealized_pl),
            positions=[PositionSchema.from_domain(p) for p in portfolio.positions],
            last_updated=portfolio.last_updated,
            stale_symbols=list(portfolio.stale_symbols),
        )


class ChartPointSchema(BaseModel):
    date: dt.date
    invested: float
    market_value: float
    unrealized_pl: float
    timestamp: datetime

    @classmethod
    def from_domain(cls, point: ChartPoint) -> "ChartPointSchema":
        return cls(
            date=point.date,
            invested=float(point.invested),
            market_value=float(point.market_value),
            unrealized_pl=float(point.unrealized_pl),
            timestamp=point.timestamp,
        )


class TransactionSchema(BaseModel):
    ts: datetime
    symbol: str
    side: str
    price: float
    qty: float
    quote_spent: float
    exchange: str | None = None
    order_type: str | None = None
    iteration_id: str | None = None
    filters_validated: bool | None = None
    notes: str | None = None

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionSchema":
        return cls(
            ts=tx.timestamp,
            symbol=tx.symbol,
            side=tx.side.value,
            price=float(tx.price),
            qty=float(tx.quantity),
            quote_spent=float(tx.quote_spent),
            exchange=tx.exchange,
            order_type=tx.order_type,
            iteration_id=tx.iteration_id,
            filters_validated=tx.filters_validated,
            notes=tx.notes,
        )


class TransactionSummarySchema(BaseModel):
    count: int
    total_spent: float
    average_price: float

    @classmethod
    def from_domain(cls, summary: TransactionSummary) -> "TransactionSummarySchema":
        return cls(
            count=summary.count,
            total_spent=float(summary.total_spent),
            average_price=float(summary.average_price),
        )


class TransactionHistoryResponse(BaseModel):
    symbols: list[str]
    total_count: int
    summary: TransactionSummarySchema
    transactions: list[TransactionSchema]


class IterationSchema(BaseModel):
    iteration_id: str
    started_at: datetime
    status: str
    ended_at: datetime | None = None
    assets_total: int | None = None
    buys_executed: int | None = None
    notes: str | None = None

    @classmethod
    def from_domain(cls, iteration: Iteration) -> "IterationSchema":
        return cls(
            iteration_id=iteration.iteration_id,
            started_at=iteration.started_at,
            status=iteration.status,
            ended_at=iteration.ended_at,
            assets_total=iteration.assets_total,
            buys_executed=iteration.buys_executed,
            notes=iteration.notes,
        )


class SnapshotPositionSchema(BaseModel):
    symbol: str
    total_cost: float
    open_quantity: float | None = None
    avg_cost: float | None = None
    price: float | None = None
    market_value: float | None = None
    unrealized_pl: float | None = None

    @classmethod
    def from_domain(cls, position: SnapshotPosition) -> "SnapshotPositionSchema":
        return cls(
            symbol=position.symbol,
            total_cost=float(position.total_cost),
            open_quantity=_opt_float(position.open_quantity),
            avg_cost=_opt_float(position.avg_cost),
            price=_opt_float(position.price),
            market_value=_opt_float(position.market_value),
            unrealized_pl=_opt_float(position.unrealized_pl),
        )


class PositionsSnapshotSchema(BaseModel):
    updated_at: datetime
    base_currency: str
    total_quote_invested: float
    positions: list[SnapshotPositionSchema]

    @classmethod
    def from_domain(cls, snapshot: PositionsSnapshot) -> "PositionsSnapshotSchema":
        return cls(
            updated_at=snapshot.updated_at,
            base_currency=snapshot.base_currency,
            total_quote_invested=float(snapshot.total_quote_invested),
            positions=[SnapshotPositionSchema.from_domain(p) for p in snapshot.positions],
        )


__all__ = [
    "ChartPointSchema",
    "IterationSchema",
    "PortfolioSchema",
    "PositionSchema",
    "PositionsSnapshotSchema",
    "SnapshotPositionSchema",
    "TransactionHistoryResponse",
    "TransactionSchema",
    "TransactionSummarySchema",
]
