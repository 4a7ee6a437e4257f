"""Pydantic schema exports."""

from .portfolio import (
    ChartPointSchema,
    IterationSchema,
    PortfolioSchema,
    PositionSchema,
    PositionsSnapshotSchema,
    SnapshotPositionSchema,
    TransactionHistoryResponse,
    TransactionSchema,
    TransactionSummarySchema,
)
from .records import (
    IterationRecord,
    PositionsSnapshotRecord,
    PriceRecord,
    SnapshotPositionRecord,
    TransactionRecord,
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
    "IterationRecord",
    "PositionsSnapshotRecord",
    "PriceRecord",
    "SnapshotPositionRecord",
    "TransactionRecord",
]
