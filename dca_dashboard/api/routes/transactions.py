"""Raw transaction history endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from dca_dashboard.api.dependencies import get_data_reader, upstream_error
from dca_dashboard.providers.data_reader import DataReader, FetchError, ParseError
from dca_dashboard.schemas import (
    TransactionHistoryResponse,
    TransactionSchema,
    TransactionSummarySchema,
)
from dca_dashboard.services.history import (
    filter_transactions,
    list_symbols,
    summarize_transactions,
)

router = APIRouter()


@router.get("", response_model=TransactionHistoryResponse)
async def get_transactions(
    symbol: str | None = Query(default=None, description="Only show this trading pair"),
    reader: DataReader = Depends(get_data_reader),
) -> TransactionHistoryResponse:
    try:
        transactions = await reader.fetch_transactions()
    except (FetchError, ParseError) as exc:
        raise upstream_error(exc) from exc
    selected = filter_transactions(transactions, symbol)
    return TransactionHistoryResponse(
        symbols=list_symbols(transactions),
        total_count=len(transactions),
        summary=TransactionSummarySchema.from_domain(summarize_transactions(selected)),
        transactions=[TransactionSchema.from_domain(tx) for tx in selected],
    )


__all__ = ["router"]
