"""Current portfolio and performance chart endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from dca_dashboard.api.dependencies import get_data_reader, upstream_error
from dca_dashboard.providers.data_reader import DataReader, FetchError, ParseError
from dca_dashboard.schemas import ChartPointSchema, PortfolioSchema, PositionsSnapshotSchema
from dca_dashboard.services.dashboard import load_portfolio, load_series
from dca_dashboard.services.replay import EmptyLogError
from dca_dashboard.services.timeseries import TimeRange, filter_series

router = APIRouter()


@router.get("", response_model=PortfolioSchema)
async def get_portfolio(reader: DataReader = Depends(get_data_reader)) -> PortfolioSchema:
    """Replay the transaction log and value it at the latest known prices."""

    try:
        portfolio = await load_portfolio(reader)
    except EmptyLogError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (FetchError, ParseError) as exc:
        raise upstream_error(exc) from exc
    return PortfolioSchema.from_domain(portfolio)


@router.get("/timeseries", response_model=list[ChartPointSchema])
async def get_timeseries(
    time_range: TimeRange = Query(default=TimeRange.ALL, alias="range"),
    reader: DataReader = Depends(get_data_reader),
) -> list[ChartPointSchema]:
    """Daily invested / market value / unrealized P&L; empty when there is no history."""

    try:
        points = await load_series(reader)
    except (FetchError, ParseError) as exc:
        raise upstream_error(exc) from exc
    return [ChartPointSchema.from_domain(p) for p in filter_series(points, time_range)]


@router.get("/snapshot", response_model=PositionsSnapshotSchema)
async def get_positions_snapshot(
    reader: DataReader = Depends(get_data_reader),
) -> PositionsSnapshotSchema:
    """Return the bot's own pre-computed positions file."""

    try:
        snapshot = await reader.fetch_positions_snapshot()
    except (FetchError, ParseError) as exc:
        raise upstream_error(exc) from exc
    return PositionsSnapshotSchema.from_domain(snapshot)


__all__ = ["router"]
