"""Bot iteration log endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dca_dashboard.api.dependencies import get_data_reader, upstream_error
from dca_dashboard.providers.data_reader import DataReader, FetchError, ParseError
from dca_dashboard.schemas import IterationSchema

router = APIRouter()


@router.get("", response_model=list[IterationSchema])
async def get_iterations(reader: DataReader = Depends(get_data_reader)) -> list[IterationSchema]:
    try:
        iterations = await reader.fetch_iterations()
    except (FetchError, ParseError) as exc:
        raise upstream_error(exc) from exc
    return [IterationSchema.from_domain(it) for it in iterations]


__all__ = ["router"]
