"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import HTTPException, status

from dca_dashboard.config import get_settings
from dca_dashboard.providers.data_reader import DataReader, FetchError, ParseError


def get_data_reader() -> DataReader:
    """Build a reader over the configured data base path."""

    return DataReader.from_settings(get_settings())


def upstream_error(exc: FetchError | ParseError) -> HTTPException:
    """Translate a data file failure into a 502 for the frontend's error panel."""

    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


__all__ = ["get_data_reader", "upstream_error"]
