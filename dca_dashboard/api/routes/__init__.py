"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .iterations import router as iterations_router
from .portfolio import router as portfolio_router
from .transactions import router as transactions_router

api_router = APIRouter()
api_router.include_router(portfolio_router, prefix="/portfolio", tags=["portfolio"])
api_router.include_router(transactions_router, prefix="/transactions", tags=["transactions"])
api_router.include_router(iterations_router, prefix="/iterations", tags=["iterations"])

__all__ = ["api_router"]
