"""Portfolio reconstruction engine for the DCA bot dashboard."""

from .models import ChartPoint, Portfolio, Position, PricePoint, TradeSide, Transaction
from .services.prices import PriceBook, latest_price_as_of
from .services.replay import EmptyLogError, replay
from .services.timeseries import build_series
from .services.valuation import StalePriceWarning, valuate

__all__ = [
    "ChartPoint",
    "Portfolio",
    "Position",
    "PricePoint",
    "TradeSide",
    "Transaction",
    "PriceBook",
    "latest_price_as_of",
    "EmptyLogError",
    "replay",
    "build_series",
    "StalePriceWarning",
    "valuate",
]
