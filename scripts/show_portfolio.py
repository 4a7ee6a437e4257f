"""Print the reconstructed portfolio and daily series for a data directory or URL."""

from __future__ import annotations

import argparse
import asyncio

from dca_dashboard.config import get_settings
from dca_dashboard.core.logging import setup_logging
from dca_dashboard.providers.data_reader import DataReader
from dca_dashboard.services.dashboard import load_portfolio, load_series


async def _run(base_path: str, prices_file: str, show_series: bool) -> None:
    reader = DataReader(base_path, prices_file=prices_file)
    portfolio = await load_portfolio(reader)
    currency = portfolio.base_currency
    print(f"Invested:       {portfolio.total_invested:.2f} {currency}")
    print(f"Market value:   {portfolio.total_market_value:.2f} {currency}")
    print(f"Unrealized P/L: {portfolio.total_unrealized_pl:.2f} {currency}")
    for position in portfolio.positions:
        price = f"{position.price:.2f}" if position.has_price else "n/a"
        print(
            f"  {position.symbol:<10} qty={position.open_quantity} "
            f"avg={position.avg_cost:.2f} price={price} pl={position.unrealized_pl:.2f}"
        )
    if show_series:
        for point in await load_series(reader):
            print(f"{point.date}  invested={point.invested:.2f}  value={point.market_value:.2f}")


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="Replay the DCA bot's logs and print the portfolio")
    parser.add_argument("--base-path", default=settings.data_base_path)
    parser.add_argument("--prices-file", default=settings.prices_file)
    parser.add_argument("--series", action="store_true", help="Also print the daily series")
    args = parser.parse_args()
    asyncio.run(_run(args.base_path, args.prices_file, args.series))


if __name__ == "__main__":
    main()
