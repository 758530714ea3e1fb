"""Command line entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dashboard.config import ConfigError, load_settings
from dashboard.logging_utils import setup_logging
from valuation.errors import PortfolioError
from valuation.holdings import load_portfolio

logger = logging.getLogger(__name__)

UI_MODES = ("tui", "live", "log")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Track the USD and BTC value of a crypto portfolio in the terminal."
    )
    parser.add_argument(
        "--ui",
        choices=UI_MODES,
        default="tui",
        help="full-screen app, in-place console view, or scrolling log output",
    )
    parser.add_argument("--portfolio", help="portfolio JSON file (overrides PORTFOLIO_FILE)")
    parser.add_argument("--env-file", help="dotenv file to load (default: ./.env)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(args.env_file, portfolio_file=args.portfolio)
    except ConfigError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level, None if args.ui == "log" else settings.log_file)

    try:
        portfolio = load_portfolio(settings.portfolio_file)
    except PortfolioError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.ui == "tui":
        from dashboard.ticker_app import TrackerApp

        app = TrackerApp(settings, portfolio)
        app.run()
        return app.return_code or 0

    from dashboard.console_ui import run_console

    try:
        asyncio.run(run_console(settings, portfolio, live_mode=args.ui == "live"))
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
