"""Load the static portfolio definition."""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping

from valuation.errors import PortfolioError

logger = logging.getLogger(__name__)

Portfolio = Mapping[str, float]


def parse_portfolio(raw: object) -> Portfolio:
    """Validate ``raw`` JSON data and return a read-only portfolio mapping."""
    if not isinstance(raw, dict):
        raise PortfolioError("portfolio must be a JSON object of symbol -> quantity")
    if not raw:
        raise PortfolioError("portfolio is empty")

    holdings: dict[str, float] = {}
    for symbol, qty in raw.items():
        if not isinstance(symbol, str) or not symbol.strip():
            raise PortfolioError(f"invalid symbol {symbol!r}")
        if isinstance(qty, bool) or not isinstance(qty, (int, float)):
            raise PortfolioError(f"quantity for {symbol} must be a number, got {qty!r}")
        if not math.isfinite(qty) or qty < 0:
            raise PortfolioError(f"quantity for {symbol} must be finite and >= 0")
        key = symbol.strip().upper()
        if key in holdings:
            raise PortfolioError(f"duplicate symbol {key}")
        holdings[key] = float(qty)
    return MappingProxyType(holdings)


def load_portfolio(path: str | Path) -> Portfolio:
    """Read the portfolio JSON file at ``path``."""
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise PortfolioError(f"portfolio file not found: {path}") from exc
    except (OSError, ValueError) as exc:
        raise PortfolioError(f"cannot read portfolio {path}: {exc}") from exc
    portfolio = parse_portfolio(raw)
    logger.info("Loaded portfolio with %d assets from %s", len(portfolio), path)
    return portfolio


def portfolio_symbols(portfolio: Portfolio) -> List[str]:
    """Return the portfolio symbols in file order."""
    return list(portfolio.keys())
