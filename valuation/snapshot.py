"""Valuation of the portfolio against a quote snapshot."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Mapping

from valuation.errors import ReferencePriceError
from valuation.holdings import Portfolio
from valuation.quotes import REFERENCE_SYMBOL

SATOSHI_DIGITS = 8


@dataclass(frozen=True)
class ValuationSnapshot:
    """Holdings valued at one point in time.

    ``values`` is ordered by value, largest first; equal values keep the
    portfolio order.
    """

    time: float
    prices: Dict[str, float]
    values: Dict[str, float]
    total: float
    total_btc: float

    @property
    def max_value(self) -> float:
        return max(self.values.values(), default=0.0)


def _usable(price: float | None) -> bool:
    return price is not None and math.isfinite(price) and price > 0


def value_portfolio(
    portfolio: Portfolio, quotes: Mapping[str, float], now: float
) -> ValuationSnapshot:
    """Multiply each holding by its quote and total the result."""
    reference = quotes.get(REFERENCE_SYMBOL)
    if not _usable(reference):
        raise ReferencePriceError(
            f"{REFERENCE_SYMBOL} price unusable for totals: {reference!r}"
        )

    prices: Dict[str, float] = {}
    unsorted: Dict[str, float] = {}
    for symbol, qty in portfolio.items():
        price = quotes.get(symbol)
        price = price if _usable(price) else 0.0
        prices[symbol] = price
        unsorted[symbol] = qty * price

    values = dict(sorted(unsorted.items(), key=lambda item: item[1], reverse=True))
    total = math.fsum(values.values())
    total_btc = round(total / reference, SATOSHI_DIGITS)
    return ValuationSnapshot(
        time=now, prices=prices, values=values, total=total, total_btc=total_btc
    )
