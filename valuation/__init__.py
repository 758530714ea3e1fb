"""Portfolio valuation core: holdings, quotes, snapshots, deltas and history."""

from valuation.ascii_chart import TrendChart
from valuation.cycle import CycleResult, TrackerState, evaluate
from valuation.deltas import (
    Change,
    Direction,
    SymbolDelta,
    Tier,
    assign_tiers,
    calculate_change,
    compute_deltas,
)
from valuation.errors import (
    PortfolioError,
    QuoteFetchError,
    ReferencePriceError,
    TrackerError,
)
from valuation.history import HistoryBuffer, HistoryPoint
from valuation.holdings import Portfolio, load_portfolio, parse_portfolio
from valuation.quotes import QuoteFetcher
from valuation.snapshot import ValuationSnapshot, value_portfolio

__all__ = [
    "Change",
    "CycleResult",
    "Direction",
    "HistoryBuffer",
    "HistoryPoint",
    "Portfolio",
    "PortfolioError",
    "QuoteFetchError",
    "QuoteFetcher",
    "ReferencePriceError",
    "SymbolDelta",
    "Tier",
    "TrackerError",
    "TrackerState",
    "TrendChart",
    "ValuationSnapshot",
    "assign_tiers",
    "calculate_change",
    "compute_deltas",
    "evaluate",
    "load_portfolio",
    "parse_portfolio",
    "value_portfolio",
]
