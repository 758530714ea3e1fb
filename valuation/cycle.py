"""Per-refresh computation and the state carried between refreshes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from valuation.deltas import SymbolDelta, TotalDelta, compute_deltas, total_changes
from valuation.history import HistoryBuffer, HistoryPoint
from valuation.holdings import Portfolio
from valuation.snapshot import ValuationSnapshot, value_portfolio

logger = logging.getLogger(__name__)


@dataclass
class TrackerState:
    """State threaded through each refresh.

    Only successful cycles advance ``previous``, ``history`` and
    ``last_refresh``; failures are counted without touching them.
    """

    history: HistoryBuffer = field(default_factory=HistoryBuffer)
    previous: Optional[ValuationSnapshot] = None
    last_refresh: Optional[float] = None
    failures: int = 0
    last_error: Optional[str] = None

    @property
    def stale(self) -> bool:
        return self.failures > 0

    def commit(self, snapshot: ValuationSnapshot) -> None:
        self.previous = snapshot
        self.history.append(
            HistoryPoint(time=snapshot.time, total=snapshot.total, total_btc=snapshot.total_btc)
        )
        self.last_refresh = snapshot.time
        self.failures = 0
        self.last_error = None

    def record_failure(self, exc: BaseException) -> None:
        self.failures += 1
        self.last_error = str(exc)

    def next_refresh(self, delay_minutes: float) -> Optional[float]:
        """Time of the next scheduled refresh, anchored on the last success."""
        if self.last_refresh is None:
            return None
        return self.last_refresh + delay_minutes * 60


@dataclass(frozen=True)
class CycleResult:
    snapshot: ValuationSnapshot
    deltas: Dict[str, SymbolDelta]
    total_delta: TotalDelta
    total_btc_delta: TotalDelta


def evaluate(
    portfolio: Portfolio,
    quotes: Mapping[str, float],
    state: TrackerState,
    now: float,
) -> CycleResult:
    """Value ``portfolio`` at ``quotes`` and compare with ``state.previous``.

    Does not modify ``state``; call :meth:`TrackerState.commit` with the
    returned snapshot once the cycle is accepted.
    """
    snapshot = value_portfolio(portfolio, quotes, now)
    deltas = compute_deltas(snapshot, state.previous)
    total_delta, total_btc_delta = total_changes(snapshot, state.previous)
    logger.debug("Valued portfolio at %.2f USD / %.8f BTC", snapshot.total, snapshot.total_btc)
    return CycleResult(
        snapshot=snapshot,
        deltas=deltas,
        total_delta=total_delta,
        total_btc_delta=total_btc_delta,
    )
