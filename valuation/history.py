"""Bounded history of portfolio totals feeding the trend chart."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, Iterator, List

HISTORY_SIZE = 96


@dataclass(frozen=True)
class HistoryPoint:
    time: float
    total: float
    total_btc: float


def normalize(values: Iterable[float]) -> List[float]:
    """Scale ``values`` into ``[0, 1]``; a flat series maps to ``0.5``."""
    values = list(values)
    if not values:
        return []
    lo = min(values)
    span = max(values) - lo
    if span == 0:
        return [0.5] * len(values)
    return [(v - lo) / span for v in values]


class HistoryBuffer:
    """Sliding window over the most recent ``maxlen`` totals."""

    def __init__(self, maxlen: int = HISTORY_SIZE) -> None:
        if maxlen < 1:
            raise ValueError("maxlen must be positive")
        self.points: Deque[HistoryPoint] = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        return self.points.maxlen or 0

    def append(self, point: HistoryPoint) -> None:
        self.points.append(point)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[HistoryPoint]:
        return iter(self.points)

    def totals(self) -> List[float]:
        return [p.total for p in self.points]

    def totals_btc(self) -> List[float]:
        return [p.total_btc for p in self.points]

    def normalized(self) -> tuple[List[float], List[float]]:
        """Return the USD and BTC series each scaled to ``[0, 1]``."""
        return normalize(self.totals()), normalize(self.totals_btc())
