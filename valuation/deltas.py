"""Percent changes, directions and emphasis tiers between snapshots."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Dict, Hashable, Mapping, Optional, TypeVar

from valuation.snapshot import ValuationSnapshot

K = TypeVar("K", bound=Hashable)

TIERED_PLACES = 3


class Direction(str, enum.Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    UNCHANGED = "unchanged"
    NO_DATA = "no-previous-data"


class Tier(str, enum.Enum):
    """Visual emphasis of a change relative to the other changes."""

    GAIN_1 = "gain-1"
    GAIN_2 = "gain-2"
    GAIN_3 = "gain-3"
    LOSS_1 = "loss-1"
    LOSS_2 = "loss-2"
    LOSS_3 = "loss-3"
    NEUTRAL = "neutral"


GAIN_TIERS = (Tier.GAIN_1, Tier.GAIN_2, Tier.GAIN_3)
LOSS_TIERS = (Tier.LOSS_1, Tier.LOSS_2, Tier.LOSS_3)


@dataclass(frozen=True)
class Change:
    pct: float
    label: str


@dataclass(frozen=True)
class SymbolDelta:
    direction: Direction
    change: Optional[Change]
    tier: Tier = Tier.NEUTRAL


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


def calculate_change(current: float, last: Optional[float]) -> Optional[Change]:
    """Percent change from ``last`` to ``current`` with one decimal.

    Returns ``None`` when there is no previous value or it is zero.
    """
    if last is None or last == 0:
        return None
    pct = _round_half_up((current - last) * 1000 / last) / 10
    sign = "+" if pct > 0 else " " if pct == 0 else ""
    return Change(pct=pct, label=f"{sign}{pct:.1f}%")


def direction(current: float, last: Optional[float]) -> Direction:
    if last is None:
        return Direction.NO_DATA
    if current > last:
        return Direction.INCREASE
    if current < last:
        return Direction.DECREASE
    return Direction.UNCHANGED


def assign_tiers(changes: Mapping[K, Optional[float]]) -> Dict[K, Tier]:
    """Rank changes into emphasis tiers.

    The three largest distinct gains get ``GAIN_1..3`` and the three most
    negative distinct losses get ``LOSS_1..3``. Equal values share a tier;
    zero, missing and lower-ranked changes are ``NEUTRAL``.
    """
    gains = sorted({c for c in changes.values() if c is not None and c > 0}, reverse=True)
    losses = sorted({c for c in changes.values() if c is not None and c < 0})
    gain_tier = dict(zip(gains[:TIERED_PLACES], GAIN_TIERS))
    loss_tier = dict(zip(losses[:TIERED_PLACES], LOSS_TIERS))

    tiers: Dict[K, Tier] = {}
    for key, change in changes.items():
        if change is None:
            tiers[key] = Tier.NEUTRAL
        elif change > 0:
            tiers[key] = gain_tier.get(change, Tier.NEUTRAL)
        elif change < 0:
            tiers[key] = loss_tier.get(change, Tier.NEUTRAL)
        else:
            tiers[key] = Tier.NEUTRAL
    return tiers


def compute_deltas(
    current: ValuationSnapshot, previous: Optional[ValuationSnapshot]
) -> Dict[str, SymbolDelta]:
    """Per-symbol direction, change and tier, in ``current`` ranking order."""
    raw: Dict[str, tuple[Direction, Optional[Change]]] = {}
    for symbol, value in current.values.items():
        last = previous.values.get(symbol) if previous else None
        raw[symbol] = (direction(value, last), calculate_change(value, last))

    tiers = assign_tiers(
        {symbol: change.pct if change else None for symbol, (_, change) in raw.items()}
    )
    return {
        symbol: SymbolDelta(direction=d, change=change, tier=tiers[symbol])
        for symbol, (d, change) in raw.items()
    }


@dataclass(frozen=True)
class TotalDelta:
    direction: Direction
    change: Optional[Change]


def total_changes(
    current: ValuationSnapshot, previous: Optional[ValuationSnapshot]
) -> tuple[TotalDelta, TotalDelta]:
    """Deltas of the USD total and the BTC total."""
    if previous is None:
        empty = TotalDelta(Direction.NO_DATA, None)
        return empty, empty
    usd = TotalDelta(
        direction(current.total, previous.total),
        calculate_change(current.total, previous.total),
    )
    btc = TotalDelta(
        direction(current.total_btc, previous.total_btc),
        calculate_change(current.total_btc, previous.total_btc),
    )
    return usd, btc
