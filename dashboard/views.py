"""Turn cycle results into rich ``Text`` for the terminal views."""

from __future__ import annotations

import enum
import math
import sys
from typing import Mapping, Optional

from rich.text import Text

from valuation.ascii_chart import TrendChart
from valuation.cycle import CycleResult, TrackerState
from valuation.deltas import Direction, Tier, TotalDelta
from valuation.history import HistoryBuffer

IS_WINDOWS = sys.platform == "win32"
MUTED = "white" if IS_WINDOWS else "grey50"
BAR_EMPTY_STYLE = "blue" if IS_WINDOWS else "grey50"

BAR_FILLED = "█"
BAR_EMPTY = "░"
NO_DATA_MARK = "·"

ARROWS = {
    Direction.INCREASE: ("↑", "green"),
    Direction.DECREASE: ("↓", "red"),
    Direction.UNCHANGED: ("=", "blue"),
    Direction.NO_DATA: (NO_DATA_MARK, MUTED),
}

DIRECTION_STYLES = {
    Direction.INCREASE: "green",
    Direction.DECREASE: "red",
    Direction.UNCHANGED: "blue",
    Direction.NO_DATA: "white",
}

TIER_STYLES = {
    Tier.GAIN_1: "black on green",
    Tier.GAIN_2: "black on yellow",
    Tier.GAIN_3: "black on cyan",
    Tier.LOSS_1: "white on red",
    Tier.LOSS_2: "white on magenta",
    Tier.LOSS_3: "white on blue",
    Tier.NEUTRAL: "cyan",
}


class ViewMode(str, enum.Enum):
    MAIN = "main"
    SETTINGS = "settings"

    def toggled(self) -> "ViewMode":
        return ViewMode.SETTINGS if self is ViewMode.MAIN else ViewMode.MAIN


# formatting helpers ------------------------------------------------------
def format_money(value: float) -> str:
    """Format ``value`` as US dollars, e.g. ``$1,234.50``."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_quantity(value: float) -> str:
    """Shortest plain decimal for ``value`` with at most 8 places."""
    text = f"{value:.8f}".rstrip("0").rstrip(".")
    return text or "0"


def bar_cells(max_value: float, total: float, value: float) -> tuple[int, int]:
    """Return ``(filled, empty)`` cell counts for a holding's bar.

    Bars are scaled so the largest holding's share of the total sets the
    length; each cell is one percent of the total.
    """
    if total <= 0:
        return 0, 0
    length = math.floor(max_value * 100 / total) + 1
    share = value * 100 / total
    filled = sum(1 for i in range(length) if share - i > 0)
    return filled, length - filled


def format_distance(seconds: float) -> str:
    """Describe a time offset in words, e.g. ``in 4 minutes``."""
    s = abs(seconds)
    if s < 5:
        text = "less than 5 seconds"
    elif s < 10:
        text = "less than 10 seconds"
    elif s < 20:
        text = "less than 20 seconds"
    elif s < 40:
        text = "half a minute"
    elif s < 60:
        text = "less than a minute"
    else:
        minutes = round(s / 60)
        if minutes < 2:
            text = "1 minute"
        elif minutes < 45:
            text = f"{minutes} minutes"
        elif minutes < 90:
            text = "about 1 hour"
        elif minutes < 1440:
            text = f"about {round(minutes / 60)} hours"
        elif minutes < 2520:
            text = "1 day"
        else:
            text = f"{round(minutes / 1440)} days"
    return f"in {text}" if seconds >= 0 else f"{text} ago"


def _arrow(direction: Direction) -> Text:
    glyph, style = ARROWS[direction]
    return Text(glyph, style=style)


def _bar(max_value: float, total: float, value: float) -> Text:
    filled, empty = bar_cells(max_value, total, value)
    return Text.assemble(
        (BAR_FILLED * filled, "magenta"), (BAR_EMPTY * empty, BAR_EMPTY_STYLE)
    )


def _total_change(delta: TotalDelta) -> Text:
    if delta.change is None:
        return Text()
    return Text.assemble(" ", (delta.change.label.strip(), "cyan"))


# views -------------------------------------------------------------------
def main_view(result: CycleResult, portfolio: Mapping[str, float]) -> Text:
    """Ranked holdings with bars, values, changes, prices and totals."""
    snapshot = result.snapshot
    symbol_width = max(len(s) for s in snapshot.values)
    money_width = len(format_money(snapshot.max_value))
    change_width = max(
        (len(d.change.label) for d in result.deltas.values() if d.change), default=0
    )

    out = Text("\n\n")
    for symbol, value in snapshot.values.items():
        delta = result.deltas[symbol]
        out.append("  ")
        out.append(symbol.rjust(symbol_width), style="yellow")
        out.append(" ")
        out.append_text(_arrow(delta.direction))
        out.append(" ")
        out.append_text(_bar(snapshot.max_value, snapshot.total, value))
        out.append(" ")
        out.append(format_money(value).rjust(money_width), style=DIRECTION_STYLES[delta.direction])
        out.append(" ")
        if delta.change is not None:
            out.append(delta.change.label.ljust(change_width), style=TIER_STYLES[delta.tier])
            out.append(" ")
        else:
            out.append(NO_DATA_MARK, style=MUTED)
        out.append(" ")
        out.append(format_money(snapshot.prices[symbol]), style=f"reverse {MUTED}")
        out.append(f"{NO_DATA_MARK}{format_quantity(portfolio[symbol])}", style=MUTED)
        out.append("\n")

    out.append("\n")
    out.append(" " * (symbol_width + 5))
    out.append("TOTAL", style="cyan")
    out.append(" ")
    out.append(format_money(snapshot.total), style=DIRECTION_STYLES[result.total_delta.direction])
    out.append(" USD", style="green")
    out.append_text(_total_change(result.total_delta))
    out.append(" - ", style="yellow" if IS_WINDOWS else MUTED)
    out.append(
        format_quantity(snapshot.total_btc),
        style=DIRECTION_STYLES[result.total_btc_delta.direction],
    )
    out.append(" BTC", style="yellow")
    out.append_text(_total_change(result.total_btc_delta))
    return out


def settings_view(portfolio: Mapping[str, float]) -> Text:
    """The configured holdings, one per line."""
    width = max(len(s) for s in portfolio)
    out = Text("\n\n")
    lines = []
    for symbol, qty in portfolio.items():
        line = Text("  ")
        line.append(symbol.rjust(width), style="yellow")
        line.append(" ")
        line.append(format_quantity(qty), style=MUTED)
        lines.append(line)
    out.append_text(Text("\n").join(lines))
    return out


def header_view(
    title: str,
    mode: ViewMode,
    state: TrackerState,
    delay_minutes: float,
    now: float,
    width: int,
) -> Text:
    """Title on the left; countdown, status and key hints on the right."""
    left = Text(f" {title}", style="green")

    right = Text()
    next_refresh = state.next_refresh(delay_minutes)
    if mode is ViewMode.MAIN and next_refresh is not None and next_refresh > now:
        right.append(f"next refresh {format_distance(next_refresh - now)}", style="cyan")
    if state.stale:
        if right:
            right.append("  ")
        right.append(f"stale, retrying ({state.failures} failed)", style="bold red")
    right.append("  ")
    right.append("s", style="bold white")
    right.append("ettings" if mode is ViewMode.MAIN else "ummary", style="cyan")
    right.append(" ")
    right.append("q", style="bold white")
    right.append("uit ", style="cyan")

    gap = max(1, width - left.cell_len - right.cell_len)
    return Text.assemble(left, " " * gap, right)


def chart_view(history: HistoryBuffer, width: int, color: bool = True) -> Optional[str]:
    """Trend chart of USD and BTC totals; ``None`` until two points exist."""
    if len(history) < 2:
        return None
    totals = history.totals()
    high = format_money(max(totals))
    low = format_money(min(totals))
    label_width = max(len(high), len(low)) + 4
    chart_width = max(2, min(history.maxlen, width - label_width - 1))
    usd, btc = history.normalized()
    chart = TrendChart(width=chart_width, color=color)
    return chart.render({"USD": usd, "BTC": btc}, high=high, low=low)
