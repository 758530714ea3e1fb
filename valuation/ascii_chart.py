"""Unicode line chart of portfolio totals over the history window."""

from __future__ import annotations

from itertools import cycle
from typing import Dict, List, Mapping, Optional, Sequence

from valuation.history import HISTORY_SIZE

SERIES_STYLES = ("green", "yellow", "cyan", "magenta")


class TrendChart:
    """Render series scaled to ``[0, 1]`` as a Unicode line chart.

    Output uses rich console markup when ``color`` is set so it can be
    handed directly to a Textual ``Static`` or a rich ``Console``.
    """

    def __init__(self, width: int = HISTORY_SIZE, height: int = 11, color: bool = True) -> None:
        if width < 2 or height < 3:
            raise ValueError("chart needs width >= 2 and height >= 3")
        self.width = width
        self.height = height
        self.color = color

    # mapping helpers -----------------------------------------------------
    def _map_rows(self, values: Sequence[float]) -> List[int]:
        top = self.height - 1
        return [int(round((1.0 - min(max(v, 0.0), 1.0)) * top)) for v in values]

    def _paint(self, ch: str, style: str) -> str:
        if not self.color or ch == " ":
            return ch
        return f"[{style}]{ch}[/]"

    # rendering -----------------------------------------------------------
    def render(
        self,
        series: Mapping[str, Sequence[float]],
        high: Optional[str] = None,
        low: Optional[str] = None,
    ) -> str:
        """Return the chart, or an empty string until two points exist."""
        if not any(len(values) >= 2 for values in series.values()):
            return ""

        grid: List[List[str]] = [[" "] * self.width for _ in range(self.height)]
        styles: Dict[str, str] = {}
        for (name, values), style in zip(series.items(), cycle(SERIES_STYLES)):
            styles[name] = style
            rows = self._map_rows(list(values)[-self.width :])
            if not rows:
                continue
            offset = self.width - len(rows)
            for idx in range(len(rows) - 1):
                r1 = rows[idx]
                r2 = rows[idx + 1]
                if r2 == r1:
                    ch = "─"
                elif r2 < r1:
                    ch = "╯"
                else:
                    ch = "╮"
                grid[r1][offset + idx] = self._paint(ch, style)
                for r in range(min(r1, r2) + 1, max(r1, r2)):
                    grid[r][offset + idx] = self._paint("│", style)
                if r2 < r1:
                    grid[r2][offset + idx] = self._paint("╭", style)
                elif r2 > r1:
                    grid[r2][offset + idx] = self._paint("╰", style)
            grid[rows[-1]][offset + len(rows) - 1] = self._paint("●", style)

        high = high or ""
        low = low or ""
        label_width = max(len(high), len(low))
        last = self.height - 1
        lines = []
        for r in range(self.height):
            if r == 0:
                label = f"H {high:>{label_width}} ┤"
            elif r == last:
                label = f"L {low:>{label_width}} ┼"
            else:
                label = " " * (label_width + 3) + "│"
            lines.append(label + "".join(grid[r]))

        pad = " " * (label_width + 4)
        legend = "  ".join(self._paint(f"━ {name}", styles[name]) for name in series)
        lines.append(pad + "─" * self.width)
        lines.append(pad + legend)
        return "\n".join(lines)
