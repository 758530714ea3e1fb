"""Console front-ends: scrolling log output and an in-place live view."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import time
from typing import Optional

import aiohttp
from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

from dashboard import __version__
from dashboard.config import Settings
from dashboard.refresh_loop import Debouncer, Fetcher, RefreshLoop, Renderer, countdown
from dashboard.views import ViewMode, chart_view, header_view, main_view
from valuation.cycle import CycleResult, TrackerState
from valuation.history import HistoryBuffer
from valuation.holdings import Portfolio
from valuation.quotes import QuoteFetcher

logger = logging.getLogger(__name__)

TITLE = f"Portfolio tracker v{__version__}"


class ConsoleRenderer:
    """Print one block per refresh and let the terminal scroll."""

    def __init__(
        self, console: Console, portfolio: Portfolio, state: TrackerState, delay_minutes: float
    ) -> None:
        self.console = console
        self.portfolio = portfolio
        self.state = state
        self.delay_minutes = delay_minutes

    def show_cycle(self, result: CycleResult) -> None:
        self.console.print(
            header_view(
                TITLE,
                ViewMode.MAIN,
                self.state,
                self.delay_minutes,
                time.time(),
                self.console.width,
            )
        )
        self.console.print(main_view(result, self.portfolio))

    def show_failure(self, exc: Exception) -> None:
        self.console.print(Text(f"refresh failed, retrying: {exc}", style="bold red"))

    def refresh_header(self) -> None:
        pass

    def relayout(self) -> None:
        pass


class LiveRenderer:
    """Redraw header, holdings and chart in place."""

    def __init__(
        self, live: Live, portfolio: Portfolio, state: TrackerState, delay_minutes: float
    ) -> None:
        self.live = live
        self.portfolio = portfolio
        self.state = state
        self.delay_minutes = delay_minutes
        self.result: Optional[CycleResult] = None

    def frame(self) -> Group:
        width = self.live.console.width
        parts = [
            header_view(
                TITLE, ViewMode.MAIN, self.state, self.delay_minutes, time.time(), width
            )
        ]
        if self.result is None:
            parts.append(Text("\n\n  Waiting for quotes…"))
        else:
            parts.append(main_view(self.result, self.portfolio))
        chart = chart_view(self.state.history, width)
        if chart:
            parts.append(Text("\n"))
            parts.append(Text.from_markup(chart))
        return Group(*parts)

    def show_cycle(self, result: CycleResult) -> None:
        self.result = result
        self.live.update(self.frame())

    def show_failure(self, exc: Exception) -> None:
        self.live.update(self.frame())

    def refresh_header(self) -> None:
        self.live.update(self.frame())

    def relayout(self) -> None:
        self.live.update(self.frame())


async def drive(
    renderer: Renderer,
    fetcher: Fetcher,
    portfolio: Portfolio,
    state: TrackerState,
    settings: Settings,
    stop: asyncio.Event,
) -> None:
    """Run the refresh loop and the countdown until ``stop`` is set."""
    refresher = RefreshLoop(
        fetcher,
        portfolio,
        state,
        renderer,
        delay_minutes=settings.delay_minutes,
        retry_cooldown=settings.retry_cooldown,
    )
    tasks = [
        asyncio.create_task(refresher.run_forever()),
        asyncio.create_task(countdown(renderer, settings.clock_interval)),
    ]
    stopper = asyncio.create_task(stop.wait())
    done, _ = await asyncio.wait([*tasks, stopper], return_when=asyncio.FIRST_COMPLETED)
    for task in (*tasks, stopper):
        task.cancel()
    await asyncio.gather(*tasks, stopper, return_exceptions=True)
    for task in done:
        if task is not stopper and task.exception() is not None:
            raise task.exception()


async def run_console(settings: Settings, portfolio: Portfolio, live_mode: bool) -> None:
    """Entry point for the ``log`` and ``live`` views."""
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    state = TrackerState(history=HistoryBuffer(settings.history_size))
    console = Console()
    timeout = aiohttp.ClientTimeout(total=30)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        fetcher = QuoteFetcher(settings.api_key, session, settings.base_url)
        if not live_mode:
            renderer = ConsoleRenderer(console, portfolio, state, settings.delay_minutes)
            await drive(renderer, fetcher, portfolio, state, settings, stop)
            return

        with Live(console=console, refresh_per_second=2) as live:
            renderer = LiveRenderer(live, portfolio, state, settings.delay_minutes)
            live.update(renderer.frame())
            debouncer = Debouncer(settings.resize_debounce, renderer.relayout)
            sigwinch = getattr(signal, "SIGWINCH", None)
            if sigwinch is not None:
                loop.add_signal_handler(sigwinch, debouncer.trigger)
            try:
                await drive(renderer, fetcher, portfolio, state, settings, stop)
            finally:
                debouncer.cancel()
                if sigwinch is not None:
                    loop.remove_signal_handler(sigwinch)
