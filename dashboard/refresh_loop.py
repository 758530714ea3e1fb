"""Fetch, value and display on a fixed cadence."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Iterable, Mapping, Optional, Protocol

from valuation.cycle import CycleResult, TrackerState, evaluate
from valuation.errors import QuoteFetchError, ReferencePriceError
from valuation.holdings import Portfolio, portfolio_symbols

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

# errors that fail a single cycle; anything else propagates
CYCLE_ERRORS = (QuoteFetchError, ReferencePriceError)


class Fetcher(Protocol):
    async def fetch(self, symbols: Iterable[str]) -> Mapping[str, float]: ...


class Renderer(Protocol):
    """Display surface driven by :class:`RefreshLoop`."""

    def show_cycle(self, result: CycleResult) -> None:
        """Draw a freshly computed cycle."""

    def show_failure(self, exc: Exception) -> None:
        """Reflect a failed attempt (the last frame stays on screen)."""

    def refresh_header(self) -> None:
        """Redraw the clock/countdown area."""

    def relayout(self) -> None:
        """Recompute sizes after the output surface changed."""


class RefreshLoop:
    """Run fetch -> compute -> render cycles until cancelled."""

    def __init__(
        self,
        fetcher: Fetcher,
        portfolio: Portfolio,
        state: TrackerState,
        renderer: Renderer,
        delay_minutes: float,
        retry_cooldown: float,
        clock: Callable[[], float] = time.time,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.fetcher = fetcher
        self.portfolio = portfolio
        self.symbols = portfolio_symbols(portfolio)
        self.state = state
        self.renderer = renderer
        self.delay_minutes = delay_minutes
        self.retry_cooldown = retry_cooldown
        self.clock = clock
        self.sleep = sleep
        self.cycles = 0

    async def attempt(self) -> CycleResult:
        """One fetch-and-evaluate attempt; commits state only on success."""
        quotes = await self.fetcher.fetch(self.symbols)
        result = evaluate(self.portfolio, quotes, self.state, self.clock())
        self.state.commit(result.snapshot)
        return result

    async def run_cycle(self) -> CycleResult:
        """Retry :meth:`attempt` after a fixed cooldown until it succeeds."""
        while True:
            try:
                result = await self.attempt()
            except CYCLE_ERRORS as exc:
                self.state.record_failure(exc)
                logger.warning(
                    "Refresh failed (%d in a row), retrying in %ss: %s",
                    self.state.failures,
                    self.retry_cooldown,
                    exc,
                )
                self.renderer.show_failure(exc)
                await self.sleep(self.retry_cooldown)
                continue
            self.cycles += 1
            logger.info(
                "Refresh %d: total %.2f USD / %.8f BTC",
                self.cycles,
                result.snapshot.total,
                result.snapshot.total_btc,
            )
            self.renderer.show_cycle(result)
            return result

    async def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """Repeat :meth:`run_cycle` every ``delay_minutes``."""
        while True:
            await self.run_cycle()
            if max_cycles is not None and self.cycles >= max_cycles:
                return
            await self.sleep(self.delay_minutes * 60)


async def countdown(renderer: Renderer, interval: float, sleep: Sleep = asyncio.sleep) -> None:
    """Refresh the header every ``interval`` seconds, independent of fetches."""
    while True:
        await sleep(interval)
        renderer.refresh_header()


class Debouncer:
    """Call ``callback`` once, ``delay`` seconds after the last trigger."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    def trigger(self) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.delay, self._fire)

    def _fire(self) -> None:
        self._handle = None
        self.callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
