import asyncio
import contextlib
import logging
import time
from typing import Optional

import aiohttp
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.widgets import Static

from dashboard import __version__
from dashboard.config import Settings
from dashboard.refresh_loop import Debouncer, Fetcher, RefreshLoop
from dashboard.views import ViewMode, chart_view, header_view, main_view, settings_view
from valuation.cycle import CycleResult, TrackerState
from valuation.history import HistoryBuffer
from valuation.holdings import Portfolio
from valuation.quotes import QuoteFetcher

logger = logging.getLogger(__name__)

WAITING = "\n\n  Waiting for quotes…"


class TrackerApp(App):
    """Full-screen portfolio view with a trend chart and a settings screen."""

    CSS = """
    Screen {
        background: black;
    }

    #header {
        height: 1;
        background: blue;
    }

    #display, #chart {
        height: auto;
    }

    #chart {
        margin-top: 1;
    }
    """

    BINDINGS = [
        ("s", "toggle_mode", "Settings"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        tracker_settings: Settings,
        portfolio: Portfolio,
        fetcher: Optional[Fetcher] = None,
        tracker_state: Optional[TrackerState] = None,
    ) -> None:
        super().__init__()
        self.tracker_settings = tracker_settings
        self.portfolio = portfolio
        self.fetcher = fetcher
        self.tracker_state = tracker_state or TrackerState(
            history=HistoryBuffer(tracker_settings.history_size)
        )
        self.view_mode = ViewMode.MAIN
        self.last_result: Optional[CycleResult] = None
        self.session: Optional[aiohttp.ClientSession] = None
        self.watcher: Optional[asyncio.Task] = None
        self.debouncer = Debouncer(tracker_settings.resize_debounce, self.relayout)
        self.tracker_title = f"Portfolio tracker v{__version__}"

    def compose(self) -> ComposeResult:
        yield Static(id="header")
        yield Static(WAITING, id="display")
        yield Static(id="chart")

    async def on_mount(self) -> None:
        self.title = self.tracker_title
        if self.fetcher is None:
            timeout = aiohttp.ClientTimeout(total=30)
            self.session = aiohttp.ClientSession(timeout=timeout)
            self.fetcher = QuoteFetcher(
                self.tracker_settings.api_key, self.session, self.tracker_settings.base_url
            )
        refresher = RefreshLoop(
            self.fetcher,
            self.portfolio,
            self.tracker_state,
            self,
            delay_minutes=self.tracker_settings.delay_minutes,
            retry_cooldown=self.tracker_settings.retry_cooldown,
        )
        self.draw()
        logger.info("Tracker UI mounted, refreshing every %s min", self.tracker_settings.delay_minutes)
        self.watcher = asyncio.create_task(refresher.run_forever())
        self.watcher.add_done_callback(self._watcher_done)
        self.set_interval(self.tracker_settings.clock_interval, self.refresh_header)

    async def on_unmount(self) -> None:
        self.debouncer.cancel()
        if self.watcher:
            self.watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.watcher
        if self.session:
            await self.session.close()
        logger.info("Tracker UI shutting down")

    def _watcher_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Refresh loop stopped: %r", exc)
            self.exit(return_code=1, message=f"refresh loop stopped: {exc}")

    def on_resize(self, event: events.Resize) -> None:
        self.debouncer.trigger()

    # renderer ------------------------------------------------------------
    def show_cycle(self, result: CycleResult) -> None:
        self.last_result = result
        self.draw()

    def show_failure(self, exc: Exception) -> None:
        self.refresh_header()

    def refresh_header(self) -> None:
        header = header_view(
            self.tracker_title,
            self.view_mode,
            self.tracker_state,
            self.tracker_settings.delay_minutes,
            time.time(),
            self.size.width,
        )
        self.query_one("#header", Static).update(header)

    def relayout(self) -> None:
        with contextlib.suppress(NoMatches):
            self.draw()

    def draw(self) -> None:
        self.refresh_header()
        display = self.query_one("#display", Static)
        chart = self.query_one("#chart", Static)
        if self.view_mode is ViewMode.SETTINGS:
            display.update(settings_view(self.portfolio))
            chart.display = False
            return
        if self.last_result is None:
            display.update(Text(WAITING))
        else:
            display.update(main_view(self.last_result, self.portfolio))
        rendered = chart_view(self.tracker_state.history, self.size.width)
        chart.display = rendered is not None
        if rendered is not None:
            chart.update(rendered)

    # actions -------------------------------------------------------------
    def action_toggle_mode(self) -> None:
        self.view_mode = self.view_mode.toggled()
        self.draw()

    def action_quit(self) -> None:
        self.exit()
