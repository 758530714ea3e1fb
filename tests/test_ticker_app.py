import pytest

from dashboard.config import Settings
from dashboard.ticker_app import TrackerApp
from dashboard.views import ViewMode
from valuation import QuoteFetchError
from valuation.holdings import parse_portfolio

PORTFOLIO = parse_portfolio({"BTC": 0.5, "ETH": 10})


class StaticFetcher:
    def __init__(self, quotes=None, error=None):
        self.quotes = quotes or {"BTC": 60000, "ETH": 3000}
        self.error = error
        self.calls = 0

    async def fetch(self, symbols):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.quotes


async def _wait_for(pilot, predicate, attempts=40):
    for _ in range(attempts):
        if predicate():
            return True
        await pilot.pause(0.05)
    return predicate()


def _settings(**kwargs):
    return Settings(api_key="test", delay_minutes=5, **kwargs)


@pytest.mark.asyncio
async def test_app_runs_first_cycle_and_toggles_settings():
    fetcher = StaticFetcher()
    app = TrackerApp(_settings(), PORTFOLIO, fetcher=fetcher)
    async with app.run_test() as pilot:
        assert await _wait_for(pilot, lambda: app.last_result is not None)
        assert app.tracker_state.previous.total == 60000
        assert app.view_mode is ViewMode.MAIN

        await pilot.press("s")
        assert app.view_mode is ViewMode.SETTINGS
        await pilot.press("s")
        assert app.view_mode is ViewMode.MAIN
    assert fetcher.calls == 1


@pytest.mark.asyncio
async def test_app_marks_state_stale_on_failure():
    fetcher = StaticFetcher(error=QuoteFetchError("down"))
    app = TrackerApp(_settings(retry_cooldown=60), PORTFOLIO, fetcher=fetcher)
    async with app.run_test() as pilot:
        assert await _wait_for(pilot, lambda: app.tracker_state.failures == 1)
        assert app.tracker_state.previous is None
        assert app.last_result is None
        assert len(app.tracker_state.history) == 0


@pytest.mark.asyncio
async def test_app_quits_on_q():
    app = TrackerApp(_settings(), PORTFOLIO, fetcher=StaticFetcher())
    async with app.run_test() as pilot:
        await pilot.press("q")
    assert app.return_code == 0
