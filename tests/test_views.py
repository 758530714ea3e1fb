import pytest

from dashboard.views import (
    ViewMode,
    bar_cells,
    chart_view,
    format_distance,
    format_money,
    format_quantity,
    header_view,
    main_view,
    settings_view,
)
from valuation import HistoryBuffer, HistoryPoint, QuoteFetchError, TrackerState, evaluate
from valuation.holdings import parse_portfolio

PORTFOLIO = parse_portfolio({"BTC": 0.5, "ETH": 10})


@pytest.mark.parametrize(
    "value,expected",
    [(1234.5, "$1,234.50"), (0, "$0.00"), (-1, "-$1.00"), (1e6, "$1,000,000.00")],
)
def test_format_money(value, expected):
    assert format_money(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [(10.0, "10"), (0.5, "0.5"), (0.00000001, "0.00000001"), (0, "0"), (1.23456789, "1.23456789")],
)
def test_format_quantity(value, expected):
    assert format_quantity(value) == expected


def test_bar_cells():
    assert bar_cells(30000, 60000, 30000) == (50, 1)
    assert bar_cells(30000, 60000, 15000) == (25, 26)
    assert bar_cells(0, 0, 0) == (0, 0)


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (3, "in less than 5 seconds"),
        (30, "in half a minute"),
        (55, "in less than a minute"),
        (300, "in 5 minutes"),
        (4000, "in about 1 hour"),
        (-120, "2 minutes ago"),
    ],
)
def test_format_distance(seconds, expected):
    assert format_distance(seconds) == expected


def _cycles():
    state = TrackerState()
    first = evaluate(PORTFOLIO, {"BTC": 60000, "ETH": 3000}, state, now=1000.0)
    state.commit(first.snapshot)
    second = evaluate(PORTFOLIO, {"BTC": 60000, "ETH": 3300}, state, now=1300.0)
    state.commit(second.snapshot)
    return state, first, second


def test_main_view_first_cycle():
    _, first, _ = _cycles()
    plain = main_view(first, PORTFOLIO).plain
    lines = plain.splitlines()
    assert lines[2].lstrip().startswith("BTC")
    assert "$30,000.00" in lines[2]
    assert "$60,000.00" in lines[2]
    assert "·0.5" in lines[2]
    assert "TOTAL $60,000.00 USD - 1 BTC" in plain


def test_main_view_changes_are_tiered():
    _, _, second = _cycles()
    text = main_view(second, PORTFOLIO)
    plain = text.plain
    assert plain.splitlines()[2].lstrip().startswith("ETH")
    assert "+10.0%" in plain
    assert "TOTAL $63,000.00 USD +5.0% - 1.05 BTC +5.0%" in plain
    assert any(str(span.style) == "black on green" for span in text.spans)


def test_settings_view():
    plain = settings_view(PORTFOLIO).plain
    assert plain == "\n\n  BTC 0.5\n  ETH 10"


def test_header_view_countdown_and_status():
    state, _, _ = _cycles()
    header = header_view("Portfolio tracker", ViewMode.MAIN, state, 5, 1300.0, 100)
    assert "next refresh in 5 minutes" in header.plain
    assert "settings" in header.plain
    assert header.cell_len == 100

    state.record_failure(QuoteFetchError("down"))
    header = header_view("Portfolio tracker", ViewMode.SETTINGS, state, 5, 1300.0, 100)
    assert "next refresh" not in header.plain
    assert "stale, retrying (1 failed)" in header.plain
    assert "summary" in header.plain


def test_header_view_before_first_refresh():
    header = header_view("Portfolio tracker", ViewMode.MAIN, TrackerState(), 5, 0.0, 60)
    assert "next refresh" not in header.plain
    assert header.plain.startswith(" Portfolio tracker")


def test_chart_view():
    history = HistoryBuffer()
    assert chart_view(history, 80) is None
    history.append(HistoryPoint(0, 100.0, 0.01))
    history.append(HistoryPoint(1, 110.0, 0.011))
    chart = chart_view(history, 80, color=False)
    assert chart.splitlines()[0].startswith("H $110.00")
    assert "━ USD" in chart
