import json

import pytest

from valuation import PortfolioError, load_portfolio, parse_portfolio
from valuation.holdings import portfolio_symbols


def test_load_portfolio(tmp_path):
    path = tmp_path / "portfolio.json"
    path.write_text(json.dumps({"eth": 10, "BTC": 0.5}))
    portfolio = load_portfolio(path)
    assert dict(portfolio) == {"ETH": 10.0, "BTC": 0.5}
    assert portfolio_symbols(portfolio) == ["ETH", "BTC"]


def test_portfolio_is_read_only():
    portfolio = parse_portfolio({"BTC": 1})
    with pytest.raises(TypeError):
        portfolio["BTC"] = 2


def test_missing_file(tmp_path):
    with pytest.raises(PortfolioError, match="not found"):
        load_portfolio(tmp_path / "nope.json")


def test_malformed_json(tmp_path):
    path = tmp_path / "portfolio.json"
    path.write_text("{not json")
    with pytest.raises(PortfolioError):
        load_portfolio(path)


@pytest.mark.parametrize(
    "raw",
    [
        [],
        {},
        {"BTC": "1"},
        {"BTC": True},
        {"BTC": -1},
        {"BTC": float("nan")},
        {"": 1},
        {"btc": 1, "BTC": 2},
    ],
)
def test_invalid_portfolios(raw):
    with pytest.raises(PortfolioError):
        parse_portfolio(raw)
