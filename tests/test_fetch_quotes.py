import asyncio
import json

import aiohttp
import pytest

from valuation import QuoteFetchError, QuoteFetcher


def _payload(prices, error_code=0, error_message=None):
    return {
        "status": {"error_code": error_code, "error_message": error_message},
        "data": {
            sym: {"symbol": sym, "quote": {"USD": {"price": price}}}
            for sym, price in prices.items()
        },
    }


class DummyResponse:
    def __init__(self, status, body=None, exc=None):
        self.status = status
        self.body = body
        self.exc = exc

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type="application/json"):
        if self.exc is not None:
            raise self.exc
        return self.body


class DummySession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, headers=None):
        self.calls.append({"url": url, "params": params, "headers": headers})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.mark.asyncio
async def test_fetch_includes_reference_symbol():
    session = DummySession(DummyResponse(200, _payload({"BTC": 60000, "ETH": 3000})))
    fetcher = QuoteFetcher("secret", session, base_url="https://example.test/")
    quotes = await fetcher.fetch(["ETH"])
    assert quotes == {"BTC": 60000, "ETH": 3000}
    call = session.calls[0]
    assert call["url"] == "https://example.test/v1/cryptocurrency/quotes/latest"
    assert call["params"]["symbol"] == "BTC,ETH"
    assert call["params"]["convert"] == "USD"
    assert call["headers"]["X-CMC_PRO_API_KEY"] == "secret"


@pytest.mark.asyncio
async def test_fetch_does_not_duplicate_btc():
    session = DummySession(DummyResponse(200, _payload({"ETH": 3000, "BTC": 60000})))
    await QuoteFetcher("k", session).fetch(["ETH", "BTC"])
    assert session.calls[0]["params"]["symbol"] == "ETH,BTC"


@pytest.mark.asyncio
async def test_fetch_skips_unpriced_symbols():
    body = _payload({"BTC": 60000, "DOGE": None})
    session = DummySession(DummyResponse(200, body))
    quotes = await QuoteFetcher("k", session).fetch(["DOGE", "NOPE"])
    assert quotes == {"BTC": 60000}


@pytest.mark.asyncio
async def test_fetch_api_error_status():
    body = {"status": {"error_code": 1001, "error_message": "This API Key is invalid."}}
    session = DummySession(DummyResponse(401, body))
    with pytest.raises(QuoteFetchError, match="API Key is invalid"):
        await QuoteFetcher("bad", session).fetch(["ETH"])


@pytest.mark.asyncio
async def test_fetch_http_error_without_message():
    session = DummySession(DummyResponse(503, {}))
    with pytest.raises(QuoteFetchError, match="HTTP 503"):
        await QuoteFetcher("k", session).fetch(["ETH"])


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()],
)
async def test_fetch_network_error(error):
    session = DummySession(error=error)
    with pytest.raises(QuoteFetchError):
        await QuoteFetcher("k", session).fetch(["ETH"])


@pytest.mark.asyncio
async def test_fetch_invalid_json():
    bad = json.JSONDecodeError("Expecting value", "<html>", 0)
    session = DummySession(DummyResponse(502, exc=bad))
    with pytest.raises(QuoteFetchError):
        await QuoteFetcher("k", session).fetch(["ETH"])


@pytest.mark.asyncio
async def test_fetch_unexpected_payload_shape():
    session = DummySession(DummyResponse(200, {"data": []}))
    with pytest.raises(QuoteFetchError, match="unexpected"):
        await QuoteFetcher("k", session).fetch(["ETH"])
