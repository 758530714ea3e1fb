"""Spot price lookups against the CoinMarketCap quotes endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

import aiohttp
from pydantic import BaseModel, Field, ValidationError

from valuation.errors import QuoteFetchError

logger = logging.getLogger(__name__)

REFERENCE_SYMBOL = "BTC"
DEFAULT_BASE_URL = "https://pro-api.coinmarketcap.com"
QUOTES_PATH = "/v1/cryptocurrency/quotes/latest"


class ConvertedPrice(BaseModel):
    price: Optional[float] = None


class CoinQuote(BaseModel):
    symbol: Optional[str] = None
    quote: Dict[str, ConvertedPrice] = Field(default_factory=dict)


class ApiStatus(BaseModel):
    error_code: int = 0
    error_message: Optional[str] = None


class QuotesResponse(BaseModel):
    """Subset of the ``quotes/latest`` payload the tracker reads."""

    status: ApiStatus = Field(default_factory=ApiStatus)
    data: Dict[str, CoinQuote] = Field(default_factory=dict)


def with_reference(symbols: Iterable[str]) -> List[str]:
    """Return ``symbols`` with the reference asset first if it is missing."""
    symbols = list(symbols)
    if REFERENCE_SYMBOL in symbols:
        return symbols
    return [REFERENCE_SYMBOL, *symbols]


class QuoteFetcher:
    """Fetch USD unit prices for a set of symbols in a single request."""

    def __init__(
        self,
        api_key: str,
        session: aiohttp.ClientSession,
        base_url: str = DEFAULT_BASE_URL,
        convert: str = "USD",
    ) -> None:
        self.api_key = api_key
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.convert = convert

    async def fetch(self, symbols: Iterable[str]) -> Dict[str, float]:
        """Return ``{symbol: price}`` for ``symbols`` plus the reference asset.

        Raises :class:`QuoteFetchError` on network failure or an API error
        response. Symbols the API does not price are left out of the result.
        """
        requested = with_reference(symbols)
        url = f"{self.base_url}{QUOTES_PATH}"
        params = {"symbol": ",".join(requested), "convert": self.convert}
        headers = {"X-CMC_PRO_API_KEY": self.api_key, "Accept": "application/json"}

        try:
            async with self.session.get(url, params=params, headers=headers) as resp:
                status = resp.status
                body = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            logger.error("Quote request for %s failed - %s", params["symbol"], exc)
            raise QuoteFetchError(f"quote request failed: {exc}") from exc

        try:
            payload = QuotesResponse.model_validate(body)
        except ValidationError as exc:
            raise QuoteFetchError(f"unexpected quote payload: {exc}") from exc

        if status != 200 or payload.status.error_code:
            message = payload.status.error_message or f"HTTP {status}"
            raise QuoteFetchError(f"quote API error: {message}")

        quotes: Dict[str, float] = {}
        for symbol in requested:
            coin = payload.data.get(symbol)
            converted = coin.quote.get(self.convert) if coin else None
            if converted is None or converted.price is None:
                logger.warning("No %s price returned for %s", self.convert, symbol)
                continue
            quotes[symbol] = converted.price
        logger.debug("Fetched %d quotes", len(quotes))
        return quotes
