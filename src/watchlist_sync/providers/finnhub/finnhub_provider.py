"""Finnhub overview provider for stocks."""
import asyncio
import logging
import os

import httpx

from watchlist_sync.core import normalize_stock_symbol, round2
from watchlist_sync.providers.finnhub.models import (FinnhubMetricParams,
                                                     FinnhubMetrics,
                                                     FinnhubQuote)
from watchlist_sync.providers.market_data_provider_abc import \
    MarketDataProviderABC
from watchlist_sync.schemas import StockOverview

logger = logging.getLogger(__name__)


class FinnhubProvider(MarketDataProviderABC):
    """Overview provider via the Finnhub REST API.

    Price and change come from /quote (required); market cap and P/E come from
    /stock/metric (best-effort: a failure there leaves those fields None).
    Both requests for a symbol are issued concurrently.
    """

    BASE_URL = "https://finnhub.io/api/v1"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Finnhub provider.

        Args:
            api_key: Finnhub API key. Defaults to FINNHUB_API_KEY env var.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._api_key = api_key or os.getenv("FINNHUB_API_KEY")
        if not self._api_key:
            raise ValueError("FINNHUB_API_KEY is required for FinnhubProvider")
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Accept": "application/json", "X-Finnhub-Token": self._api_key},
            timeout=timeout,
            transport=transport,
        )

    async def _get_quote(self, symbol: str) -> FinnhubQuote:
        response = await self._client.get("/quote", params={"symbol": symbol})
        response.raise_for_status()
        quote = FinnhubQuote.model_validate(response.json() or {})
        if not quote.current:
            raise ValueError(f"Stock '{symbol}' not found")
        return quote

    async def _get_metrics(self, symbol: str) -> FinnhubMetrics:
        params = FinnhubMetricParams().model_dump() | {"symbol": symbol}
        response = await self._client.get("/stock/metric", params=params)
        response.raise_for_status()
        return FinnhubMetrics.model_validate((response.json() or {}).get("metric") or {})

    async def get_overview(self, symbol: str) -> StockOverview:
        """Fetch quote and metrics for a symbol; metrics failure is non-fatal."""
        sym = normalize_stock_symbol(symbol)
        quote, metrics = await asyncio.gather(
            self._get_quote(sym),
            self._get_metrics(sym),
            return_exceptions=True,
        )
        if isinstance(quote, BaseException):
            raise quote
        if isinstance(metrics, BaseException):
            logger.warning("Finnhub metrics failed for %s: %s", sym, metrics)
            metrics = FinnhubMetrics()
        cap = metrics.market_capitalization
        return StockOverview(
            current_price=round2(quote.current),
            change_percent=quote.change_percent,
            market_cap_usd=cap * 1_000_000 if cap is not None else None,
            pe_ratio=metrics.pe_ratio,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
