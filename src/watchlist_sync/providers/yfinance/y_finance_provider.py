"""Yahoo Finance overview provider for stocks."""
import asyncio
from typing import Any

import yfinance as yf

from watchlist_sync.core import as_number, normalize_stock_symbol, round2
from watchlist_sync.providers.market_data_provider_abc import \
    MarketDataProviderABC
from watchlist_sync.schemas import StockOverview


class YFinanceProvider(MarketDataProviderABC):
    """Overview provider for stocks via Yahoo Finance.

    No API key required. yfinance is blocking, so each lookup runs in a worker
    thread; concurrent get_overview calls therefore overlap.
    """

    def _price_fields(self, ticker: yf.Ticker) -> tuple[float | None, float | None, float | None]:
        """(last price, previous close, market cap) from fast_info when available."""
        info = getattr(ticker, "fast_info", None)
        if not info:
            return None, None, None
        price = as_number(info.get("lastPrice") or info.get("regularMarketPrice"))
        prev = as_number(info.get("previousClose") or info.get("regularMarketPreviousClose"))
        cap = as_number(info.get("marketCap"))
        return price, prev, cap

    @staticmethod
    def _change_percent(full: dict[str, Any], price: float | None, prev: float | None) -> float | None:
        change = as_number(full.get("regularMarketChangePercent"))
        if change is not None:
            return change
        if price is not None and prev:
            return (price - prev) / prev * 100
        return None

    def _fetch_overview_sync(self, symbol: str) -> StockOverview:
        """Fetch a single overview synchronously (run in thread)."""
        ticker = yf.Ticker(symbol)
        try:
            price, prev, cap = self._price_fields(ticker)
            full = ticker.info or {}
            if price is None:
                price = as_number(full.get("currentPrice") or full.get("regularMarketPrice"))
            if price is None:
                raise ValueError(f"Stock '{symbol}' not found or has no price data")
            if prev is None:
                prev = as_number(full.get("previousClose"))
            if cap is None:
                cap = as_number(full.get("marketCap"))
            return StockOverview(
                current_price=round2(price),
                change_percent=self._change_percent(full, price, prev),
                market_cap_usd=cap,
                pe_ratio=as_number(full.get("trailingPE")),
            )
        except ValueError:
            raise
        except Exception as e:
            raise ValueError(f"Failed to fetch overview for '{symbol}': {e}") from e

    async def get_overview(self, symbol: str) -> StockOverview:
        """Fetch the current overview for a stock symbol."""
        sym = normalize_stock_symbol(symbol)
        return await asyncio.to_thread(self._fetch_overview_sync, sym)
