"""Market data providers for watchlist decoration and alert snapshots.

- YFinanceProvider: Yahoo Finance via the yfinance library (no API key)
- FinnhubProvider: Finnhub REST API via httpx (FINNHUB_API_KEY)

Both implement MarketDataProviderABC.get_overview(symbol).

Example:
    async with YFinanceProvider() as provider:
        overview = await provider.get_overview("AAPL")
        print(f"AAPL: ${overview.current_price}")
"""
from watchlist_sync.providers.finnhub import FinnhubProvider
from watchlist_sync.providers.market_data_provider_abc import \
    MarketDataProviderABC
from watchlist_sync.providers.yfinance import YFinanceProvider


def create_provider(name: str, *, api_key: str | None = None) -> MarketDataProviderABC:
    """Build the provider selected by MARKET_DATA_PROVIDER ("yfinance" | "finnhub")."""
    if name == "finnhub":
        return FinnhubProvider(api_key=api_key)
    if name == "yfinance":
        return YFinanceProvider()
    raise ValueError(f"Unknown market data provider: {name}")


__all__ = [
    "FinnhubProvider",
    "MarketDataProviderABC",
    "YFinanceProvider",
    "create_provider",
]
