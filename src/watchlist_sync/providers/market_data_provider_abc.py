"""Abstract base class for market data providers."""
import asyncio
from abc import ABC, abstractmethod

from watchlist_sync.core import UpstreamUnavailable
from watchlist_sync.schemas import StockOverview


class MarketDataProviderABC(ABC):
    """Base interface for per-symbol overview lookups.

    Lookups are independent: a failure for one symbol says nothing about
    another, and callers fan out one call per symbol. Implementations raise
    on failure (ValueError for unknown symbols, httpx/OS errors for transport
    problems); callers decide whether that degrades a field or fails a request.
    """

    @abstractmethod
    async def get_overview(self, symbol: str) -> StockOverview:
        """Fetch price, percent change, market cap and P/E for a symbol.

        Args:
            symbol: Canonical (uppercase) ticker, e.g. "AAPL".

        Returns:
            A StockOverview; fields the source does not report are None.
        """

    async def fetch_overview(self, symbol: str, timeout: float | None = None) -> StockOverview:
        """get_overview bounded by timeout; any failure becomes UpstreamUnavailable."""
        try:
            if timeout is None:
                return await self.get_overview(symbol)
            return await asyncio.wait_for(self.get_overview(symbol), timeout)
        except Exception as e:  # pylint: disable=broad-except
            raise UpstreamUnavailable(f"Market data unavailable for {symbol}", symbol=symbol) from e

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "MarketDataProviderABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
