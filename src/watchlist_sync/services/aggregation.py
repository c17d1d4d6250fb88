"""Aggregation engine: decorate a user's watchlist with live overviews.

One provider lookup per distinct symbol, all started together and joined with
asyncio.gather(return_exceptions=True), so the call costs as much as the
slowest lookup and a failed lookup only blanks that symbol's fields.
"""
import asyncio
import logging

from watchlist_sync.core import WatchlistSyncError, normalize_stock_symbol
from watchlist_sync.db import WatchlistEntry
from watchlist_sync.providers import MarketDataProviderABC
from watchlist_sync.schemas import (StockOverview, StockWithData, ViewStatus,
                                    WatchlistView)
from watchlist_sync.services.formatting import (format_change_percent,
                                                format_market_cap,
                                                format_pe_ratio, format_price)
from watchlist_sync.stores import WatchlistStore

logger = logging.getLogger(__name__)


def decorate(user_id: str, entry: WatchlistEntry, overview: StockOverview | None) -> StockWithData:
    """Join one entry with its overview (or None) into a display row."""
    o = overview or StockOverview()
    return StockWithData(
        user_id=user_id,
        symbol=normalize_stock_symbol(entry.symbol),
        company=entry.company,
        added_at=entry.added_at,
        current_price=o.current_price,
        change_percent=o.change_percent,
        price_formatted=format_price(o.current_price),
        change_formatted=format_change_percent(o.change_percent),
        market_cap=format_market_cap(o.market_cap_usd),
        pe_ratio=format_pe_ratio(o.pe_ratio),
    )


class AggregationEngine:
    """Joins WatchlistStore entries with concurrent provider lookups."""

    def __init__(
        self,
        store: WatchlistStore,
        provider: MarketDataProviderABC,
        *,
        lookup_timeout: float | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Source of watchlist entries (read only).
            provider: Market data provider used for per-symbol lookups.
            lookup_timeout: Seconds before a single lookup counts as failed.
            max_concurrency: Optional cap on lookups in flight at once.
        """
        self._store = store
        self._provider = provider
        self._timeout = lookup_timeout
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _lookup(self, symbol: str) -> StockOverview:
        if self._semaphore is None:
            return await self._provider.fetch_overview(symbol, self._timeout)
        async with self._semaphore:
            return await self._provider.fetch_overview(symbol, self._timeout)

    async def fetch_overviews(self, symbols: list[str]) -> dict[str, StockOverview | None]:
        """Look up each distinct symbol concurrently; failures map to None."""
        distinct = list(dict.fromkeys(normalize_stock_symbol(s) for s in symbols if s))
        if not distinct:
            return {}
        results = await asyncio.gather(
            *(self._lookup(s) for s in distinct),
            return_exceptions=True,
        )
        overviews: dict[str, StockOverview | None] = {}
        for symbol, result in zip(distinct, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.warning("Overview lookup failed for %s: %r", symbol, result.__cause__ or result)
                overviews[symbol] = None
                continue
            overviews[symbol] = result
        return overviews

    async def load_view(self, user_id: str) -> WatchlistView:
        """Decorated watchlist with a status that tells "empty" from "unavailable"."""
        try:
            entries = await self._store.list_for_user(user_id)
        except WatchlistSyncError as e:
            logger.error("Watchlist view: store lookup failed for %s: %s", user_id, e)
            return WatchlistView(status=ViewStatus.UNAVAILABLE)
        if not entries:
            return WatchlistView(status=ViewStatus.EMPTY)

        overviews = await self.fetch_overviews([e.symbol for e in entries])
        items = [
            decorate(user_id, entry, overviews.get(normalize_stock_symbol(entry.symbol)))
            for entry in entries
        ]
        return WatchlistView(status=ViewStatus.OK, items=items)

    async def build_view(self, user_id: str) -> list[StockWithData]:
        """Decorated watchlist; [] when empty or when the store is unreachable."""
        return (await self.load_view(user_id)).items
