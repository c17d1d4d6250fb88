from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine

from watchlist_sync.db.sessions import create_db_engine, init_db
from watchlist_sync.providers import MarketDataProviderABC
from watchlist_sync.schemas import StockOverview
from watchlist_sync.services import (AggregationEngine, AlertManager,
                                     OrphanAlertPolicy, WatchlistActions)
from watchlist_sync.session import StaticSessionContext
from watchlist_sync.stores import AlertStore, WatchlistStore


class FakeProvider(MarketDataProviderABC):
    """Canned overviews per symbol; anything unknown or listed in failures raises."""

    def __init__(
        self,
        overviews: dict[str, StockOverview] | None = None,
        failures: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.overviews = dict(overviews or {})
        self.failures = set(failures or ())
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.peak = 0
        self.closed = False

    async def get_overview(self, symbol: str) -> StockOverview:
        self.calls.append(symbol)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if symbol in self.failures or symbol not in self.overviews:
                raise ValueError(f"Stock '{symbol}' not found")
            return self.overviews[symbol]
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True


def _sqlite_url(path: Path) -> str:
    return f"sqlite:///{path}"


@pytest.fixture
def engine(tmp_path: Path) -> Engine:
    db_engine = create_db_engine(_sqlite_url(tmp_path / "watchlist.db"), echo=False)
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def broken_engine(tmp_path: Path) -> Engine:
    """Engine over a database with no tables: every query fails."""
    db_engine = create_db_engine(_sqlite_url(tmp_path / "empty.db"), echo=False)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(
        overviews={
            "AAPL": StockOverview(
                current_price=123.4,
                change_percent=-2.345,
                market_cap_usd=2.5e12,
                pe_ratio=28.456,
            ),
            "MSFT": StockOverview(current_price=410.0, change_percent=1.2),
        },
        failures={"XYZ"},
    )


@pytest.fixture
def watchlist_store(engine: Engine) -> WatchlistStore:
    return WatchlistStore(engine)


@pytest.fixture
def alert_store(engine: Engine) -> AlertStore:
    return AlertStore(engine)


@pytest.fixture
def aggregation(watchlist_store: WatchlistStore, provider: FakeProvider) -> AggregationEngine:
    return AggregationEngine(watchlist_store, provider, lookup_timeout=1.0)


@pytest.fixture
def alert_manager(alert_store: AlertStore, provider: FakeProvider) -> AlertManager:
    return AlertManager(alert_store, provider, snapshot_timeout=1.0)


@pytest.fixture
def make_actions(watchlist_store, aggregation, alert_manager):
    """Build a WatchlistActions for a fixed identity (user_id None = anonymous)."""

    def _make(
        user_id: str | None = "u1",
        email: str | None = None,
        orphan_policy: OrphanAlertPolicy = OrphanAlertPolicy.KEEP,
    ) -> WatchlistActions:
        return WatchlistActions(
            StaticSessionContext(user_id, email),
            watchlist_store,
            aggregation,
            alert_manager,
            orphan_policy=orphan_policy,
        )

    return _make
