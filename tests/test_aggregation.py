from __future__ import annotations

import asyncio

from tests.conftest import FakeProvider
from watchlist_sync.schemas import StockOverview, ViewStatus
from watchlist_sync.services import AggregationEngine
from watchlist_sync.stores import WatchlistStore


def _seed(store: WatchlistStore, *symbols: str, user_id: str = "u1") -> None:
    for symbol in symbols:
        asyncio.run(store.add(user_id, symbol, f"{symbol} Inc."))


def test_failed_lookup_only_blanks_that_symbol(
    watchlist_store: WatchlistStore, aggregation: AggregationEngine
) -> None:
    _seed(watchlist_store, "AAPL", "XYZ")

    rows = asyncio.run(aggregation.build_view("u1"))

    by_symbol = {row.symbol: row for row in rows}
    assert [row.symbol for row in rows] == ["XYZ", "AAPL"]
    aapl = by_symbol["AAPL"]
    assert aapl.user_id == "u1"
    assert aapl.current_price == 123.4
    assert aapl.price_formatted == "$123.40"
    assert aapl.change_formatted == "-2.35%"
    assert aapl.market_cap == "$2.50T"
    assert aapl.pe_ratio == "28.5"
    xyz = by_symbol["XYZ"]
    assert xyz.company == "XYZ Inc."
    assert xyz.current_price is None
    assert xyz.price_formatted is None
    assert xyz.change_formatted is None
    assert xyz.market_cap is None
    assert xyz.pe_ratio is None


def test_empty_watchlist_makes_no_provider_calls(
    aggregation: AggregationEngine, provider: FakeProvider
) -> None:
    view = asyncio.run(aggregation.load_view("u1"))
    assert view.status is ViewStatus.EMPTY
    assert view.items == []
    assert provider.calls == []


def test_store_failure_degrades_to_empty(broken_engine, provider: FakeProvider) -> None:
    engine = AggregationEngine(WatchlistStore(broken_engine), provider)
    assert asyncio.run(engine.build_view("u1")) == []
    assert asyncio.run(engine.load_view("u1")).status is ViewStatus.UNAVAILABLE
    assert provider.calls == []


def test_lookups_run_concurrently(watchlist_store: WatchlistStore) -> None:
    symbols = ["AAPL", "MSFT", "NVDA", "TSLA"]
    slow = FakeProvider(
        overviews={s: StockOverview(current_price=1.0) for s in symbols},
        delay=0.05,
    )
    _seed(watchlist_store, *symbols)
    engine = AggregationEngine(watchlist_store, slow)

    view = asyncio.run(engine.load_view("u1"))

    assert view.status is ViewStatus.OK
    assert len(view.items) == 4
    assert slow.peak == 4


def test_max_concurrency_caps_lookups_in_flight(watchlist_store: WatchlistStore) -> None:
    symbols = ["AAPL", "MSFT", "NVDA", "TSLA"]
    slow = FakeProvider(
        overviews={s: StockOverview(current_price=1.0) for s in symbols},
        delay=0.02,
    )
    _seed(watchlist_store, *symbols)
    engine = AggregationEngine(watchlist_store, slow, max_concurrency=2)

    asyncio.run(engine.build_view("u1"))

    assert slow.peak == 2
    assert sorted(slow.calls) == sorted(symbols)


def test_slow_lookup_times_out_to_missing_fields(watchlist_store: WatchlistStore) -> None:
    slow = FakeProvider(overviews={"AAPL": StockOverview(current_price=1.0)}, delay=0.5)
    _seed(watchlist_store, "AAPL")
    engine = AggregationEngine(watchlist_store, slow, lookup_timeout=0.05)

    rows = asyncio.run(engine.build_view("u1"))

    assert len(rows) == 1
    assert rows[0].current_price is None


def test_fetch_overviews_deduplicates_symbols(
    aggregation: AggregationEngine, provider: FakeProvider
) -> None:
    overviews = asyncio.run(aggregation.fetch_overviews(["aapl", "AAPL", " msft", ""]))
    assert sorted(provider.calls) == ["AAPL", "MSFT"]
    assert set(overviews) == {"AAPL", "MSFT"}


def test_view_is_scoped_to_user(
    watchlist_store: WatchlistStore, aggregation: AggregationEngine
) -> None:
    _seed(watchlist_store, "AAPL")
    _seed(watchlist_store, "MSFT", user_id="u2")
    rows = asyncio.run(aggregation.build_view("u2"))
    assert [row.symbol for row in rows] == ["MSFT"]
    assert rows[0].change_formatted == "+1.20%"


def test_absurd_provider_values_do_not_break_the_view(watchlist_store: WatchlistStore) -> None:
    garbage = FakeProvider(
        overviews={"AAPL": StockOverview(current_price=1e30, change_percent=1e30, pe_ratio=1e300)}
    )
    _seed(watchlist_store, "AAPL")
    engine = AggregationEngine(watchlist_store, garbage)

    (row,) = asyncio.run(engine.build_view("u1"))

    assert row.current_price == 1e30
    assert row.price_formatted is None
    assert row.change_formatted is None
    assert row.pe_ratio is None
