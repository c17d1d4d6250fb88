from __future__ import annotations

import asyncio

import httpx
import pytest

from tests.conftest import FakeProvider
from watchlist_sync.core import UpstreamUnavailable
from watchlist_sync.providers import (FinnhubProvider, YFinanceProvider,
                                      create_provider)
from watchlist_sync.providers.yfinance import y_finance_provider
from watchlist_sync.schemas import StockOverview


def _finnhub(handler) -> FinnhubProvider:
    return FinnhubProvider(api_key="test-key", transport=httpx.MockTransport(handler))


def _overview(provider: FinnhubProvider, symbol: str):
    async def scenario():
        async with provider:
            return await provider.get_overview(symbol)

    return asyncio.run(scenario())


def test_finnhub_overview_combines_quote_and_metrics() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, request.url.params.get("symbol"), request.headers.get("X-Finnhub-Token")))
        if request.url.path.endswith("/quote"):
            return httpx.Response(200, json={"c": 123.456, "d": -3.0, "dp": -2.345, "pc": 126.4})
        return httpx.Response(200, json={"metric": {"marketCapitalization": 2500000.0, "peTTM": 28.456}})

    overview = _overview(_finnhub(handler), "aapl")

    assert overview.current_price == 123.46
    assert overview.change_percent == -2.345
    assert overview.market_cap_usd == 2.5e12
    assert overview.pe_ratio == 28.456
    assert {s[1] for s in seen} == {"AAPL"}
    assert {s[2] for s in seen} == {"test-key"}


def test_finnhub_metrics_failure_is_not_fatal() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/quote"):
            return httpx.Response(200, json={"c": 10.0, "dp": 0.5})
        return httpx.Response(500, json={"error": "boom"})

    overview = _overview(_finnhub(handler), "MSFT")

    assert overview.current_price == 10.0
    assert overview.market_cap_usd is None
    assert overview.pe_ratio is None


def test_finnhub_unknown_symbol_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/quote"):
            return httpx.Response(200, json={"c": 0, "d": None, "dp": None, "pc": 0})
        return httpx.Response(200, json={"metric": {}})

    with pytest.raises(ValueError):
        _overview(_finnhub(handler), "NOPE")


def test_finnhub_quote_http_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": "rate limited"})

    with pytest.raises(httpx.HTTPStatusError):
        _overview(_finnhub(handler), "AAPL")


def test_finnhub_requires_api_key(monkeypatch) -> None:
    monkeypatch.delenv("FINNHUB_API_KEY", raising=False)
    with pytest.raises(ValueError):
        FinnhubProvider()


def test_create_provider() -> None:
    assert isinstance(create_provider("yfinance"), YFinanceProvider)
    finnhub = create_provider("finnhub", api_key="k")
    assert isinstance(finnhub, FinnhubProvider)
    asyncio.run(finnhub.close())
    with pytest.raises(ValueError):
        create_provider("bloomberg")


class _FakeTicker:
    def __init__(self, fast: dict, info: dict) -> None:
        self.fast_info = fast
        self.info = info


def test_yfinance_overview_from_ticker(monkeypatch) -> None:
    ticker = _FakeTicker(
        fast={"lastPrice": 123.456, "previousClose": 120.0, "marketCap": 2.5e12},
        info={"trailingPE": 28.4},
    )
    monkeypatch.setattr(y_finance_provider.yf, "Ticker", lambda symbol: ticker)

    overview = asyncio.run(YFinanceProvider().get_overview("aapl"))

    assert overview.current_price == 123.46
    assert overview.change_percent == pytest.approx(2.88)
    assert overview.market_cap_usd == 2.5e12
    assert overview.pe_ratio == 28.4


def test_yfinance_without_price_raises(monkeypatch) -> None:
    ticker = _FakeTicker(fast={}, info={})
    monkeypatch.setattr(y_finance_provider.yf, "Ticker", lambda symbol: ticker)

    with pytest.raises(ValueError):
        asyncio.run(YFinanceProvider().get_overview("NOPE"))


def test_fetch_overview_wraps_failures_and_timeouts() -> None:
    failing = FakeProvider(failures={"XYZ"})
    with pytest.raises(UpstreamUnavailable) as exc_info:
        asyncio.run(failing.fetch_overview("XYZ"))
    assert exc_info.value.symbol == "XYZ"
    assert isinstance(exc_info.value.__cause__, ValueError)

    slow = FakeProvider(overviews={"AAPL": StockOverview(current_price=1.0)}, delay=0.5)
    with pytest.raises(UpstreamUnavailable):
        asyncio.run(slow.fetch_overview("AAPL", timeout=0.01))
