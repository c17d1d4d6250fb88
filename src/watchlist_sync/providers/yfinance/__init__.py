"""Yahoo Finance provider."""
from watchlist_sync.providers.yfinance.y_finance_provider import YFinanceProvider

__all__ = ["YFinanceProvider"]
