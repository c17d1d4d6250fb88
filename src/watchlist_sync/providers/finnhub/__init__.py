"""Finnhub provider."""
from watchlist_sync.providers.finnhub.finnhub_provider import FinnhubProvider

__all__ = ["FinnhubProvider"]
