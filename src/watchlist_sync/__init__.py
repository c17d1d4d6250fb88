"""Watchlist and price-alert synchronization service."""

__version__ = "0.1.0"
