"""Persistence layer: watchlist and alert stores over SQLModel."""
from watchlist_sync.stores.alert_store import AlertFields, AlertStore
from watchlist_sync.stores.watchlist_store import WatchlistStore

__all__ = ["AlertFields", "AlertStore", "WatchlistStore"]
