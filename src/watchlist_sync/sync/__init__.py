"""Client-side mirror of watchlist and alerts with optimistic updates."""
from watchlist_sync.sync.controller import (SyncController, WatchlistApi,
                                            alert_key, removal_key,
                                            watchlist_key)
from watchlist_sync.sync.state import EntityState, Mirror, RequestTracker

__all__ = [
    "EntityState",
    "Mirror",
    "RequestTracker",
    "SyncController",
    "WatchlistApi",
    "alert_key",
    "removal_key",
    "watchlist_key",
]
