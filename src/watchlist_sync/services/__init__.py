"""Service layer: aggregation, alert management and the session-bound actions facade."""
from watchlist_sync.services.actions import (OrphanAlertPolicy,
                                             WatchlistActions)
from watchlist_sync.services.aggregation import AggregationEngine
from watchlist_sync.services.alert_manager import AlertManager

__all__ = [
    "AggregationEngine",
    "AlertManager",
    "OrphanAlertPolicy",
    "WatchlistActions",
]
