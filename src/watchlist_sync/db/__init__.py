"""Database package: models and session management."""
from watchlist_sync.db.models import Alert, AlertType, User, WatchlistEntry

__all__ = ["Alert", "AlertType", "User", "WatchlistEntry"]
