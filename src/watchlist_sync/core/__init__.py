"""Core abstractions: exceptions, error mapping, symbol helpers."""
from watchlist_sync.core.error_mapper import ErrorMapper
from watchlist_sync.core.exceptions import (Conflict, NotFound,
                                            PersistenceError, Unauthenticated,
                                            UpstreamUnavailable,
                                            ValidationError,
                                            WatchlistSyncError)
from watchlist_sync.core.utils import as_number, normalize_stock_symbol, round2

__all__ = [
    "Conflict",
    "ErrorMapper",
    "NotFound",
    "PersistenceError",
    "Unauthenticated",
    "UpstreamUnavailable",
    "ValidationError",
    "WatchlistSyncError",
    "as_number",
    "normalize_stock_symbol",
    "round2",
]
