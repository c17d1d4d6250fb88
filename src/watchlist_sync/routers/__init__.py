"""API routers.

Includes routes for:
- /watchlist - decorated watchlist, membership, add/remove
- /alerts - price alert CRUD

Identity comes from the X-User-Id / X-User-Email headers set by the gateway.
"""
from watchlist_sync.routers.alerts import router as alerts_router
from watchlist_sync.routers.watchlist import router as watchlist_router

__all__ = [
    "alerts_router",
    "watchlist_router",
]
