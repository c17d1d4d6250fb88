"""FastAPI dependency injection: app.state holds singletons; Depends() resolves them.

Lifespan (main.py) resolves stores and services from the container once and
attaches them to app.state. The actions facade is per request because it is
bound to the caller's session.
"""
from typing import Annotated

from fastapi import Depends, Request

from watchlist_sync.services import WatchlistActions
from watchlist_sync.session import HeaderSessionContext


def get_actions(request: Request) -> WatchlistActions:
    """Session-bound WatchlistActions for this request."""
    state = request.app.state
    return WatchlistActions(
        HeaderSessionContext(request),
        state.watchlist_store,
        state.aggregation_engine,
        state.alert_manager,
        orphan_policy=state.orphan_policy,
    )


# Type alias for route injection
Actions = Annotated[WatchlistActions, Depends(get_actions)]
