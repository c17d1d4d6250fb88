"""Watchlist routes: decorated view, membership, add and remove."""
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from watchlist_sync.deps import Actions
from watchlist_sync.routers.utils import envelope
from watchlist_sync.schemas import (ActionResult, StockWithData,
                                    WatchlistAddRequest, WatchlistView)

router = APIRouter(prefix="/watchlist", tags=["watchlist"])


@router.get("", response_model=list[StockWithData])
async def get_watchlist(actions: Actions) -> list[StockWithData]:
    """Get the caller's watchlist decorated with current pricing.

    Symbols whose lookup failed are returned with pricing fields null.
    Unauthenticated callers get an empty list.
    """
    return await actions.get_watchlist_view()


@router.get("/status", response_model=WatchlistView)
async def get_watchlist_status(actions: Actions) -> WatchlistView:
    """Like GET /watchlist, plus whether the list is empty or the store was unreachable."""
    return await actions.get_watchlist_status()


@router.get("/{symbol}/membership")
async def get_membership(symbol: str, actions: Actions) -> dict[str, object]:
    """Whether the caller tracks symbol."""
    return {"symbol": symbol.strip().upper(), "in_watchlist": await actions.is_in_watchlist(symbol)}


@router.post("", response_model=ActionResult)
async def add_to_watchlist(body: WatchlistAddRequest, actions: Actions) -> JSONResponse:
    """Track a symbol. 409 if already tracked."""
    return envelope(await actions.add_to_watchlist(body.symbol, body.company))


@router.delete("/{symbol}", response_model=ActionResult)
async def remove_from_watchlist(symbol: str, actions: Actions) -> JSONResponse:
    """Stop tracking a symbol. 404 if it was not tracked."""
    return envelope(await actions.remove_from_watchlist(symbol))
