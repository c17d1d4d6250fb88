"""Price alert routes."""
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from watchlist_sync.deps import Actions
from watchlist_sync.routers.utils import envelope
from watchlist_sync.schemas import (ActionResult, AlertData, AlertRecord,
                                    AlertsView)

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=list[AlertRecord])
async def list_alerts(actions: Actions) -> list[AlertRecord]:
    """Caller's alerts, newest first."""
    return await actions.get_alerts()


@router.get("/status", response_model=AlertsView)
async def get_alerts_status(actions: Actions) -> AlertsView:
    """Like GET /alerts, plus whether the list is empty or the store was unreachable."""
    return await actions.get_alerts_status()


@router.post("", response_model=ActionResult)
async def create_alert(body: AlertData, actions: Actions) -> JSONResponse:
    """Create an alert. 422 on invalid input, 409 on a duplicate."""
    return envelope(await actions.create_alert(body))


@router.put("/{alert_id}", response_model=ActionResult)
async def update_alert(alert_id: str, body: AlertData, actions: Actions) -> JSONResponse:
    """Update an alert in place and refresh its price snapshot."""
    return envelope(await actions.update_alert(alert_id, body))


@router.delete("/{alert_id}", response_model=ActionResult)
async def delete_alert(alert_id: str, actions: Actions) -> JSONResponse:
    """Delete an alert. A repeat call returns 404."""
    return envelope(await actions.delete_alert(alert_id))
