"""Helpers shared by routers."""
from fastapi.responses import JSONResponse

from watchlist_sync.schemas import ActionResult


def envelope(result: ActionResult) -> JSONResponse:
    """Send an ActionResult as the body with its mapped HTTP status."""
    return JSONResponse(status_code=result.status_code, content=result.model_dump(mode="json"))
