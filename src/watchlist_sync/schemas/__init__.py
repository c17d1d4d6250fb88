"""Pydantic schemas for API and runtime use. Not persisted to DB."""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from watchlist_sync.db import Alert


class Identity(BaseModel):
    """Resolved caller identity. user_id is opaque to the core."""

    user_id: str
    email: str | None = None


class StockOverview(BaseModel):
    """Best-effort snapshot for one symbol; any field may be missing."""

    current_price: float | None = None
    change_percent: float | None = None
    market_cap_usd: float | None = None  # plain USD, not millions
    pe_ratio: float | None = None


class StockWithData(BaseModel):
    """Watchlist entry decorated with a live overview and display strings."""

    user_id: str
    symbol: str
    company: str
    added_at: datetime
    current_price: float | None = None
    change_percent: float | None = None
    price_formatted: str | None = None
    change_formatted: str | None = None
    market_cap: str | None = None
    pe_ratio: str | None = None


class ViewStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    UNAVAILABLE = "unavailable"
    UNAUTHENTICATED = "unauthenticated"


class WatchlistView(BaseModel):
    """Aggregated view plus whether the store could be read at all."""

    status: ViewStatus
    items: list[StockWithData] = Field(default_factory=list)


class WatchlistAddRequest(BaseModel):
    symbol: str
    company: str


class AlertData(BaseModel):
    """Alert form input. Validated by AlertManager, not here, so malformed
    input comes back as a result envelope instead of a 422 from the framework."""

    symbol: str = ""
    company: str = ""
    alert_name: str = ""
    alert_type: str = ""
    threshold: str | float | None = None


class AlertRecord(BaseModel):
    """Alert as returned to callers (user_id omitted)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    symbol: str
    company: str
    alert_name: str
    alert_type: str
    threshold: float
    current_price: float | None = None
    change_percent: float | None = None
    created_at: datetime

    @classmethod
    def from_row(cls, row: Alert) -> "AlertRecord":
        return cls.model_validate(row)


class AlertsView(BaseModel):
    """Alert list plus whether the store could be read at all."""

    status: ViewStatus
    items: list[AlertRecord] = Field(default_factory=list)


class ActionResult(BaseModel):
    """Uniform envelope for mutating operations."""

    success: bool
    message: str
    alert: AlertRecord | None = None
    status_code: int = Field(default=200, exclude=True)  # HTTP status for routers


__all__ = [
    "ActionResult",
    "AlertData",
    "AlertRecord",
    "AlertsView",
    "Identity",
    "StockOverview",
    "StockWithData",
    "ViewStatus",
    "WatchlistAddRequest",
    "WatchlistView",
]
