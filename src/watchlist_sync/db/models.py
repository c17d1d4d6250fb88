"""Database models for the watchlist service.

Only user state is persisted: tracked symbols and price alerts. Quotes are
fetched on demand from the market data provider and never stored, apart from
the informational price snapshot taken when an alert is saved.
"""
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


class AlertType(str, Enum):
    UPPER = "upper"  # fires when price rises above threshold
    LOWER = "lower"  # fires when price falls below threshold


class User(SQLModel, table=True):
    """Directory row mapping an opaque session user id to an email."""

    id: str = Field(primary_key=True)
    email: str = Field(unique=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class WatchlistEntry(SQLModel, table=True):
    """A symbol tracked by a user. Unique per (user_id, symbol)."""

    __tablename__ = "watchlist"
    __table_args__ = (
        UniqueConstraint("user_id", "symbol", name="uq_watchlist_user_symbol"),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    symbol: str  # canonical uppercase, e.g. AAPL
    company: str
    added_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)


class Alert(SQLModel, table=True):
    """Price-crossing alert. Unique per (user_id, symbol, alert_type, threshold)."""

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "symbol",
            "alert_type",
            "threshold",
            name="uq_alert_user_symbol_type_threshold",
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    symbol: str
    company: str
    alert_name: str
    alert_type: str  # AlertType value
    threshold: float
    current_price: float | None = None  # snapshot at create/update time
    change_percent: float | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)
