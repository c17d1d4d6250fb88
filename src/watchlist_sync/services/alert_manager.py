"""Alert manager: validate, snapshot and persist price alerts."""
import logging
import math

from watchlist_sync.core import (UpstreamUnavailable, ValidationError,
                                 normalize_stock_symbol)
from watchlist_sync.db import AlertType
from watchlist_sync.providers import MarketDataProviderABC
from watchlist_sync.schemas import AlertData, AlertRecord, StockOverview
from watchlist_sync.stores import AlertFields, AlertStore

logger = logging.getLogger(__name__)


def parse_threshold(raw: str | float | int | None) -> float:
    """Parse a threshold to a finite float > 0, or raise ValidationError."""
    if isinstance(raw, bool) or raw is None:
        raise ValidationError("Please enter a valid price threshold.", field="threshold")
    try:
        value = float(raw.strip() if isinstance(raw, str) else raw)
    except (TypeError, ValueError) as e:
        raise ValidationError("Please enter a valid price threshold.", field="threshold") from e
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Threshold must be a positive number.", field="threshold")
    return value


def validate_alert_data(data: AlertData) -> AlertFields:
    """Check and canonicalize form input. Snapshot fields are left empty."""
    symbol = normalize_stock_symbol(data.symbol)
    company = (data.company or "").strip()
    alert_name = (data.alert_name or "").strip()
    for field, value in (("symbol", symbol), ("company", company), ("alert_name", alert_name)):
        if not value:
            raise ValidationError(f"{field.replace('_', ' ').capitalize()} is required", field=field)
    alert_type = (data.alert_type or "").strip().lower()
    if alert_type not in {t.value for t in AlertType}:
        raise ValidationError("Alert type must be 'upper' or 'lower'", field="alert_type")
    return AlertFields(
        symbol=symbol,
        company=company,
        alert_name=alert_name,
        alert_type=alert_type,
        threshold=parse_threshold(data.threshold),
    )


class AlertManager:
    """Create/update/delete/list alerts for an explicit user id.

    create and update take a fresh price snapshot; a provider failure there
    is logged and the alert is saved without one.
    """

    def __init__(
        self,
        store: AlertStore,
        provider: MarketDataProviderABC,
        *,
        snapshot_timeout: float | None = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._timeout = snapshot_timeout

    async def _snapshot(self, symbol: str) -> StockOverview:
        try:
            return await self._provider.fetch_overview(symbol, self._timeout)
        except UpstreamUnavailable as e:
            logger.warning("Alert snapshot failed for %s: %r", symbol, e.__cause__)
            return StockOverview()

    async def _prepare(self, data: AlertData) -> AlertFields:
        fields = validate_alert_data(data)
        overview = await self._snapshot(fields.symbol)
        return AlertFields(
            symbol=fields.symbol,
            company=fields.company,
            alert_name=fields.alert_name,
            alert_type=fields.alert_type,
            threshold=fields.threshold,
            current_price=overview.current_price,
            change_percent=overview.change_percent,
        )

    async def create(self, user_id: str, data: AlertData) -> AlertRecord:
        """Validate, snapshot and insert. Raises ValidationError or Conflict."""
        fields = await self._prepare(data)
        alert = await self._store.insert(user_id, fields)
        logger.info("Alert %s created for %s on %s", alert.id, user_id, fields.symbol)
        return AlertRecord.from_row(alert)

    async def update(self, user_id: str, alert_id: int, data: AlertData) -> AlertRecord:
        """Validate, re-snapshot and overwrite. Raises ValidationError, NotFound or Conflict."""
        fields = await self._prepare(data)
        alert = await self._store.update_owned(user_id, alert_id, fields)
        return AlertRecord.from_row(alert)

    async def delete(self, user_id: str, alert_id: int) -> None:
        """Raises NotFound when the alert is missing or not owned by user_id."""
        await self._store.delete_owned(user_id, alert_id)

    async def list_for_user(self, user_id: str) -> list[AlertRecord]:
        return [AlertRecord.from_row(a) for a in await self._store.list_for_user(user_id)]

    async def delete_for_symbol(self, user_id: str, symbol: str) -> int:
        """Drop all of a user's alerts on symbol (orphan cleanup)."""
        return await self._store.delete_for_symbol(user_id, normalize_stock_symbol(symbol))
