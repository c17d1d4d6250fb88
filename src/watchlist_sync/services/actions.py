"""Watchlist and alert actions: the surface the presentation layer calls.

Every method resolves the session once, threads the user id explicitly into
the stores and services, and turns expected failures into an ActionResult
instead of raising. Reads degrade to empty results.
"""
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from enum import Enum

from watchlist_sync.core import (ErrorMapper, NotFound, Unauthenticated,
                                 WatchlistSyncError)
from watchlist_sync.schemas import (ActionResult, AlertData, AlertRecord,
                                    AlertsView, Identity, StockWithData,
                                    ViewStatus, WatchlistView)
from watchlist_sync.services.aggregation import AggregationEngine
from watchlist_sync.services.alert_manager import AlertManager
from watchlist_sync.session import SessionContext
from watchlist_sync.stores import WatchlistStore

logger = logging.getLogger(__name__)

WATCHLIST_ERRORS = ErrorMapper(
    resource_name="Stock",
    not_found_message="Stock not in watchlist",
    conflict_message="Already in watchlist",
)
ALERT_ERRORS = ErrorMapper(
    resource_name="Alert",
    not_found_message="Alert not found",
    conflict_message="An alert with this configuration already exists.",
)


class OrphanAlertPolicy(str, Enum):
    """What happens to a user's alerts on a symbol they stop watching."""

    KEEP = "keep"
    DELETE = "delete"


def parse_alert_id(alert_id: int | str) -> int:
    """Alert ids are integers; anything else cannot match a row."""
    try:
        return int(alert_id)
    except (TypeError, ValueError) as e:
        raise NotFound("Alert not found") from e


class WatchlistActions:
    """Session-bound facade over the watchlist store, aggregation engine and alert manager."""

    def __init__(
        self,
        session: SessionContext,
        watchlist: WatchlistStore,
        engine: AggregationEngine,
        alerts: AlertManager,
        *,
        orphan_policy: OrphanAlertPolicy = OrphanAlertPolicy.KEEP,
    ) -> None:
        self._session = session
        self._watchlist = watchlist
        self._engine = engine
        self._alerts = alerts
        self._orphan_policy = orphan_policy

    async def _identity(self) -> Identity:
        identity = await self._session.resolve()
        if identity is None:
            raise Unauthenticated()
        return identity

    async def _guard(
        self,
        mapper: ErrorMapper,
        failure_message: str,
        op: Callable[[Identity], Awaitable[ActionResult]],
    ) -> ActionResult:
        mapper = replace(mapper, failure_message=failure_message)
        try:
            return await op(await self._identity())
        except WatchlistSyncError as e:
            status_code, message = mapper.to_http(e)
            return ActionResult(success=False, message=message, status_code=status_code)
        except Exception:  # pylint: disable=broad-except
            logger.exception("%s", failure_message)
            status_code, message = mapper.to_http(RuntimeError())
            return ActionResult(success=False, message=message, status_code=status_code)

    # ---- Watchlist ----
    async def get_watchlist_status(self) -> WatchlistView:
        """Decorated watchlist with a status (see ViewStatus)."""
        identity = await self._session.resolve()
        if identity is None:
            return WatchlistView(status=ViewStatus.UNAUTHENTICATED)
        return await self._engine.load_view(identity.user_id)

    async def get_watchlist_view(self) -> list[StockWithData]:
        """Decorated watchlist; [] when unauthenticated, empty or unavailable."""
        return (await self.get_watchlist_status()).items

    async def is_in_watchlist(self, symbol: str) -> bool:
        identity = await self._session.resolve()
        if identity is None or not symbol:
            return False
        try:
            return await self._watchlist.contains(identity.user_id, symbol)
        except WatchlistSyncError as e:
            logger.error("is_in_watchlist failed for %s: %s", symbol, e)
            return False

    async def add_to_watchlist(self, symbol: str, company: str) -> ActionResult:
        async def op(identity: Identity) -> ActionResult:
            entry = await self._watchlist.add(identity.user_id, symbol, company)
            if identity.email:
                try:
                    await self._watchlist.ensure_user(identity.user_id, identity.email)
                except WatchlistSyncError as e:
                    logger.warning("Could not record email for %s: %s", identity.user_id, e)
            logger.info("Watchlist add: %s tracks %s", identity.user_id, entry.symbol)
            return ActionResult(success=True, message="Added to watchlist")

        return await self._guard(WATCHLIST_ERRORS, "Failed to add to watchlist", op)

    async def remove_from_watchlist(self, symbol: str) -> ActionResult:
        async def op(identity: Identity) -> ActionResult:
            await self._watchlist.remove(identity.user_id, symbol)
            if self._orphan_policy is OrphanAlertPolicy.DELETE:
                try:
                    dropped = await self._alerts.delete_for_symbol(identity.user_id, symbol)
                    logger.info("Dropped %d orphaned alert(s) on %s", dropped, symbol)
                except WatchlistSyncError as e:
                    logger.warning("Orphaned alert cleanup failed for %s: %s", symbol, e)
            return ActionResult(success=True, message="Removed from watchlist")

        return await self._guard(WATCHLIST_ERRORS, "Failed to remove from watchlist", op)

    async def get_watchlist_symbols_by_email(self, email: str) -> list[str]:
        """Symbols watched by the user registered under email (used by digests)."""
        try:
            return await self._watchlist.symbols_for_email(email)
        except WatchlistSyncError as e:
            logger.error("Symbols lookup by email failed: %s", e)
            return []

    # ---- Alerts ----
    async def get_alerts_status(self) -> AlertsView:
        """Caller's alerts with a status, so an outage is not mistaken for "no alerts"."""
        identity = await self._session.resolve()
        if identity is None:
            return AlertsView(status=ViewStatus.UNAUTHENTICATED)
        try:
            items = await self._alerts.list_for_user(identity.user_id)
        except WatchlistSyncError as e:
            logger.error("Alert list failed for %s: %s", identity.user_id, e)
            return AlertsView(status=ViewStatus.UNAVAILABLE)
        return AlertsView(status=ViewStatus.OK if items else ViewStatus.EMPTY, items=items)

    async def get_alerts(self) -> list[AlertRecord]:
        """Caller's alerts; [] when unauthenticated or unavailable."""
        return (await self.get_alerts_status()).items

    async def create_alert(self, data: AlertData) -> ActionResult:
        async def op(identity: Identity) -> ActionResult:
            alert = await self._alerts.create(identity.user_id, data)
            return ActionResult(success=True, message="Alert created", alert=alert)

        return await self._guard(ALERT_ERRORS, "Failed to create alert", op)

    async def update_alert(self, alert_id: int | str, data: AlertData) -> ActionResult:
        async def op(identity: Identity) -> ActionResult:
            alert = await self._alerts.update(identity.user_id, parse_alert_id(alert_id), data)
            return ActionResult(success=True, message="Alert updated", alert=alert)

        return await self._guard(ALERT_ERRORS, "Failed to update alert", op)

    async def delete_alert(self, alert_id: int | str) -> ActionResult:
        async def op(identity: Identity) -> ActionResult:
            await self._alerts.delete(identity.user_id, parse_alert_id(alert_id))
            return ActionResult(success=True, message="Alert deleted")

        return await self._guard(ALERT_ERRORS, "Failed to delete alert", op)
