"""Sync controller: optimistic client mirror reconciled with server state.

Watchlist membership toggles are optimistic: the mirror flips first and is
restored if the server rejects the change. Alert create/update, alert delete
and watchlist row removal are confirmed first: the mirror only changes after
the server says yes.

Requests for the same entity are not serialized. Each carries a sequence
number (see RequestTracker) and a response that has been overtaken by a newer
request for the same entity is discarded instead of applied. Once overlapping
toggles for a symbol have all returned, the mirror is reloaded from the
server, since a discarded response may still have changed server state.

Reads go through the status variants of the api so that an unreachable store
leaves the mirror as it was instead of emptying it.
"""
import asyncio
import itertools
import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from watchlist_sync.core import normalize_stock_symbol
from watchlist_sync.db.models import utcnow
from watchlist_sync.schemas import (ActionResult, AlertData, AlertRecord,
                                    AlertsView, StockWithData, ViewStatus,
                                    WatchlistView)
from watchlist_sync.sync.state import EntityState, Mirror, RequestTracker

logger = logging.getLogger(__name__)

VIEW_KEY = "view"
GENERIC_FAILURE = "Something went wrong. Please try again."

# Statuses that say nothing about what the server holds.
UNUSABLE = frozenset({ViewStatus.UNAVAILABLE, ViewStatus.UNAUTHENTICATED})


class WatchlistApi(Protocol):
    """The subset of WatchlistActions the controller talks to."""

    async def get_watchlist_status(self) -> WatchlistView: ...

    async def get_alerts_status(self) -> AlertsView: ...

    async def add_to_watchlist(self, symbol: str, company: str) -> ActionResult: ...

    async def remove_from_watchlist(self, symbol: str) -> ActionResult: ...

    async def create_alert(self, data: AlertData) -> ActionResult: ...

    async def update_alert(self, alert_id: int, data: AlertData) -> ActionResult: ...

    async def delete_alert(self, alert_id: int) -> ActionResult: ...


@dataclass(frozen=True)
class _Intent:
    """Membership an in-flight toggle wants the mirror to show."""

    present: bool
    company: str


def watchlist_key(symbol: str) -> str:
    return f"watchlist:{normalize_stock_symbol(symbol)}"


def removal_key(symbol: str) -> str:
    return f"remove:{normalize_stock_symbol(symbol)}"


def alert_key(alert_id: int) -> str:
    return f"alert:{alert_id}"


class SyncController:
    """Holds {watchlist, alerts} for one user and keeps it in step with the server."""

    def __init__(self, api: WatchlistApi, *, prune_alerts_on_remove: bool = True) -> None:
        """Initialize the controller.

        Args:
            api: Session-bound actions (normally a WatchlistActions).
            prune_alerts_on_remove: Drop mirrored alerts for a symbol once its
                removal from the watchlist succeeds.
        """
        self._api = api
        self._prune_alerts = prune_alerts_on_remove
        self._mirror = Mirror()
        self._tracker = RequestTracker()
        self._pending: set[str] = set()
        self._intents: dict[str, _Intent] = {}
        self._in_flight: Counter[str] = Counter()
        self._resync: set[str] = set()
        self._listeners: list[Callable[[Mirror], None]] = []
        self._create_ids = itertools.count(1)
        self.stale_discards = 0

    # ---- Read side ----
    @property
    def watchlist(self) -> list[StockWithData]:
        return list(self._mirror.watchlist)

    @property
    def alerts(self) -> list[AlertRecord]:
        return list(self._mirror.alerts)

    def is_in_watchlist(self, symbol: str) -> bool:
        sym = normalize_stock_symbol(symbol)
        return any(row.symbol == sym for row in self._mirror.watchlist)

    def is_pending(self, action_key: str) -> bool:
        return action_key in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def state_of(self, key: str) -> EntityState:
        return self._tracker.state(key)

    def on_change(self, callback: Callable[[Mirror], None]) -> None:
        """Register a callback run after every mirror mutation."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in self._listeners:
            try:
                callback(self._mirror)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Mirror listener failed")

    def _discard_stale(self, key: str) -> None:
        self.stale_discards += 1
        logger.debug("Discarding stale response for %s", key)

    # ---- Mirror helpers ----
    def _row_index(self, symbol: str) -> int | None:
        for i, row in enumerate(self._mirror.watchlist):
            if row.symbol == symbol:
                return i
        return None

    def _insert_placeholder(self, symbol: str, company: str, index: int = 0) -> None:
        if self._row_index(symbol) is not None:
            return
        row = StockWithData(
            user_id="",
            symbol=symbol,
            company=company or symbol,
            added_at=utcnow(),
        )
        self._mirror.watchlist.insert(min(index, len(self._mirror.watchlist)), row)

    def _drop_row(self, symbol: str) -> None:
        self._mirror.watchlist = [r for r in self._mirror.watchlist if r.symbol != symbol]

    def _restore(self, symbol: str, before: tuple[int, StockWithData] | None) -> None:
        """Put the mirror back to what it showed for symbol before a mutation."""
        self._drop_row(symbol)
        if before is not None:
            index, row = before
            self._mirror.watchlist.insert(min(index, len(self._mirror.watchlist)), row)

    def _apply_view(self, rows: list[StockWithData]) -> None:
        """Replace the watchlist, keeping what in-flight toggles still promise."""
        self._mirror.watchlist = list(rows)
        for symbol, intent in self._intents.items():
            present = self._row_index(symbol) is not None
            if intent.present and not present:
                self._insert_placeholder(symbol, intent.company)
            elif not intent.present and present:
                self._drop_row(symbol)

    # ---- Loading ----
    async def load(self) -> bool:
        """Initial fetch of watchlist view and alerts."""
        return await self.refresh()

    async def refresh(self) -> bool:
        """Fetch view and alerts concurrently and replace the mirror.

        Returns False, leaving the mirror alone, if the fetch failed, the
        store was unavailable, or a newer fetch overtook this one.
        """
        seq = self._tracker.begin(VIEW_KEY, optimistic=False)
        self._pending.add(VIEW_KEY)
        try:
            view, alerts = await asyncio.gather(
                self._api.get_watchlist_status(),
                self._api.get_alerts_status(),
            )
        except Exception:  # pylint: disable=broad-except
            logger.exception("Watchlist refresh failed")
            if self._tracker.finish(VIEW_KEY, seq, ok=False):
                self._pending.discard(VIEW_KEY)
            return False
        usable = view.status not in UNUSABLE and alerts.status not in UNUSABLE
        if not self._tracker.finish(VIEW_KEY, seq, ok=usable):
            self._discard_stale(VIEW_KEY)
            return False
        self._pending.discard(VIEW_KEY)
        if not usable:
            logger.warning(
                "Watchlist refresh skipped: view %s, alerts %s",
                view.status.value,
                alerts.status.value,
            )
            return False
        self._apply_view(view.items)
        self._mirror.alerts = list(alerts.items)
        self._notify()
        return True

    async def _backfill(self, key: str) -> None:
        """Reload the view after an add so the new row gets its pricing."""
        view_seq = self._tracker.begin(VIEW_KEY, optimistic=False)
        self._pending.add(VIEW_KEY)
        try:
            view = await self._api.get_watchlist_status()
        except Exception:  # pylint: disable=broad-except
            logger.exception("Watchlist backfill failed for %s", key)
            if self._tracker.finish(VIEW_KEY, view_seq, ok=False):
                self._pending.discard(VIEW_KEY)
            return
        usable = view.status not in UNUSABLE
        if not self._tracker.finish(VIEW_KEY, view_seq, ok=usable):
            self._discard_stale(VIEW_KEY)
            return
        self._pending.discard(VIEW_KEY)
        if not usable:
            logger.warning("Watchlist backfill for %s skipped: view %s", key, view.status.value)
            return
        # Safe even if `key` moved on: _apply_view keeps in-flight intents.
        self._apply_view(view.items)

    # ---- Watchlist membership (optimistic) ----
    async def toggle_watchlist(self, symbol: str, company: str) -> ActionResult:
        """Flip membership now, confirm with the server, undo on failure.

        If another toggle for the same symbol was still in flight, the mirror
        is reloaded once the last of them returns.
        """
        sym = normalize_stock_symbol(symbol)
        key = watchlist_key(sym)
        if self._in_flight[key]:
            self._resync.add(key)
        self._in_flight[key] += 1
        try:
            return await self._toggle(sym, key, company)
        finally:
            self._in_flight[key] -= 1
            if not self._in_flight[key]:
                del self._in_flight[key]
                if key in self._resync:
                    self._resync.discard(key)
                    await self.refresh()

    async def _toggle(self, sym: str, key: str, company: str) -> ActionResult:
        target = not self.is_in_watchlist(sym)
        index = self._row_index(sym)
        before = (index, self._mirror.watchlist[index]) if index is not None else None

        seq = self._tracker.begin(key, optimistic=True)
        self._pending.add(key)
        self._intents[sym] = _Intent(present=target, company=company)
        if target:
            self._insert_placeholder(sym, company)
        else:
            self._drop_row(sym)
        self._notify()

        try:
            if target:
                result = await self._api.add_to_watchlist(sym, company)
            else:
                result = await self._api.remove_from_watchlist(sym)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Watchlist toggle failed for %s", sym)
            result = ActionResult(success=False, message=GENERIC_FAILURE, status_code=500)

        if not self._tracker.is_current(key, seq):
            self._discard_stale(key)
            return result

        if not result.success:
            self._intents.pop(sym, None)
            self._pending.discard(key)
            self._restore(sym, before)
            self._tracker.finish(key, seq, ok=False)
            self._notify()
            return result

        if target:
            await self._backfill(key)
            if not self._tracker.is_current(key, seq):
                return result
        elif self._prune_alerts:
            self._mirror.alerts = [a for a in self._mirror.alerts if a.symbol != sym]
        self._intents.pop(sym, None)
        self._pending.discard(key)
        self._tracker.finish(key, seq, ok=True)
        self._notify()
        return result

    # ---- Confirm-first mutations ----
    async def remove_watchlist_row(self, symbol: str) -> ActionResult:
        """Remove a row after the server confirms; repeat clicks are ignored."""
        sym = normalize_stock_symbol(symbol)
        key = removal_key(sym)
        if key in self._pending:
            return ActionResult(success=False, message="Removal already in progress", status_code=409)
        seq = self._tracker.begin(key, optimistic=False)
        self._pending.add(key)
        try:
            result = await self._api.remove_from_watchlist(sym)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Watchlist removal failed for %s", sym)
            result = ActionResult(success=False, message=GENERIC_FAILURE, status_code=500)
        finally:
            self._pending.discard(key)

        self._tracker.finish(key, seq, ok=result.success)
        if result.success:
            # The server no longer has the row, whatever else is in flight.
            self._intents.pop(sym, None)
            self._drop_row(sym)
            if self._prune_alerts:
                self._mirror.alerts = [a for a in self._mirror.alerts if a.symbol != sym]
            self._notify()
        return result

    async def save_alert(self, data: AlertData, alert_id: int | None = None) -> ActionResult:
        """Create (alert_id None) or update an alert; mirror changes on success only."""
        key = alert_key(alert_id) if alert_id is not None else f"alert:new:{next(self._create_ids)}"
        seq = self._tracker.begin(key, optimistic=False)
        self._pending.add(key)
        try:
            if alert_id is None:
                result = await self._api.create_alert(data)
            else:
                result = await self._api.update_alert(alert_id, data)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Saving alert failed")
            result = ActionResult(success=False, message="Failed to save alert", status_code=500)
        finally:
            self._pending.discard(key)

        ok = result.success and result.alert is not None
        if not self._tracker.finish(key, seq, ok=ok):
            self._discard_stale(key)
            return result
        if not ok:
            return result

        saved = result.alert
        if alert_id is None:
            self._mirror.alerts = [saved] + [a for a in self._mirror.alerts if a.id != saved.id]
        else:
            self._mirror.alerts = [saved if a.id == alert_id else a for a in self._mirror.alerts]
        self._notify()
        return result

    async def delete_alert(self, alert_id: int) -> ActionResult:
        """Delete an alert; the mirror keeps it unless the server confirms."""
        key = alert_key(alert_id)
        seq = self._tracker.begin(key, optimistic=False)
        self._pending.add(key)
        try:
            result = await self._api.delete_alert(alert_id)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Deleting alert %s failed", alert_id)
            result = ActionResult(success=False, message="Failed to delete alert", status_code=500)
        finally:
            self._pending.discard(key)

        self._tracker.finish(key, seq, ok=result.success)
        if result.success:
            self._mirror.alerts = [a for a in self._mirror.alerts if a.id != alert_id]
            self._notify()
        return result
