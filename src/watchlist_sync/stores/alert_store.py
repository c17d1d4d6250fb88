"""Persisted per-user price alerts."""
from dataclasses import asdict, dataclass

from sqlmodel import Session, col, select

from watchlist_sync.core import NotFound
from watchlist_sync.db import Alert
from watchlist_sync.stores.base import SqlStore


@dataclass(frozen=True)
class AlertFields:
    """Validated, canonical alert fields ready to be written."""

    symbol: str
    company: str
    alert_name: str
    alert_type: str
    threshold: float
    current_price: float | None = None
    change_percent: float | None = None


class AlertStore(SqlStore):
    """Ownership-scoped CRUD over Alert rows."""

    conflict_message = "An alert with this configuration already exists."

    @staticmethod
    def _owned(session: Session, user_id: str, alert_id: int) -> Alert | None:
        return session.exec(
            select(Alert).where(Alert.id == alert_id, Alert.user_id == user_id)
        ).first()

    async def insert(self, user_id: str, fields: AlertFields) -> Alert:
        """Insert an alert. Raises Conflict on a duplicate (symbol, type, threshold)."""

        def work(session: Session) -> Alert:
            alert = Alert(user_id=user_id, **asdict(fields))
            session.add(alert)
            session.flush()
            session.refresh(alert)
            return alert

        return await self._run(work)

    async def update_owned(self, user_id: str, alert_id: int, fields: AlertFields) -> Alert:
        """Overwrite an alert in place. Raises NotFound or Conflict."""

        def work(session: Session) -> Alert:
            alert = self._owned(session, user_id, alert_id)
            if alert is None:
                raise NotFound("Alert not found")
            for name, value in asdict(fields).items():
                setattr(alert, name, value)
            session.add(alert)
            session.flush()
            session.refresh(alert)
            return alert

        return await self._run(work)

    async def delete_owned(self, user_id: str, alert_id: int) -> None:
        """Delete an alert. Raises NotFound if nothing matched."""

        def work(session: Session) -> None:
            alert = self._owned(session, user_id, alert_id)
            if alert is None:
                raise NotFound("Alert not found")
            session.delete(alert)

        await self._run(work)

    async def list_for_user(self, user_id: str) -> list[Alert]:
        """Alerts for a user, newest first."""

        def work(session: Session) -> list[Alert]:
            return list(
                session.exec(
                    select(Alert)
                    .where(Alert.user_id == user_id)
                    .order_by(col(Alert.created_at).desc(), col(Alert.id).desc())
                ).all()
            )

        return await self._run(work)

    async def delete_for_symbol(self, user_id: str, symbol: str) -> int:
        """Delete every alert the user has on symbol; returns how many."""

        def work(session: Session) -> int:
            rows = session.exec(
                select(Alert).where(Alert.user_id == user_id, Alert.symbol == symbol)
            ).all()
            for row in rows:
                session.delete(row)
            return len(rows)

        return await self._run(work)
