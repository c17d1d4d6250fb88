"""Persisted per-user watchlist."""
from sqlmodel import Session, col, select

from watchlist_sync.core import (Conflict, NotFound, ValidationError,
                                 normalize_stock_symbol)
from watchlist_sync.db import User, WatchlistEntry
from watchlist_sync.stores.base import SqlStore


class WatchlistStore(SqlStore):
    """Ownership-scoped CRUD over WatchlistEntry rows.

    Every query filters by user_id, so "not yours" and "does not exist" look
    the same to the caller.
    """

    conflict_message = "Already in watchlist"

    @staticmethod
    def _owned(session: Session, user_id: str, symbol: str) -> WatchlistEntry | None:
        return session.exec(
            select(WatchlistEntry).where(
                WatchlistEntry.user_id == user_id,
                WatchlistEntry.symbol == symbol,
            )
        ).first()

    async def add(self, user_id: str, symbol: str, company: str) -> WatchlistEntry:
        """Add a symbol. Raises Conflict if the user already tracks it."""
        sym = normalize_stock_symbol(symbol)
        if not sym:
            raise ValidationError("Symbol is required", field="symbol")
        name = (company or "").strip() or sym

        def work(session: Session) -> WatchlistEntry:
            # Fast path only; the unique constraint settles races.
            if self._owned(session, user_id, sym) is not None:
                raise Conflict(self.conflict_message)
            entry = WatchlistEntry(user_id=user_id, symbol=sym, company=name)
            session.add(entry)
            session.flush()
            session.refresh(entry)
            return entry

        return await self._run(work)

    async def remove(self, user_id: str, symbol: str) -> None:
        """Remove a symbol. Raises NotFound if nothing matched."""
        sym = normalize_stock_symbol(symbol)

        def work(session: Session) -> None:
            entry = self._owned(session, user_id, sym) if sym else None
            if entry is None:
                raise NotFound("Stock not in watchlist")
            session.delete(entry)

        await self._run(work)

    async def list_for_user(self, user_id: str) -> list[WatchlistEntry]:
        """Entries for a user, most recently added first."""

        def work(session: Session) -> list[WatchlistEntry]:
            return list(
                session.exec(
                    select(WatchlistEntry)
                    .where(WatchlistEntry.user_id == user_id)
                    .order_by(col(WatchlistEntry.added_at).desc(), col(WatchlistEntry.id).desc())
                ).all()
            )

        return await self._run(work)

    async def symbols_for_user(self, user_id: str) -> list[str]:
        return [entry.symbol for entry in await self.list_for_user(user_id)]

    async def contains(self, user_id: str, symbol: str) -> bool:
        sym = normalize_stock_symbol(symbol)
        if not sym:
            return False
        return await self._run(lambda session: self._owned(session, user_id, sym) is not None)

    async def ensure_user(self, user_id: str, email: str) -> None:
        """Record (or refresh) the email for a user id."""
        email = email.strip().lower()

        def work(session: Session) -> None:
            user = session.get(User, user_id)
            if user is None:
                session.add(User(id=user_id, email=email))
            elif user.email != email:
                user.email = email
                session.add(user)

        await self._run(work)

    async def symbols_for_email(self, email: str) -> list[str]:
        """Watchlist symbols for the user registered under email; [] if unknown."""
        email = (email or "").strip().lower()
        if not email:
            return []

        def work(session: Session) -> str | None:
            user = session.exec(select(User).where(User.email == email)).first()
            return user.id if user else None

        user_id = await self._run(work)
        if not user_id:
            return []
        return await self.symbols_for_user(user_id)
