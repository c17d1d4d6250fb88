"""Shared plumbing for SQLModel-backed stores."""
import asyncio
import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from watchlist_sync.core import Conflict, PersistenceError
from watchlist_sync.db.sessions import session_scope

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlStore:
    """Runs blocking session work in a thread and translates database errors.

    Unique-constraint violations become Conflict (the database is the only
    arbiter of uniqueness under concurrent writers); any other SQLAlchemy error
    becomes PersistenceError. Domain errors raised inside the work function
    propagate unchanged and roll the session back.
    """

    conflict_message = "Already exists"

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _in_session(self, work: Callable[[Session], T]) -> T:
        try:
            with session_scope(self._engine) as session:
                return work(session)
        except IntegrityError as e:
            logger.info("%s: unique constraint violated: %s", type(self).__name__, e.orig)
            raise Conflict(self.conflict_message) from e
        except SQLAlchemyError as e:
            logger.error("%s: storage error: %s", type(self).__name__, e)
            raise PersistenceError() from e

    async def _run(self, work: Callable[[Session], T]) -> T:
        return await asyncio.to_thread(self._in_session, work)
