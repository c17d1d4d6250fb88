"""Session context: resolves the calling identity.

Session issuance lives elsewhere. The core only needs an opaque user id, so
these resolvers either carry a fixed identity (tests, CLI, background jobs)
or read the identity an authenticating gateway forwarded in request headers.
"""
from typing import Protocol

from fastapi import Request

from watchlist_sync.schemas import Identity

USER_ID_HEADER = "X-User-Id"
USER_EMAIL_HEADER = "X-User-Email"


class SessionContext(Protocol):
    """Anything that can tell who is calling."""

    async def resolve(self) -> Identity | None:
        """Return the caller identity, or None when unauthenticated."""
        ...


class StaticSessionContext:
    """Fixed identity (or None for an anonymous caller)."""

    def __init__(self, user_id: str | None, email: str | None = None) -> None:
        self._identity = Identity(user_id=user_id, email=email) if user_id else None

    async def resolve(self) -> Identity | None:
        return self._identity


class HeaderSessionContext:
    """Identity forwarded by the gateway in X-User-Id / X-User-Email."""

    def __init__(self, request: Request) -> None:
        self._request = request

    async def resolve(self) -> Identity | None:
        user_id = (self._request.headers.get(USER_ID_HEADER) or "").strip()
        if not user_id:
            return None
        email = (self._request.headers.get(USER_EMAIL_HEADER) or "").strip() or None
        return Identity(user_id=user_id, email=email)
