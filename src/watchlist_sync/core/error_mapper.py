"""Mapping of domain exceptions to (status_code, message) pairs."""
from dataclasses import dataclass

from watchlist_sync.core.exceptions import (Conflict, NotFound,
                                            PersistenceError, Unauthenticated,
                                            UpstreamUnavailable,
                                            ValidationError)


@dataclass(frozen=True)
class ErrorMapper:
    """Maps service exceptions to an HTTP status and a user-facing message.

    One instance per resource (watchlist, alerts) so messages carry the right
    labels, e.g. "Stock not in watchlist" vs "Alert not found". Messages for
    unexpected errors are generic so internals never leak to callers.
    """

    resource_name: str = "Resource"
    not_found_message: str | None = None
    conflict_message: str | None = None
    failure_message: str = "Request failed"

    def to_http(self, exc: Exception) -> tuple[int, str]:
        """Map an exception to (status_code, message).

        Args:
            exc: The exception raised by a store or service.

        Returns:
            (status_code, message) suitable for both the result envelope and HTTP.
        """
        if isinstance(exc, Unauthenticated):
            return (401, exc.message)
        if isinstance(exc, ValidationError):
            return (422, exc.message)
        if isinstance(exc, NotFound):
            return (404, self.not_found_message or f"{self.resource_name} not found")
        if isinstance(exc, Conflict):
            return (409, self.conflict_message or f"{self.resource_name} already exists")
        if isinstance(exc, (PersistenceError, UpstreamUnavailable)):
            return (503, self.failure_message)
        return (500, self.failure_message)

    def message_for(self, exc: Exception) -> str:
        """Return only the message part of to_http()."""
        return self.to_http(exc)[1]
