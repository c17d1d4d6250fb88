"""Domain exceptions for watchlist and alert operations.

Services and stores raise these; the actions facade and the HTTP layer map them
to result envelopes (see ErrorMapper) instead of letting them escape.
"""


class WatchlistSyncError(Exception):
    """Base class for expected failures. `message` is safe to show to a user."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(WatchlistSyncError):
    """No identity could be resolved for the caller."""

    default_message = "Not authenticated"


class ValidationError(WatchlistSyncError):
    """Malformed input (e.g. alert threshold that is not a positive number)."""

    default_message = "Invalid input"

    def __init__(self, message: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class Conflict(WatchlistSyncError):
    """A uniqueness invariant would be violated."""

    default_message = "Already exists"


class NotFound(WatchlistSyncError):
    """Ownership-scoped target does not exist (or belongs to another user)."""

    default_message = "Not found"


class UpstreamUnavailable(WatchlistSyncError):
    """Market data lookup failed for a symbol."""

    default_message = "Market data unavailable"

    def __init__(self, message: str | None = None, symbol: str | None = None) -> None:
        super().__init__(message)
        self.symbol = symbol


class PersistenceError(WatchlistSyncError):
    """The store could not be reached or the write failed unexpectedly."""

    default_message = "Storage unavailable"
