"""Client-side mirror and per-entity request tracking."""
from dataclasses import dataclass, field
from enum import Enum

from watchlist_sync.schemas import AlertRecord, StockWithData


class EntityState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"  # request in flight, mirror untouched until it returns
    PENDING_OPTIMISTIC = "pending_optimistic"  # mirror already shows the intended value
    SETTLED = "settled"
    ROLLED_BACK = "rolled_back"


@dataclass
class Mirror:
    """Local copy of what the server holds for the current user."""

    watchlist: list[StockWithData] = field(default_factory=list)
    alerts: list[AlertRecord] = field(default_factory=list)


@dataclass
class EntityTracker:
    state: EntityState = EntityState.IDLE
    seq: int = 0
    optimistic: bool = False


class RequestTracker:
    """Monotonic per-entity request sequence numbers.

    begin() hands out the next number for an entity; a response is applied
    only while its number is still the latest for that entity, so a slow
    response to an older request cannot overwrite newer state.
    """

    def __init__(self) -> None:
        self._entities: dict[str, EntityTracker] = {}

    def begin(self, key: str, *, optimistic: bool) -> int:
        tracker = self._entities.setdefault(key, EntityTracker())
        tracker.seq += 1
        tracker.optimistic = optimistic
        tracker.state = EntityState.PENDING_OPTIMISTIC if optimistic else EntityState.PENDING
        return tracker.seq

    def is_current(self, key: str, seq: int) -> bool:
        tracker = self._entities.get(key)
        return tracker is not None and tracker.seq == seq

    def finish(self, key: str, seq: int, *, ok: bool) -> bool:
        """Record the outcome of request seq; False (and no change) if it is stale."""
        if not self.is_current(key, seq):
            return False
        tracker = self._entities[key]
        if ok:
            tracker.state = EntityState.SETTLED
        else:
            tracker.state = EntityState.ROLLED_BACK if tracker.optimistic else EntityState.IDLE
        return True

    def state(self, key: str) -> EntityState:
        tracker = self._entities.get(key)
        return tracker.state if tracker else EntityState.IDLE

    def seq(self, key: str) -> int:
        tracker = self._entities.get(key)
        return tracker.seq if tracker else 0
