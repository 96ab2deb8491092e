"""Work queue enumerations.

Entry states:
    QUEUED → IN_FLIGHT → (removed on success)
               │
               ├→ RETRY_WAIT → IN_FLIGHT   (attempts left, after backoff)
               └→ DEAD                     (attempts exhausted, kept for inspection)

Priority ranks: HIGH (1) < MEDIUM (2) < LOW (3). Lower rank is served first;
equal ranks are served in enqueue order.
"""

from __future__ import annotations

import enum


class EntryState(str, enum.Enum):
    """Queue entry state."""

    QUEUED = "queued"
    IN_FLIGHT = "in_flight"
    RETRY_WAIT = "retry_wait"
    DEAD = "dead"

    @classmethod
    def live_states(cls) -> set[EntryState]:
        """States in which the entry still represents pending work."""
        return {cls.QUEUED, cls.IN_FLIGHT, cls.RETRY_WAIT}

    @classmethod
    def claimable_states(cls) -> set[EntryState]:
        return {cls.QUEUED, cls.RETRY_WAIT}


class QueuePriority(int, enum.Enum):
    """Numeric queue rank derived from the plan's priority label."""

    HIGH = 1
    MEDIUM = 2
    LOW = 3

    @classmethod
    def from_label(cls, label: str) -> QueuePriority:
        return cls[label.upper()]

    @property
    def label(self) -> str:
        return self.name.lower()
