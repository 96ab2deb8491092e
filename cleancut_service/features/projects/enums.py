"""Project lifecycle enumerations.

State Machine:
    PENDING → PROCESSING → COMPLETED
       │          │
       │          ├→ FAILED
       ↓          ↓
    CANCELLED ← ──┘

Terminal states (COMPLETED, FAILED, CANCELLED) have no outgoing transitions;
a terminal project only leaves the system by deletion.
"""

from __future__ import annotations

import enum


class ProjectStatus(str, enum.Enum):
    """Project lifecycle status.

    States:
        PENDING: Admitted and queued, no worker has claimed it yet
        PROCESSING: Claimed by a worker (including retry waits between attempts)
        COMPLETED: Worker delivered a result
        FAILED: Worker attempts exhausted; error detail recorded
        CANCELLED: Cancelled by the owner
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @classmethod
    def terminal_states(cls) -> set[ProjectStatus]:
        """Return states with no further transitions."""
        return {cls.COMPLETED, cls.FAILED, cls.CANCELLED}

    @classmethod
    def cancellable_states(cls) -> set[ProjectStatus]:
        """Return states from which a project can be cancelled."""
        return {cls.PENDING, cls.PROCESSING}

    def is_terminal(self) -> bool:
        return self in self.terminal_states()


class MediaKind(str, enum.Enum):
    """Kind of uploaded media."""

    IMAGE = "image"
    VIDEO = "video"


# Valid state transitions (from_state -> set of valid to_states)
VALID_TRANSITIONS: dict[ProjectStatus, set[ProjectStatus]] = {
    ProjectStatus.PENDING: {ProjectStatus.PROCESSING, ProjectStatus.CANCELLED},
    ProjectStatus.PROCESSING: {
        ProjectStatus.COMPLETED,
        ProjectStatus.FAILED,
        ProjectStatus.CANCELLED,
    },
    ProjectStatus.COMPLETED: set(),
    ProjectStatus.FAILED: set(),
    ProjectStatus.CANCELLED: set(),
}


def is_valid_transition(from_status: ProjectStatus, to_status: ProjectStatus) -> bool:
    """Check if a state transition is valid."""
    return to_status in VALID_TRANSITIONS.get(from_status, set())


def sources_for(to_status: ProjectStatus) -> set[ProjectStatus]:
    """Return every state from which ``to_status`` may be entered."""
    return {src for src, targets in VALID_TRANSITIONS.items() if to_status in targets}
