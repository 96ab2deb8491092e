"""Priority work queue feature."""

from .enums import EntryState, QueuePriority
from .models import QueueEntry
from .service import ClaimedWork, FailureOutcome, QueueService

__all__ = ["ClaimedWork", "EntryState", "FailureOutcome", "QueueEntry", "QueuePriority", "QueueService"]
