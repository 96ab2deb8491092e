"""Import every ORM model so Base.metadata knows all tables."""

from cleancut_service.features.accounts.models import Account
from cleancut_service.features.projects.models import Project
from cleancut_service.features.queue.models import QueueEntry

__all__ = ["Account", "Project", "QueueEntry"]
