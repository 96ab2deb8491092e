"""Core database package with base classes, mixins, and repository.

Base Classes and Mixins:
    - Base: Declarative base with constraint naming convention
    - UUIDPKMixin: UUID v4 primary key
    - TimestampMixin: created_at, updated_at tracking

Types:
    - UTCDateTime: Timezone-aware timestamps on PostgreSQL and SQLite

Repository:
    - BaseRepository[T]: Generic CRUD with explicit session passing
    - SearchResult[T]: Paginated result container
"""

from __future__ import annotations

from .base import NAMING_CONVENTION, Base, TimestampMixin, UUIDPKMixin, utcnow
from .repository import BaseRepository, SearchResult
from .types import UTCDateTime

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "SearchResult",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDPKMixin",
    "utcnow",
]
