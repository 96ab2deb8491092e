"""Base schema classes for API responses."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class CustomBase(BaseModel):
    """Base model with common configuration for all schemas.

    Example:
        class ProjectResponse(CustomBase):
            id: UUID
            status: ProjectStatus
            created_at: datetime
    """

    model_config = ConfigDict(
        # Allow creation from ORM models (SQLAlchemy)
        from_attributes=True,
        # Use enum values instead of names
        use_enum_values=True,
        populate_by_name=True,
        # Silently drop unexpected fields
        extra="ignore",
        str_strip_whitespace=True,
    )


class Page(CustomBase, Generic[T]):
    """Offset-paginated list response."""

    items: list[T]
    total: int = Field(ge=0, description="Total matching items across all pages")
    page: int = Field(ge=1, description="Current page (1-indexed)")
    limit: int = Field(ge=1, description="Page size")
    pages: int = Field(ge=0, description="Total number of pages")
