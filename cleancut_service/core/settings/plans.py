"""Subscription plan limits.

Environment variables use PLAN_ prefix.
Example: PLAN_FREE_DAILY_LIMIT=5, PLAN_PREMIUM_MONTHLY_LIMIT=2000

A limit of ``None`` means the tier is unbounded on that window.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PriorityLabel = Literal["high", "medium", "low"]


class PlanSettings(BaseSettings):
    """Per-tier quota, resolution and pricing configuration."""

    # Free
    free_name: str = Field(default="Free Trial")
    free_daily_limit: int | None = Field(default=3, ge=0)
    free_monthly_limit: int | None = Field(default=None, ge=0)
    free_max_resolution: str = Field(default="720p")
    free_priority: PriorityLabel = Field(default="low")
    free_duration_days: int = Field(default=7, ge=1)
    free_price: float = Field(default=0.0, ge=0)

    # Intermediate
    intermediate_name: str = Field(default="Intermediate")
    intermediate_daily_limit: int | None = Field(default=None, ge=0)
    intermediate_monthly_limit: int | None = Field(default=30, ge=0)
    intermediate_max_resolution: str = Field(default="1080p")
    intermediate_priority: PriorityLabel = Field(default="medium")
    intermediate_duration_days: int = Field(default=365, ge=1)
    intermediate_price: float = Field(default=50.0, ge=0)

    # Premium
    premium_name: str = Field(default="Premium")
    premium_daily_limit: int | None = Field(default=None, ge=0)
    premium_monthly_limit: int | None = Field(
        default=None,
        ge=0,
        description="Premium is unbounded unless a cap is configured",
    )
    premium_max_resolution: str = Field(default="2160p")
    premium_priority: PriorityLabel = Field(default="high")
    premium_duration_days: int = Field(default=365, ge=1)
    premium_price: float = Field(default=360.0, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="PLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    def tier_fields(self, tier: str) -> dict[str, Any]:
        """Return the un-prefixed fields configured for ``tier``."""
        prefix = f"{tier}_"
        values = {
            name[len(prefix):]: value
            for name, value in self.model_dump().items()
            if name.startswith(prefix)
        }
        if not values:
            raise KeyError(tier)
        return values
