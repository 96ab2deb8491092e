"""Plan catalog built from PlanSettings."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from cleancut_service.core.settings import get_plan_settings
from cleancut_service.features.accounts.models import PlanTier

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cleancut_service.core.settings.plans import PlanSettings, PriorityLabel


@dataclass(frozen=True, slots=True)
class PlanLimits:
    """Quota, resolution ceiling and queue priority for one tier.

    ``None`` limits are unbounded.
    """

    tier: PlanTier
    name: str
    daily_limit: int | None
    monthly_limit: int | None
    max_resolution: str
    priority: PriorityLabel
    duration_days: int
    price: float

    @property
    def features(self) -> list[str]:
        """Human-readable feature list for the plan catalog endpoint."""
        items: list[str] = []
        if self.daily_limit is not None:
            items.append(f"{self.daily_limit} uploads per day")
        if self.monthly_limit is not None:
            items.append(f"{self.monthly_limit} uploads per month")
        if self.daily_limit is None and self.monthly_limit is None:
            items.append("Unlimited uploads")
        items.append(f"Up to {self.max_resolution} output")
        items.append(f"{self.priority.capitalize()} processing priority")
        return items


PlanCatalog = dict[str, PlanLimits]


def build_plan_catalog(settings: PlanSettings) -> PlanCatalog:
    """Map each tier value to its configured limits."""
    catalog: PlanCatalog = {}
    for tier in PlanTier:
        fields = settings.tier_fields(tier.value)
        catalog[tier.value] = PlanLimits(
            tier=tier,
            name=fields["name"],
            daily_limit=fields["daily_limit"],
            monthly_limit=fields["monthly_limit"],
            max_resolution=fields["max_resolution"],
            priority=fields["priority"],
            duration_days=fields["duration_days"],
            price=fields["price"],
        )
    return catalog


@lru_cache(maxsize=1)
def get_plan_catalog() -> Mapping[str, PlanLimits]:
    """Get the catalog for the process-wide plan settings."""
    return build_plan_catalog(get_plan_settings())
