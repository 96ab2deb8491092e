"""Subscription plans: catalog and upload eligibility policy."""

from .catalog import PlanCatalog, PlanLimits, build_plan_catalog, get_plan_catalog
from .policy import (
    EligibilityDecision,
    RejectionReason,
    apply_upload,
    evaluate_upload_eligibility,
    month_key,
)

__all__ = [
    "EligibilityDecision",
    "PlanCatalog",
    "PlanLimits",
    "RejectionReason",
    "apply_upload",
    "build_plan_catalog",
    "evaluate_upload_eligibility",
    "get_plan_catalog",
    "month_key",
]
