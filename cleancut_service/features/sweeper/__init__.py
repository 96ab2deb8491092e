"""Expiry sweeper and monthly usage reset."""

from .service import SweeperService, SweepSummary

__all__ = ["SweepSummary", "SweeperService"]
