"""Accounts: plan tier and upload usage."""

from .models import Account, PlanTier
from .repository import AccountRepository, get_account_repository

__all__ = ["Account", "AccountRepository", "PlanTier", "get_account_repository"]
