"""Repository for accounts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import or_, update

from cleancut_service.core.database import BaseRepository

from .models import Account

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class AccountRepository(BaseRepository[Account]):
    """Account lookups plus the monthly bulk counter reset."""

    def __init__(self) -> None:
        super().__init__(Account)

    async def reset_monthly_counters(self, session: AsyncSession, month_key: str) -> int:
        """Zero every account's monthly counter not yet reset for ``month_key``.

        Accounts already tagged with ``month_key`` are skipped, so running this
        twice in the same month changes nothing the second time.

        Returns:
            Number of accounts reset.
        """
        stmt = (
            update(Account)
            .where(or_(Account.usage_month.is_(None), Account.usage_month < month_key))
            .values(uploads_this_month=0, usage_month=month_key)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        count = result.rowcount or 0
        self._logger.info(
            "Monthly counters reset",
            extra={"month": month_key, "accounts": count, "operation": "db.reset_monthly"},
        )
        return count


_account_repository: AccountRepository | None = None


def get_account_repository() -> AccountRepository:
    """Get the AccountRepository singleton."""
    global _account_repository
    if _account_repository is None:
        _account_repository = AccountRepository()
    return _account_repository
