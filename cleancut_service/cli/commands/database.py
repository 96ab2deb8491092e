"""Database management commands.

Example:bash
    cleancut-service db init     # verify connectivity and create tables
    cleancut-service db check    # show row counts per table
"""

import sys

import click
from sqlalchemy import func, select

from cleancut_service.cli.utils import coro, error, info, rows, section, success
from cleancut_service.core.settings import get_db_settings


@click.group(name="db")
def db() -> None:
    """Database management commands."""


@db.command()
@coro
async def init() -> None:
    """Verify connectivity and create any missing tables."""
    from cleancut_service.infra.database import init_database

    db_settings = get_db_settings()
    info(f"Connecting to: {db_settings.database_url.split('@')[-1]}")
    try:
        await init_database()
    except Exception as e:
        error(f"Database initialization failed: {e}")
        sys.exit(1)
    success("Database ready")


@db.command()
@coro
async def check() -> None:
    """Show row counts for every table."""
    from cleancut_service.features.models import Account, Project, QueueEntry
    from cleancut_service.infra.database import get_async_session

    section("Table row counts")
    counts = []
    async with get_async_session() as session:
        for model in (Account, Project, QueueEntry):
            count = (await session.execute(select(func.count()).select_from(model))).scalar_one()
            counts.append((model.__tablename__, count))
    rows(counts)
