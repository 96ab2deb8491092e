"""Expiry sweeper commands."""

import sys
from uuid import UUID

import click

from cleancut_service.cli.utils import coro, error, info, success, warning


@click.group(name="sweep")
def sweep() -> None:
    """Expired project cleanup and usage resets."""


@sweep.command(name="run")
@coro
async def run() -> None:
    """Delete every expired project and its files now."""
    from cleancut_service.features.sweeper import SweeperService
    from cleancut_service.infra.database import get_async_session

    async with get_async_session() as session:
        summary = await SweeperService().sweep_expired(session)

    success(f"Swept {summary.deleted}/{summary.scanned} expired projects")
    if summary.failed:
        warning(f"{summary.failed} projects could not be deleted; see logs")
    for ref in summary.orphaned_refs:
        warning(f"Possible orphaned file: {ref}")


@sweep.command(name="reclaim")
@click.argument("project_id", type=click.UUID)
@coro
async def reclaim(project_id: UUID) -> None:
    """Delete one project and its files regardless of expiry."""
    from cleancut_service.features.sweeper import SweeperService
    from cleancut_service.infra.database import get_async_session

    async with get_async_session() as session:
        deleted = await SweeperService().reclaim(session, project_id)
    if deleted:
        success(f"Project {project_id} deleted")
    else:
        info(f"Project {project_id} not found, nothing to do")


@sweep.command(name="reset-monthly")
@coro
async def reset_monthly() -> None:
    """Reset monthly upload counters for the current month."""
    from cleancut_service.features.sweeper import SweeperService
    from cleancut_service.infra.database import get_async_session

    try:
        async with get_async_session() as session:
            count = await SweeperService().reset_monthly_counters(session)
    except Exception as e:
        error(f"Monthly reset failed: {e}")
        sys.exit(1)
    success(f"Reset monthly counters for {count} accounts")
