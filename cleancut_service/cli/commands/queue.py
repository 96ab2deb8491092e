"""Work queue inspection commands."""

import click

from cleancut_service.cli.utils import coro, rows, section, success


@click.group(name="queue")
def queue() -> None:
    """Work queue inspection."""


@queue.command()
@coro
async def stats() -> None:
    """Show entry counts by state."""
    from cleancut_service.features.projects.lifecycle import ProjectLifecycle
    from cleancut_service.features.queue import QueueService
    from cleancut_service.infra.database import get_async_session

    async with get_async_session() as session:
        counts = await QueueService(ProjectLifecycle()).stats(session)

    section("Queue entries")
    rows(counts.items(), width=12)


@queue.command()
@coro
async def reap() -> None:
    """Count lapsed worker leases as failed attempts."""
    from cleancut_service.features.projects.lifecycle import ProjectLifecycle
    from cleancut_service.features.queue import QueueService
    from cleancut_service.infra.database import get_async_session

    async with get_async_session() as session:
        count = await QueueService(ProjectLifecycle()).reap_expired_leases(session)
        await session.commit()
    success(f"Reaped {count} expired leases")
