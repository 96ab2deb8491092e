"""Utilities for running async operations in CLI commands."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

T = TypeVar("T")


def coro(f: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """
    Decorator that makes an async function synchronous for Click.

    The database engine is disposed before the loop closes so pooled
    connections do not outlive it.

    Usage:
        @cli.command()
        @coro
        async def my_command():
            result = await some_async_function()
            click.echo(result)
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        async def _run() -> T:
            from cleancut_service.infra.database import close_database

            try:
                return await f(*args, **kwargs)
            finally:
                await close_database()

        return asyncio.run(_run())

    return wrapper
