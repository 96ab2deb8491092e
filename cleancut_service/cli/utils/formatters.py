"""Output formatting utilities for CLI commands."""

from collections.abc import Iterable

import click


def success(message: str) -> None:
    """Print a success message in green."""
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    """Print an error message in red to stderr."""
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    click.secho(f"⚠ {message}", fg="yellow")


def info(message: str) -> None:
    click.secho(f"ℹ {message}", fg="blue")


def section(title: str) -> None:
    """Print a bold title between rules."""
    rule = "=" * 60
    click.secho(f"\n{rule}", dim=True)
    click.secho(title, bold=True)
    click.secho(rule, dim=True)


def rows(pairs: Iterable[tuple[str, object]], *, width: int = 16) -> None:
    """Print ``label value`` pairs with labels padded to ``width``."""
    for label, value in pairs:
        click.echo(f"  {label:<{width}} {value}")


def quota(used: int, limit: int | None) -> str:
    """Render usage against a cap; ``None`` means the tier has no cap."""
    return f"{used} / {'unlimited' if limit is None else limit}"
