"""Main CLI entry point for cleancut-service management commands."""

import click

from cleancut_service.cli.commands import accounts, database, queue, server, sweep
from cleancut_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="cleancut-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """CleanCut Service CLI - management commands for the processing backend.

    \b
    Command Groups:
      db         Database setup and inspection
      sweep      Expired project cleanup and monthly usage reset
      queue      Work queue inspection
      accounts   Account provisioning and plan changes
      server     Run the API server

    \b
    Quick Start:
      cleancut-service db init
      cleancut-service accounts create --email me@example.com --plan premium
      cleancut-service server run
    """
    ctx.ensure_object(dict)


cli.add_command(database.db)
cli.add_command(sweep.sweep)
cli.add_command(queue.queue)
cli.add_command(accounts.accounts)
cli.add_command(server.server)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
