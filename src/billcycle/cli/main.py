"""Main CLI entry point."""

import click
from billcycle.database.factories import create_sqlite_database
from billcycle.logging_config import configure_logging

# Import and register all commands at module level
from billcycle.cli.commands import (
    obligation,
    month,
    settlement,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BILLCYCLE_DB_PATH environment variable)",
    envvar="BILLCYCLE_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Billcycle - Bills to pay and income to receive.

    Track one-off, installment and fixed monthly obligations and confirm
    them month by month.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose=verbose)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
obligation.register_commands(cli)
month.register_commands(cli)
settlement.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
