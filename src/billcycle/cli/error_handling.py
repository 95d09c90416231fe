"""CLI error handling helpers."""

import click

from billcycle.domain.errors import DomainError, SettlementConflictError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, SettlementConflictError):
        click.echo("Run 'billcycle view' again to pick up the settled occurrence.", err=True)
    ctx.exit(1)
