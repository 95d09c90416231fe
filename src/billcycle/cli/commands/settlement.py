"""Settlement commands."""

import click
from billcycle.domain.errors import DomainError
from billcycle.domain.obligation import ObligationService
from billcycle.cli.error_handling import handle_domain_error
from billcycle.cli.month_resolution import resolve_cli_date


@click.command("confirm")
@click.argument("occurrence_id")
@click.option("--date", "settled_on", help="Settlement date (defaults to today)")
@click.pass_context
def confirm_settlement(ctx, occurrence_id: str, settled_on: str | None):
    """Confirm an occurrence as paid/received.

    OCCURRENCE_ID is a stored obligation ID or a virtual ID as shown by
    'billcycle view'.

    Examples:
        billcycle confirm virtual:3f2a...:2024-03 --date 2024-03-05
        billcycle confirm 3f2a... --date yesterday
    """
    service = ObligationService(ctx.obj["db"])
    settlement_date = resolve_cli_date(ctx, settled_on, "settlement date") if settled_on else None

    try:
        row = service.confirm(occurrence_id, settlement_date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Settled obligation {row.id} on {row.settled_date}")
    if row.original_template_id and row.id != occurrence_id:
        click.echo(f"  From fixed obligation {row.original_template_id}")


@click.command("reverse")
@click.argument("obligation_id")
@click.pass_context
def reverse_settlement(ctx, obligation_id: str):
    """Reverse the settlement of a stored obligation."""
    service = ObligationService(ctx.obj["db"])

    try:
        row = service.reverse(obligation_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Reversed settlement of obligation {row.id}")


def register_commands(cli):
    """Register settlement commands with main CLI."""
    cli.add_command(confirm_settlement)
    cli.add_command(reverse_settlement)
