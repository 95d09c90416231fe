"""Monthly view commands."""

from datetime import date

import click
from billcycle.domain.months import month_options
from billcycle.domain.obligation import ObligationService
from billcycle.cli.month_resolution import KIND_CHOICE, resolve_cli_kind, resolve_cli_month


def _status(occurrence) -> str:
    if occurrence.is_virtual:
        return "virtual"
    if occurrence.settled:
        return f"settled {occurrence.settled_date}"
    return "open"


@click.command("view")
@click.option("--month", help="Month to show (YYYY-MM, 'last month', 'next month'); defaults to this month")
@click.option("--kind", type=KIND_CHOICE, help="Only payables or receivables")
@click.pass_context
def view_month(ctx, month: str | None, kind: str | None):
    """View the obligations due in a month.

    Fixed obligations not yet settled for the month are shown as virtual
    occurrences with an ID of the form virtual:<template>:<YYYY-MM>.
    """
    service = ObligationService(ctx.obj["db"])
    target_month = resolve_cli_month(ctx, month)

    occurrences = service.occurrences_for_month(target_month, kind=resolve_cli_kind(kind))

    if not occurrences:
        click.echo(f"No obligations for {target_month}.")
        return

    click.echo(f"\nObligations for {target_month} ({len(occurrences)}):")
    click.echo("-" * 118)
    click.echo(
        f"{'ID':<48} {'Date':<12} {'Kind':<11} {'Inst.':<6} {'Amount':>12}  {'Status':<18} Description"
    )
    click.echo("-" * 118)

    for occurrence in occurrences:
        installment = f"{occurrence.installment}/{occurrence.installment_count}"
        click.echo(
            f"{occurrence.occurrence_id:<48} {str(occurrence.scheduled_date):<12} "
            f"{occurrence.kind.value:<11} {installment:<6} {occurrence.amount:>12,.2f}  "
            f"{_status(occurrence):<18} {occurrence.description[:30]}"
        )


@click.command("summary")
@click.option("--month", help="Month to summarize (YYYY-MM); defaults to this month")
@click.option("--kind", type=KIND_CHOICE, help="Only payables or receivables")
@click.pass_context
def summarize_month(ctx, month: str | None, kind: str | None):
    """Show forecast and settled totals for a month."""
    service = ObligationService(ctx.obj["db"])
    target_month = resolve_cli_month(ctx, month)

    summary = service.summarize_month(target_month, kind=resolve_cli_kind(kind))

    label = f" ({summary.kind.value})" if summary.kind else ""
    click.echo(f"Summary for {summary.month}{label}")
    click.echo(f"  Occurrences: {summary.occurrence_count} ({summary.virtual_count} projected)")
    click.echo(f"  Total:       {summary.total:,.2f}")
    click.echo(f"  Settled:     {summary.settled_total:,.2f}")
    click.echo(f"  Outstanding: {summary.outstanding_total:,.2f}")
    if summary.settled_by_responsible:
        click.echo("  Settled by responsible party:")
        for party, amount in sorted(summary.settled_by_responsible.items()):
            click.echo(f"    {party}: {amount:,.2f}")


@click.command("months")
def list_months():
    """List the selectable months (11 back, 6 ahead)."""
    today = date.today()
    for option in month_options(today):
        marker = " *" if option.contains(today) else ""
        click.echo(f"{option}{marker}")


def register_commands(cli):
    """Register month commands with main CLI."""
    cli.add_command(view_month)
    cli.add_command(summarize_month)
    cli.add_command(list_months)
