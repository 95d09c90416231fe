"""Obligation management commands."""

from dataclasses import replace

import click
from billcycle.domain.entities import ObligationDraft, ObligationKind, edit_target_for
from billcycle.domain.errors import DomainError
from billcycle.domain.obligation import ObligationService
from billcycle.cli.error_handling import handle_domain_error
from billcycle.cli.month_resolution import (
    KIND_CHOICE,
    resolve_cli_amount,
    resolve_cli_date,
)


@click.command("add")
@click.option("--description", required=True, help="Obligation description")
@click.option("--amount", required=True, help="Amount per occurrence (e.g., 123.45 or -123.45)")
@click.option(
    "--date",
    "scheduled",
    required=True,
    help="Due/receive date (YYYY-MM-DD or relative like 'today', 'next month')",
)
@click.option("--kind", type=KIND_CHOICE, default=ObligationKind.PAYABLE.value, show_default=True)
@click.option("--fixed", is_flag=True, help="Recur every month on the same day")
@click.option("--installments", type=int, default=1, show_default=True, help="Number of monthly installments")
@click.option("--category", help="Category")
@click.option("--counterparty", help="Payer or payee")
@click.option("--responsible", help="Responsible party")
@click.option("--notes", help="Notes")
@click.pass_context
def add_obligation(
    ctx,
    description: str,
    amount: str,
    scheduled: str,
    kind: str,
    fixed: bool,
    installments: int,
    category: str | None,
    counterparty: str | None,
    responsible: str | None,
    notes: str | None,
):
    """Add an obligation.

    Examples:
        billcycle add --description "Rent" --amount 1200.00 --date 2024-01-31 --fixed
        billcycle add --description "Laptop" --amount 250.00 --date 2024-01-10 --installments 4
        billcycle add --description "Salary" --amount 3000 --date 2024-01-05 --kind receivable --fixed
    """
    service = ObligationService(ctx.obj["db"])

    draft = ObligationDraft(
        description=description,
        amount=resolve_cli_amount(ctx, amount),
        scheduled_date=resolve_cli_date(ctx, scheduled),
        kind=ObligationKind(kind),
        is_fixed=fixed,
        installments=installments,
        category=category,
        counterparty=counterparty,
        responsible_party=responsible,
        notes=notes,
    )

    try:
        row = service.create(draft)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created obligation {row.id}")
    click.echo(f"  Description: {row.description}")
    click.echo(f"  Kind: {row.kind.value}")
    click.echo(f"  Date: {row.scheduled_date}")
    click.echo(f"  Amount: {row.amount:,.2f}")
    if row.is_fixed:
        click.echo("  Recurs: every month")
    elif row.installments > 1:
        click.echo(f"  Installments: {row.installments}")


@click.command("edit")
@click.argument("obligation_id")
@click.option("--description", help="Obligation description")
@click.option("--amount", help="Amount per occurrence")
@click.option("--date", "scheduled", help="Due/receive date")
@click.option("--kind", type=KIND_CHOICE)
@click.option("--fixed/--not-fixed", default=None, help="Recur every month on the same day")
@click.option("--installments", type=int, help="Number of monthly installments")
@click.option("--category", help="Category")
@click.option("--counterparty", help="Payer or payee")
@click.option("--responsible", help="Responsible party")
@click.option("--notes", help="Notes")
@click.pass_context
def edit_obligation(
    ctx,
    obligation_id: str,
    description: str | None,
    amount: str | None,
    scheduled: str | None,
    kind: str | None,
    fixed: bool | None,
    installments: int | None,
    category: str | None,
    counterparty: str | None,
    responsible: str | None,
    notes: str | None,
):
    """Edit a stored obligation or fixed template.

    Updates only the fields that are provided. Projected occurrences cannot be
    edited; edit their fixed template instead.
    """
    service = ObligationService(ctx.obj["db"])

    try:
        occurrence = service.find_occurrence(obligation_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if occurrence.is_virtual:
        target = occurrence
        draft = ObligationDraft.from_row(occurrence.template)
    else:
        target = edit_target_for(occurrence.row)
        draft = ObligationDraft.from_row(occurrence.row)

    changes = {}
    if description is not None:
        changes["description"] = description
    if amount is not None:
        changes["amount"] = resolve_cli_amount(ctx, amount)
    if scheduled is not None:
        changes["scheduled_date"] = resolve_cli_date(ctx, scheduled)
    if kind is not None:
        changes["kind"] = ObligationKind(kind)
    if fixed is not None:
        changes["is_fixed"] = fixed
    if installments is not None:
        changes["installments"] = installments
    if category is not None:
        changes["category"] = category or None
    if counterparty is not None:
        changes["counterparty"] = counterparty or None
    if responsible is not None:
        changes["responsible_party"] = responsible or None
    if notes is not None:
        changes["notes"] = notes or None

    try:
        row = service.save(target, replace(draft, **changes))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated obligation {row.id}")


@click.command("delete")
@click.argument("obligation_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_obligation(ctx, obligation_id: str, yes: bool):
    """Delete a stored obligation.

    Deleting a fixed template keeps the occurrences already settled from it.
    """
    service = ObligationService(ctx.obj["db"])

    try:
        occurrence = service.find_occurrence(obligation_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not yes and not occurrence.is_virtual:
        click.confirm(f"Delete obligation '{occurrence.description}'?", abort=True)

    try:
        service.delete(occurrence)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted obligation {obligation_id}")


def register_commands(cli):
    """Register obligation commands with main CLI."""
    cli.add_command(add_obligation)
    cli.add_command(edit_obligation)
    cli.add_command(delete_obligation)
