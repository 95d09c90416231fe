"""CLI helpers for month, date and amount arguments."""

from datetime import date
from decimal import Decimal
from typing import Optional

import click

from billcycle.domain.entities import ObligationKind, YearMonth
from billcycle.utils.amount_parser import parse_amount
from billcycle.utils.date_parser import parse_date, parse_month

KIND_CHOICE = click.Choice([kind.value for kind in ObligationKind])


def resolve_cli_month(ctx, month: Optional[str]) -> YearMonth:
    """Resolve the --month option, defaulting to the current month."""
    if month is None:
        return YearMonth.of(date.today())
    try:
        return parse_month(month)
    except ValueError as e:
        click.echo(f"Error: Invalid month: {e}", err=True)
        ctx.exit(1)


def resolve_cli_date(ctx, value: str, label: str = "date") -> date:
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_cli_amount(ctx, value: str) -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def resolve_cli_kind(kind: Optional[str]) -> Optional[ObligationKind]:
    return ObligationKind(kind) if kind else None
