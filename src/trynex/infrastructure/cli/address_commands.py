"""CLI commands for the district / delivery-fee table."""

from __future__ import annotations

import click

from trynex.domain.exceptions import DomainException
from trynex.domain.model.address import DISTRICTS, available_thanas
from trynex.domain.model.value_objects import Money
from trynex.infrastructure.bootstrap import fee_policy
from trynex.infrastructure.cli.context import CliContext, pass_cli_context


@click.command("fee")
@click.option("--district", default="", help="District name (e.g. ঢাকা).")
@click.option("--subtotal", required=True, help="Cart subtotal in taka.")
@pass_cli_context
def delivery_fee(ctx: CliContext, district: str, subtotal: str) -> None:
    """Show the delivery fee for a district and cart subtotal."""
    try:
        amount = Money.of(subtotal)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    fee = fee_policy(ctx.settings).fee_for(district, amount.amount)
    click.echo(f"Delivery fee: {fee} ৳")
    click.echo(f"Total:        {amount + Money.of(fee)}")


@click.command("thanas")
@click.option("--district", default=None, help="District name; omit to list districts.")
def thanas(district: str | None) -> None:
    """List districts, or the thanas of one district."""
    if district is None:
        for name in DISTRICTS:
            click.echo(name)
        return

    names = available_thanas(district)
    if not names:
        click.echo(f"No thana data for '{district}'; the thana field is optional there.")
        return
    for name in names:
        click.echo(name)
