"""CLI commands for the admin back office."""

from __future__ import annotations

import click

from trynex.domain.exceptions import DomainException
from trynex.infrastructure.bootstrap import admin_session
from trynex.infrastructure.cli.context import CliContext, pass_cli_context
from trynex.infrastructure.cli.order_commands import order_list, order_set_status, order_show


@click.command("login")
@click.option("--email", required=True, help="Admin email.")
@click.option("--password", prompt=True, hide_input=True, help="Admin password.")
@pass_cli_context
def admin_login(ctx: CliContext, email: str, password: str) -> None:
    """Start an admin session."""
    session = admin_session(ctx.settings, ctx.offline)

    try:
        session.login(email, password)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Logged in as {session.email}.")


@click.command("logout")
@pass_cli_context
def admin_logout(ctx: CliContext) -> None:
    """End the admin session."""
    admin_session(ctx.settings, ctx.offline).logout()
    click.echo("Logged out.")


@click.group("orders")
@pass_cli_context
def admin_orders(ctx: CliContext) -> None:
    """Manage orders (admin only)."""
    try:
        admin_session(ctx.settings, ctx.offline).require()
    except DomainException as exc:
        raise click.ClickException(str(exc))


admin_orders.add_command(order_list)
admin_orders.add_command(order_show)
admin_orders.add_command(order_set_status)
