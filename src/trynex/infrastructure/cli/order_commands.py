"""CLI commands for reading and updating orders."""

from __future__ import annotations

import click

from trynex.application.dto import OrderDTO
from trynex.application.order_status import OrderStatusEngine
from trynex.application.show_order import ShowOrderHandler, to_dto
from trynex.application.support import whatsapp_support_url
from trynex.domain.exceptions import DomainException
from trynex.domain.model.order import OrderStatus
from trynex.infrastructure.bootstrap import order_repository
from trynex.infrastructure.cli.context import CliContext, pass_cli_context


def display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    tracking = dto.tracking_id
    if dto.tracking_id_is_provisional:
        tracking = f"{tracking}  (provisional, not a real tracking id)"
    click.echo(f"Tracking: {tracking}")
    if dto.id:
        click.echo(f"Order:    #{dto.id}")
    click.echo(f"Status:   {dto.status_label} ({dto.status})")
    click.echo(f"Customer: {dto.customer_name}  {dto.phone}")
    click.echo(f"Address:  {dto.address_line}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()

    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*56}")
    for item in dto.items:
        click.echo(
            f"  {item.name:<24} {item.quantity:>5} {item.unit_price:>12} {item.line_total:>12}"
        )
    click.echo(f"  {'-'*56}")
    click.echo(f"  {'Delivery fee':<30} {dto.delivery_fee:>26}")
    click.echo(f"  {'Order Total':<30} {dto.total:>26}")
    click.echo()
    click.echo(f"Payment:  {dto.payment_method}  trx={dto.transaction_id or '-'}")
    if dto.instructions:
        click.echo("Instructions:")
        for line in dto.instructions.splitlines():
            click.echo(f"  {line}")
    if dto.images:
        click.echo("Images:")
        for url in dto.images:
            click.echo(f"  {url[:80]}")


@click.command("track")
@click.option("--tracking-id", required=True, help="Tracking id issued at checkout.")
@pass_cli_context
def order_track(ctx: CliContext, tracking_id: str) -> None:
    """Look up an order by its tracking id."""
    handler = ShowOrderHandler(order_repo=order_repository(ctx.settings, ctx.offline))

    try:
        dto = handler.by_tracking_id(tracking_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)
    click.echo()
    click.echo(f"Support: {whatsapp_support_url(ctx.settings.whatsapp_number, ctx.settings.whatsapp_template, dto.tracking_id)}")


@click.command("list")
@pass_cli_context
def order_list(ctx: CliContext) -> None:
    """List all orders."""
    engine = OrderStatusEngine(order_repository(ctx.settings, ctx.offline))

    try:
        orders = engine.refresh()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<38} {'Tracking':<20} {'Customer':<20} {'Status':<12} {'Total':>10}")
    click.echo("-" * 104)
    for record in orders:
        dto = to_dto(record)
        click.echo(
            f"{dto.id or '-':<38} {dto.tracking_id:<20} {dto.customer_name[:20]:<20} "
            f"{dto.status:<12} {dto.total:>10}"
        )


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@pass_cli_context
def order_show(ctx: CliContext, order_id: str) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository(ctx.settings, ctx.offline))

    try:
        dto = handler.by_id(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("set-status")
@click.option("--id", "order_id", required=True, help="Order ID to update.")
@click.option(
    "--status",
    required=True,
    type=click.Choice([s.value for s in OrderStatus], case_sensitive=False),
    help="New status; any status may follow any other.",
)
@pass_cli_context
def order_set_status(ctx: CliContext, order_id: str, status: str) -> None:
    """Set an order's status."""
    engine = OrderStatusEngine(order_repository(ctx.settings, ctx.offline))

    try:
        engine.set_status(order_id, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    updated = engine.find(order_id)
    label = OrderStatus.label_for(updated.status if updated else status)
    click.echo(f"Order #{order_id} is now {label}.")
