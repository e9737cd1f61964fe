import click

from trynex.domain.exceptions import DomainException
from trynex.infrastructure.cli.address_commands import delivery_fee, thanas
from trynex.infrastructure.cli.admin_commands import admin_login, admin_logout, admin_orders
from trynex.infrastructure.cli.checkout_commands import checkout
from trynex.infrastructure.cli.context import CliContext
from trynex.infrastructure.cli.order_commands import order_track
from trynex.infrastructure.config import Settings
from trynex.infrastructure.logging import configure_logging


@click.group()
@click.option("--offline", is_flag=True, default=False, help="Use the local JSON order store.")
@click.pass_context
def cli(ctx: click.Context, offline: bool) -> None:
    """TryneX — checkout and order management"""
    configure_logging()
    try:
        settings = Settings.from_env()
    except DomainException as exc:
        raise click.ClickException(str(exc))
    ctx.obj = CliContext(settings=settings, offline=offline)


@cli.group()
def admin() -> None:
    """Admin back office."""


# Register subcommands
cli.add_command(delivery_fee)
cli.add_command(thanas)
cli.add_command(checkout)
cli.add_command(order_track)
admin.add_command(admin_login)
admin.add_command(admin_logout)
admin.add_command(admin_orders)
