"""CLI command that walks a customer through the checkout wizard."""

from __future__ import annotations

import click

from trynex.application.checkout_wizard import CheckoutWizard, CustomOrderTerms
from trynex.application.dto import CartItemSpec
from trynex.application.show_order import to_dto
from trynex.application.support import whatsapp_support_url
from trynex.domain.exceptions import DomainException, OrderSubmissionError, ValidationError
from trynex.domain.model.address import DISTRICTS
from trynex.domain.model.cart import Cart, CartLineItem, Customization
from trynex.domain.model.checkout_form import CheckoutStep
from trynex.domain.model.order import OrderRecord
from trynex.domain.model.value_objects import Money
from trynex.infrastructure.bootstrap import fee_policy, order_repository
from trynex.infrastructure.cli.context import CliContext, pass_cli_context
from trynex.infrastructure.cli.order_commands import display_order


def _parse_items(raw: str) -> list[CartItemSpec]:
    """Parse 'p1:Mug:450:2,p2:T-Shirt:600:1' into CartItemSpec list."""
    specs: list[CartItemSpec] = []
    for entry in raw.split(","):
        entry = entry.strip()
        parts = entry.split(":")
        if len(parts) < 4:
            raise click.BadParameter(
                f"Invalid item format '{entry}'. Expected 'ID:Name:Price:Quantity'."
            )
        product_id, name, price, qty_str = parts[0], ":".join(parts[1:-2]), parts[-2], parts[-1]
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{name}'."
            )
        specs.append(CartItemSpec(product_id=product_id.strip(), name=name.strip(), price=price.strip(), quantity=qty))
    return specs


def _parse_pairs(values: tuple[str, ...], option: str) -> dict[str, list[str]]:
    """Parse repeated 'ID=VALUE' options into {id: [values]}."""
    result: dict[str, list[str]] = {}
    for value in values:
        if "=" not in value:
            raise click.BadParameter(f"Expected 'ID=VALUE', got '{value}'.", param_hint=option)
        key, text = value.split("=", 1)
        result.setdefault(key.strip(), []).append(text.strip())
    return result


def _build_cart(specs: list[CartItemSpec], notes: dict[str, list[str]], images: dict[str, list[str]]) -> Cart:
    cart = Cart()
    for spec in specs:
        customization = None
        if spec.product_id in notes or spec.product_id in images:
            customization = Customization(
                instructions=" ".join(notes.get(spec.product_id, [])),
                custom_images=tuple(images.get(spec.product_id, [])),
            )
        cart.add(
            CartLineItem(
                id=spec.product_id,
                name=spec.name,
                price=Money.of(spec.price),
                quantity=spec.quantity,
                customization=customization,
            )
        )
    return cart


def _show_errors(errors: dict[str, str]) -> None:
    for field, message in errors.items():
        click.secho(f"  ✗ {field}: {message}", fg="red", err=True)


def _prompt_identity(wizard: CheckoutWizard) -> None:
    wizard.update(
        customer_name=click.prompt("নাম", default=wizard.form.customer_name or None),
        phone=click.prompt("মোবাইল নম্বর (01XXXXXXXXX)", default=wizard.form.phone or None),
    )


def _prompt_address(wizard: CheckoutWizard) -> None:
    district = click.prompt(
        "জেলা",
        type=click.Choice(DISTRICTS),
        default=wizard.form.district or None,
        show_choices=True,
    )
    wizard.update(district=district)
    click.echo(f"ডেলিভারি চার্জ: {wizard.delivery_fee} ৳")

    thanas = wizard.available_thanas
    if thanas:
        wizard.update(
            thana=click.prompt(
                "থানা",
                type=click.Choice(thanas),
                default=wizard.form.thana or None,
                show_choices=True,
            )
        )
    elif wizard.notice:
        click.echo(wizard.notice)

    wizard.update(address=click.prompt("সম্পূর্ণ ঠিকানা", default=wizard.form.address or None))


def _prompt_payment(wizard: CheckoutWizard) -> None:
    click.echo(f"পরিশোধযোগ্য: {wizard.amount_to_collect}")
    wizard.update(
        payment_number=click.prompt("যে নম্বর থেকে পেমেন্ট করেছেন", default=wizard.form.payment_number or None),
        transaction_id=click.prompt("ট্রানজেকশন আইডি", default=wizard.form.transaction_id or None),
        special_instructions=click.prompt(
            "বিশেষ নির্দেশনা (ঐচ্ছিক)", default=wizard.form.special_instructions, show_default=False
        ),
    )


def _show_review(wizard: CheckoutWizard) -> None:
    form = wizard.form
    click.echo(f"নাম:      {form.customer_name}  {form.phone}")
    click.echo(f"ঠিকানা:   {form.address}, {form.thana or '-'}, {form.district}")
    click.echo(f"পেমেন্ট:  {form.payment_number}  trx={form.transaction_id}")
    click.echo()
    for item in wizard.items:
        click.echo(f"  {item.name:<24} x{item.quantity:<3} {str(item.line_total):>12}")
    click.echo(f"  {'সাবটোটাল':<28} {str(wizard.subtotal):>12}")
    click.echo(f"  {'ডেলিভারি চার্জ':<28} {str(Money.of(wizard.delivery_fee)):>12}")
    click.echo(f"  {'মোট':<28} {str(wizard.total):>12}")
    if wizard.is_custom_order:
        click.echo(f"  {'অগ্রিম পেমেন্ট':<28} {str(wizard.amount_to_collect):>12}")


_PROMPTS = {
    CheckoutStep.IDENTITY: _prompt_identity,
    CheckoutStep.ADDRESS: _prompt_address,
    CheckoutStep.PAYMENT: _prompt_payment,
}


def run_wizard(wizard: CheckoutWizard) -> OrderRecord | None:
    """Drive *wizard* with interactive prompts until the order is placed
    or the customer gives up."""
    while True:
        step = wizard.step
        click.secho(f"\n[{int(step)}/4] {step.title}", bold=True)

        if step != CheckoutStep.REVIEW:
            _PROMPTS[step](wizard)
            try:
                wizard.next_step()
            except ValidationError as exc:
                _show_errors(exc.errors)
            continue

        _show_review(wizard)
        if not click.confirm("অর্ডার নিশ্চিত করবেন?", default=True):
            if click.confirm("আগের ধাপে ফিরে যাবেন?", default=True):
                wizard.previous_step()
                continue
            wizard.close()
            return None

        try:
            return wizard.submit()
        except ValidationError as exc:
            _show_errors(exc.errors)
            wizard.go_to(CheckoutStep.PAYMENT)
        except OrderSubmissionError as exc:
            click.secho(f"অর্ডার ব্যর্থ: {exc}", fg="red", err=True)
            if not click.confirm("আবার চেষ্টা করবেন?", default=True):
                wizard.close()
                raise click.ClickException("Order was not placed.")


@click.command("checkout")
@click.option("--items", required=True, help="Cart as 'ID:Name:Price:Qty,ID:Name:Price:Qty'.")
@click.option("--note", "notes", multiple=True, help="Customization note as 'ID=TEXT'.")
@click.option("--image", "images", multiple=True, help="Customization image URL as 'ID=URL'.")
@click.option("--custom-order", is_flag=True, default=False, help="Collect only an advance payment.")
@click.option("--advance", default=None, help="Advance payment for a custom order (default 100).")
@pass_cli_context
def checkout(
    ctx: CliContext,
    items: str,
    notes: tuple[str, ...],
    images: tuple[str, ...],
    custom_order: bool,
    advance: str | None,
) -> None:
    """Place an order through the four-step checkout."""
    specs = _parse_items(items)

    try:
        cart = _build_cart(specs, _parse_pairs(notes, "--note"), _parse_pairs(images, "--image"))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    query = {"customOrder": "true" if custom_order else "false"}
    if advance is not None:
        query["advancePayment"] = advance

    wizard = CheckoutWizard(
        cart.snapshot(),
        order_repository(ctx.settings, ctx.offline),
        fee_policy=fee_policy(ctx.settings),
        custom_order=CustomOrderTerms.from_query(query),
        on_cart_clear=cart.clear,
    )

    record = run_wizard(wizard)
    if record is None:
        click.echo("Checkout cancelled.")
        return

    click.secho("\nধন্যবাদ! আপনার অর্ডার সফল হয়েছে", fg="green", bold=True)
    dto = to_dto(record)
    display_order(dto)
    click.echo()
    click.echo(f"Support: {whatsapp_support_url(ctx.settings.whatsapp_number, ctx.settings.whatsapp_template, dto.tracking_id)}")
