"""Application service: the four-step checkout wizard.

Drives identity -> address -> payment -> review, owns the form state and
per-step validation, keeps the derived totals in sync with the chosen
district, and issues exactly one order-creation request per confirmed
attempt.

The wizard is handed a snapshot of the cart. The only way it touches
the shared cart is the ``on_cart_clear`` callback after a successful
submission.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

import structlog

from trynex.domain.exceptions import (
    OrderSubmissionError,
    SubmissionInProgressError,
    ValidationError,
)
from trynex.domain.model.address import DeliveryFeePolicy, available_thanas
from trynex.domain.model.cart import CartLineItem
from trynex.domain.model.checkout_form import CheckoutFormData, CheckoutStep, validate_step
from trynex.domain.model.order import (
    PAYMENT_METHOD_ADVANCE,
    PAYMENT_METHOD_COD,
    OrderCreateRequest,
    OrderRecord,
    PaymentInfo,
    collect_customizations,
)
from trynex.domain.model.value_objects import Money
from trynex.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)

DEFAULT_ADVANCE_PAYMENT = 100
MAX_ADVANCE_PAYMENT = 1_000_000
NO_THANA_DATA_NOTICE = "এই জেলার থানার তথ্য নেই, থানা ছাড়াই ঠিকানা লিখুন"


class WizardState(Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"


class CancellationToken:
    """Signals that the wizard's owner has gone away."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class CustomOrderTerms:
    """A custom order only collects an advance payment up front."""

    advance_payment: Money

    @staticmethod
    def from_query(params: Mapping[str, str]) -> CustomOrderTerms | None:
        """Read ``customOrder`` / ``advancePayment`` query parameters."""
        if str(params.get("customOrder", "")).lower() != "true":
            return None
        raw = params.get("advancePayment")
        try:
            value = Decimal(str(raw).strip()) if raw else None
        except InvalidOperation:
            value = None
        if value is None or not value.is_finite() or value > MAX_ADVANCE_PAYMENT:
            amount = DEFAULT_ADVANCE_PAYMENT
        else:
            amount = int(value) if value > 0 else 0
        return CustomOrderTerms(advance_payment=Money.of(amount))


class CheckoutWizard:

    def __init__(
        self,
        cart_items: Iterable[CartLineItem],
        order_repository: OrderRepository,
        *,
        fee_policy: DeliveryFeePolicy | None = None,
        custom_order: CustomOrderTerms | None = None,
        on_cart_clear: Callable[[], None] | None = None,
        on_success: Callable[[OrderRecord], None] | None = None,
    ) -> None:
        self._items = tuple(cart_items)
        self._order_repository = order_repository
        self._fee_policy = fee_policy or DeliveryFeePolicy()
        self._custom_order = custom_order
        self._on_cart_clear = on_cart_clear
        self._on_success = on_success
        self._lifetime = CancellationToken()

        self.form = CheckoutFormData()
        self.step = CheckoutStep.IDENTITY
        self.state = WizardState.EDITING
        self.errors: dict[str, str] = {}
        self.notice: str | None = None
        self.last_error: OrderSubmissionError | None = None
        self.completed_order: OrderRecord | None = None

    # --- Derived totals (recomputed on every read) ----------------------------

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return self._items

    @property
    def is_custom_order(self) -> bool:
        return self._custom_order is not None

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for item in self._items:
            result = result + item.line_total
        return result

    @property
    def delivery_fee(self) -> int:
        return self._fee_policy.fee_for(self.form.district, self.subtotal.amount)

    @property
    def total(self) -> Money:
        return self.subtotal + Money.of(self.delivery_fee)

    @property
    def amount_to_collect(self) -> Money:
        if self._custom_order is not None:
            return self._custom_order.advance_payment
        return self.total

    @property
    def available_thanas(self) -> list[str]:
        return available_thanas(self.form.district)

    @property
    def can_submit(self) -> bool:
        return self.step == CheckoutStep.REVIEW and self.state == WizardState.EDITING

    # --- Form editing ---------------------------------------------------------

    def update(self, **values: Any) -> None:
        """Set form fields; unknown names are a programming error."""
        unknown = set(values) - CheckoutFormData.field_names()
        if unknown:
            raise TypeError(f"Unknown checkout fields: {', '.join(sorted(unknown))}")

        district_changed = "district" in values and values["district"] != self.form.district
        for name, value in values.items():
            setattr(self.form, name, "" if value is None else str(value))

        if district_changed:
            self._on_district_changed()

    def _on_district_changed(self) -> None:
        thanas = self.available_thanas
        if self.form.thana and self.form.thana not in thanas:
            self.form.thana = ""
        self.errors.pop("district", None)
        self.errors.pop("thana", None)
        if self.form.district and not thanas:
            self.notice = NO_THANA_DATA_NOTICE
        else:
            self.notice = None
        logger.debug(
            "Checkout district changed",
            district=self.form.district,
            delivery_fee=self.delivery_fee,
            thana_count=len(thanas),
        )

    # --- Navigation -----------------------------------------------------------

    def validate(self, step: CheckoutStep | int) -> dict[str, str]:
        self.errors = validate_step(self.form, step)
        return dict(self.errors)

    def next_step(self) -> CheckoutStep:
        """Advance one step if the current one validates."""
        if self.step == CheckoutStep.REVIEW:
            return self.step
        errors = self.validate(self.step)
        if errors:
            raise ValidationError(
                f"Step {int(self.step)} has invalid fields: {', '.join(errors)}",
                errors=errors,
                step=int(self.step),
            )
        self.step = CheckoutStep(self.step + 1)
        return self.step

    def previous_step(self) -> CheckoutStep:
        """Go back one step; earlier steps are never re-validated."""
        if self.step > CheckoutStep.IDENTITY:
            self.step = CheckoutStep(self.step - 1)
        self.errors = {}
        return self.step

    def go_to(self, step: CheckoutStep | int) -> CheckoutStep:
        step = CheckoutStep(step)
        if step > self.step:
            raise ValidationError("Cannot skip ahead; use next_step() to advance")
        self.step = step
        self.errors = {}
        return self.step

    # --- Submission -----------------------------------------------------------

    def build_request(self) -> OrderCreateRequest:
        item_instructions, images = collect_customizations(self._items)
        to_collect = self.amount_to_collect
        payment = PaymentInfo(
            method=PAYMENT_METHOD_ADVANCE if self.is_custom_order else PAYMENT_METHOD_COD,
            payment_number=self.form.payment_number.strip(),
            transaction_id=self.form.transaction_id.strip(),
            amount_paid=to_collect,
            delivery_fee=self.delivery_fee,
        )
        return OrderCreateRequest(
            items=self._items,
            customer_name=self.form.customer_name.strip(),
            phone=self.form.phone.strip(),
            district=self.form.district,
            thana=self.form.thana,
            address=self.form.address.strip(),
            total=to_collect,
            payment_info=payment,
            custom_instructions=item_instructions + self.form.special_instructions,
            custom_images=tuple(images),
            is_custom_order=self.is_custom_order,
            advance_payment_amount=self._custom_order.advance_payment if self._custom_order else None,
        )

    def submit(self, cancel_token: CancellationToken | None = None) -> OrderRecord | None:
        """Confirm the order from the review step.

        Returns the created record, or None when the wizard was closed
        while the request was in flight. Raises OrderSubmissionError on
        failure, leaving the form, the cart and the review step intact.
        """
        if self.state == WizardState.SUBMITTING:
            raise SubmissionInProgressError("Order submission already in progress")
        if self.step != CheckoutStep.REVIEW:
            raise ValidationError("Orders can only be confirmed from the review step")

        errors = self.validate(CheckoutStep.PAYMENT)
        if errors:
            raise ValidationError(
                "Payment details are incomplete",
                errors=errors,
                step=int(CheckoutStep.PAYMENT),
            )

        request = self.build_request()
        self.state = WizardState.SUBMITTING
        self.last_error = None
        logger.info(
            "Submitting order",
            item_count=len(request.items),
            total=request.total.to_wire(),
            is_custom_order=request.is_custom_order,
        )

        try:
            record = self._create(request)
        except OrderSubmissionError as exc:
            if self._is_cancelled(cancel_token):
                logger.info("Discarding order failure after checkout closed", error=str(exc))
                return None
            self.last_error = exc
            logger.warning("Order submission failed", kind=exc.kind, error=str(exc))
            raise
        finally:
            # Never leave the wizard stuck mid-submission.
            if self.state == WizardState.SUBMITTING:
                self.state = WizardState.EDITING

        if self._is_cancelled(cancel_token):
            logger.info("Discarding order response after checkout closed", order_id=record.id)
            return None

        logger.info("Order created", order_id=record.id, tracking_id=record.tracking_id)
        self.reset()
        self.completed_order = record
        self.state = WizardState.SUCCEEDED
        if self._on_cart_clear is not None:
            self._on_cart_clear()
        if self._on_success is not None:
            self._on_success(record)
        return record

    def _create(self, request: OrderCreateRequest) -> OrderRecord:
        """Call the repository; any failure surfaces as OrderSubmissionError."""
        try:
            return self._order_repository.create(request)
        except OrderSubmissionError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while creating order")
            raise OrderSubmissionError(
                f"Order could not be placed: {exc}",
                kind=OrderSubmissionError.MALFORMED,
            ) from exc

    # --- Lifetime -------------------------------------------------------------

    def reset(self) -> None:
        """Return to a clean step 1 so a reopened wizard starts fresh."""
        self.form = CheckoutFormData()
        self.step = CheckoutStep.IDENTITY
        self.state = WizardState.EDITING
        self.errors = {}
        self.notice = None
        self.last_error = None

    def close(self) -> None:
        self._lifetime.cancel()

    def _is_cancelled(self, token: CancellationToken | None) -> bool:
        return self._lifetime.cancelled or (token is not None and token.cancelled)
