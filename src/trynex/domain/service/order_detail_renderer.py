"""Order detail renderer.

Rebuilds display-ready structures from a persisted ``OrderRecord``. The
order service has historically returned ``items``, ``custom_images`` and
``payment_info`` either as native JSON structures or as JSON-encoded
strings, so every reader goes through ``parse_flexible`` here instead of
decoding on its own.

Nothing in this module raises to the caller: a field that cannot be
decoded is logged and replaced by an empty/default value so the success
screen and admin views always render.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog

from trynex.domain.exceptions import MalformedRecordError, ValidationError
from trynex.domain.model.order import (
    PAYMENT_METHOD_ADVANCE,
    PAYMENT_METHOD_COD,
    OrderRecord,
    OrderStatus,
)
from trynex.domain.model.value_objects import Money

logger = structlog.get_logger(__name__)

# Probed in this order on image objects.
IMAGE_URL_KEYS = ("url", "dataUrl", "data", "src")
PROVISIONAL_TRACKING_PREFIX = "অস্থায়ী-"

_PAYMENT_METHOD_LABELS = {
    PAYMENT_METHOD_COD: "ক্যাশ অন ডেলিভারি",
    PAYMENT_METHOD_ADVANCE: "অগ্রিম পেমেন্ট",
    "bkash": "বিকাশ",
    "nagad": "নগদ",
    "upay": "উপায়",
}


# ---------------------------------------------------------------------------
# Flexible decoding
# ---------------------------------------------------------------------------


def decode_flexible(raw: Any, expected: type | tuple[type, ...], field: str) -> Any:
    """Strict variant of ``parse_flexible``: raises MalformedRecordError."""
    value = raw
    if isinstance(raw, (str, bytes)):
        try:
            value = json.loads(raw)
        except ValueError as exc:
            raise MalformedRecordError(f"{field} is not valid JSON: {exc}", field) from exc
    if not isinstance(value, expected):
        raise MalformedRecordError(
            f"{field} has unexpected type {type(value).__name__}", field
        )
    return value


def parse_flexible(
    raw: Any,
    *,
    expected: type | tuple[type, ...],
    default: Any,
    field: str = "value",
) -> Any:
    """Accept a native value or a JSON string holding one.

    ``None`` and blank strings mean "absent" and yield *default* quietly;
    anything undecodable is logged and also yields *default*.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    try:
        return decode_flexible(raw, expected, field)
    except MalformedRecordError as exc:
        logger.warning("Malformed order field", field=field, error=str(exc))
        return default


def _to_money(raw: Any, field: str) -> Money | None:
    if raw is None or raw == "":
        return None
    try:
        return Money.of(raw)
    except ValidationError as exc:
        logger.warning("Malformed order amount", field=field, value=raw, error=str(exc))
        return None


def _to_int(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError, OverflowError):
        return default


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemView:
    name: str
    quantity: int
    price: Money
    image_url: str | None = None
    customization: dict[str, Any] | None = None

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity


@dataclass(frozen=True)
class PaymentView:
    method: str = PAYMENT_METHOD_COD
    payment_number: str = ""
    transaction_id: str = ""
    amount_paid: Money | None = None
    delivery_fee: int | None = None

    @property
    def method_label(self) -> str:
        return _PAYMENT_METHOD_LABELS.get(self.method, self.method)


@dataclass(frozen=True)
class OrderDetail:
    id: str | None
    tracking_id: str
    tracking_id_is_provisional: bool
    customer_name: str
    phone: str
    district: str
    thana: str
    address: str
    items: list[OrderItemView]
    custom_images: list[str]
    payment: PaymentView
    total: Money | None
    status: str
    status_label: str
    custom_instructions: str
    is_custom_order: bool
    advance_payment_amount: Money | None
    created_at: datetime | None

    @property
    def items_subtotal(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result


# ---------------------------------------------------------------------------
# Field decoders
# ---------------------------------------------------------------------------


def decode_items(raw: Any) -> list[OrderItemView]:
    entries = parse_flexible(raw, expected=list, default=[], field="items")
    views: list[OrderItemView] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed order item", index=index, entry_type=type(entry).__name__)
            continue
        price = _to_money(entry.get("price", 0), field=f"items[{index}].price")
        if price is None:
            continue
        customization = entry.get("customization")
        views.append(
            OrderItemView(
                name=str(entry.get("name") or entry.get("product_name") or ""),
                quantity=max(1, _to_int(entry.get("quantity"), 1)),
                price=price,
                image_url=entry.get("image_url") or entry.get("imageUrl"),
                customization=customization if isinstance(customization, dict) else None,
            )
        )
    return views


def image_url_of(entry: Any) -> str | None:
    """URL for one custom-image entry, or None when it carries none."""
    if isinstance(entry, str):
        return entry.strip() or None
    if isinstance(entry, dict):
        for key in IMAGE_URL_KEYS:
            value = entry.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return None


def decode_custom_images(raw: Any) -> list[str]:
    entries = parse_flexible(raw, expected=list, default=[], field="custom_images")
    urls: list[str] = []
    for entry in entries:
        url = image_url_of(entry)
        if url is None:
            logger.debug("Skipping custom image without a usable URL", entry_type=type(entry).__name__)
            continue
        urls.append(url)
    return urls


def decode_payment_info(raw: Any) -> PaymentView:
    info = parse_flexible(raw, expected=dict, default=None, field="payment_info")
    if info is None:
        return PaymentView()
    fee = info.get("delivery_fee", info.get("deliveryFee"))
    return PaymentView(
        method=str(info.get("method") or PAYMENT_METHOD_COD),
        payment_number=str(info.get("payment_number") or info.get("paymentNumber") or ""),
        transaction_id=str(
            info.get("trx_id") or info.get("transaction_id") or info.get("transactionId") or ""
        ),
        amount_paid=_to_money(
            info.get("amount_paid", info.get("amountPaid", info.get("amount"))),
            field="payment_info.amount_paid",
        ),
        delivery_fee=_to_int(fee, 0) if fee is not None else None,
    )


def _parse_created_at(raw: Any) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Malformed order timestamp", value=raw)
        return None


def provisional_tracking_id(record: OrderRecord) -> str:
    """Display-only stand-in used when the server returned no tracking id."""
    suffix = record.id or str(int(time.time() * 1000))
    return f"{PROVISIONAL_TRACKING_PREFIX}{suffix}"


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def render_order(record: OrderRecord) -> OrderDetail:
    """Decode every polymorphic field of *record* for display."""
    provisional = not record.tracking_id
    if provisional:
        logger.warning("Order has no tracking id", order_id=record.id)
    tracking_id = record.tracking_id or provisional_tracking_id(record)

    return OrderDetail(
        id=record.id,
        tracking_id=tracking_id,
        tracking_id_is_provisional=provisional,
        customer_name=record.customer_name,
        phone=record.phone,
        district=record.district,
        thana=record.thana,
        address=record.address,
        items=decode_items(record.items),
        custom_images=decode_custom_images(record.custom_images),
        payment=decode_payment_info(record.payment_info),
        total=_to_money(record.total, field="total"),
        status=record.status or OrderStatus.PENDING.value,
        status_label=OrderStatus.label_for(record.status),
        custom_instructions=record.custom_instructions or "",
        is_custom_order=record.is_custom_order,
        advance_payment_amount=_to_money(record.advance_payment_amount, field="advance_payment_amount"),
        created_at=_parse_created_at(record.created_at),
    )
