"""Order request and order record.

``OrderCreateRequest`` is what the checkout sends exactly once per
confirmed attempt. ``OrderRecord`` is what the order service hands back
and is authoritative; its ``items``, ``custom_images`` and
``payment_info`` fields are kept in whatever shape the server used
(native structure or JSON-encoded string). Decoding them is the job of
the order detail renderer, never of this module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from trynex.domain.exceptions import MalformedRecordError
from trynex.domain.model.cart import CartLineItem
from trynex.domain.model.value_objects import Money


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    @staticmethod
    def parse(raw: str | None) -> OrderStatus | None:
        """Lenient lookup; ``None`` for anything that is not a known status."""
        if not raw:
            return None
        try:
            return OrderStatus(str(raw).strip().lower())
        except ValueError:
            return None

    @staticmethod
    def label_for(raw: str | None) -> str:
        """Bengali label for a raw status string, falling back to the raw value."""
        status = OrderStatus.parse(raw) if raw else OrderStatus.PENDING
        return status.label if status else str(raw)


_STATUS_LABELS = {
    OrderStatus.PENDING: "অপেক্ষমান",
    OrderStatus.PROCESSING: "প্রসেসিং",
    OrderStatus.SHIPPED: "পাঠানো হয়েছে",
    OrderStatus.DELIVERED: "ডেলিভার হয়েছে",
    OrderStatus.COMPLETED: "সম্পন্ন",
    OrderStatus.CANCELLED: "বাতিল",
}


PAYMENT_METHOD_ADVANCE = "advance_payment"
PAYMENT_METHOD_COD = "cash_on_delivery"


@dataclass(frozen=True)
class PaymentInfo:
    """Manual payment proof entered by the customer at step 3."""

    method: str
    payment_number: str
    transaction_id: str
    amount_paid: Money
    delivery_fee: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "payment_number": self.payment_number,
            "trx_id": self.transaction_id,
            "amount_paid": float(self.amount_paid.amount),
            "delivery_fee": self.delivery_fee,
        }


def collect_customizations(items: Iterable[CartLineItem]) -> tuple[str, list[str]]:
    """Gather per-line instructions (one ``"<name>: <text>"`` line each)
    and the flattened list of customization images, in cart order."""
    instructions = ""
    images: list[str] = []
    for item in items:
        if item.customization is None:
            continue
        images.extend(item.customization.custom_images)
        if item.customization.instructions:
            instructions += f"{item.name}: {item.customization.instructions}\n"
    return instructions, images


@dataclass(frozen=True)
class OrderCreateRequest:
    items: tuple[CartLineItem, ...]
    customer_name: str
    phone: str
    district: str
    thana: str
    address: str
    total: Money
    payment_info: PaymentInfo
    custom_instructions: str
    custom_images: tuple[str, ...]
    is_custom_order: bool = False
    advance_payment_amount: Money | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "items": [item.to_payload() for item in self.items],
            "customer_name": self.customer_name,
            "phone": self.phone,
            "district": self.district,
            "thana": self.thana,
            "address": self.address,
            "total": self.total.to_wire(),
            "payment_info": self.payment_info.to_payload(),
            "custom_instructions": self.custom_instructions,
            "custom_images": list(self.custom_images),
            "is_custom_order": self.is_custom_order,
            "advance_payment_amount": (
                float(self.advance_payment_amount.amount)
                if self.advance_payment_amount is not None
                else None
            ),
        }


def _pick(payload: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


@dataclass
class OrderRecord:
    """An order as persisted by the order service."""

    id: str | None
    tracking_id: str | None
    customer_name: str
    phone: str
    district: str
    thana: str
    address: str
    total: str
    status: str = OrderStatus.PENDING.value
    items: Any = None
    custom_images: Any = None
    payment_info: Any = None
    custom_instructions: str | None = None
    is_custom_order: bool = False
    advance_payment_amount: Any = None
    created_at: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @staticmethod
    def from_payload(payload: Any) -> OrderRecord:
        """Build a record from a server response body.

        Both the snake_case keys the shop server writes and the camelCase
        keys some endpoints return are accepted.
        """
        if not isinstance(payload, dict):
            raise MalformedRecordError(
                f"Order payload must be a JSON object, got {type(payload).__name__}"
            )
        order_id = _pick(payload, "id", "_id")
        return OrderRecord(
            id=str(order_id) if order_id is not None else None,
            tracking_id=_pick(payload, "tracking_id", "trackingId", "tracking_number") or None,
            customer_name=str(_pick(payload, "customer_name", "customerName", default="")),
            phone=str(_pick(payload, "phone", "customer_phone", "customerPhone", default="")),
            district=str(_pick(payload, "district", default="")),
            thana=str(_pick(payload, "thana", default="")),
            address=str(_pick(payload, "address", "customer_address", default="")),
            total=str(_pick(payload, "total", "total_amount", default="0")),
            status=str(_pick(payload, "status", default=OrderStatus.PENDING.value)),
            items=_pick(payload, "items"),
            custom_images=_pick(payload, "custom_images", "customImages"),
            payment_info=_pick(payload, "payment_info", "paymentInfo"),
            custom_instructions=_pick(payload, "custom_instructions", "customInstructions"),
            is_custom_order=bool(_pick(payload, "is_custom_order", "isCustomOrder", default=False)),
            advance_payment_amount=_pick(payload, "advance_payment_amount", "advancePaymentAmount"),
            created_at=_pick(payload, "created_at", "createdAt"),
            raw=dict(payload),
        )
