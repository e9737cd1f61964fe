"""Shopping cart held for the lifetime of a storefront session.

The cart owns its line items. The checkout wizard only ever sees a
``snapshot()`` and calls ``clear()`` once an order has been placed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from trynex.domain.exceptions import EntityNotFoundError, ValidationError
from trynex.domain.model.value_objects import Money, Quantity

_IMAGE_KEYS = ("custom_images", "customImages", "uploaded_images")
_INSTRUCTION_KEYS = ("instructions", "specialInstructions")


@dataclass(frozen=True)
class Customization:
    """Opaque per-item customization: uploaded images, free-text
    instructions, and whatever else the customize dialog attached
    (color, size, text, font, ...)."""

    instructions: str = ""
    custom_images: tuple[str, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> Customization:
        images: list[str] = []
        for key in _IMAGE_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                images.extend(str(v) for v in value if v)
                break
        instructions = ""
        for key in _INSTRUCTION_KEYS:
            if payload.get(key):
                instructions = str(payload[key])
                break
        extra = {
            k: v for k, v in payload.items()
            if k not in _IMAGE_KEYS and k not in _INSTRUCTION_KEYS
        }
        return Customization(
            instructions=instructions,
            custom_images=tuple(images),
            extra=extra,
        )

    def to_payload(self) -> dict[str, Any]:
        payload = dict(self.extra)
        if self.instructions:
            payload["instructions"] = self.instructions
        payload["custom_images"] = list(self.custom_images)
        return payload


@dataclass(frozen=True)
class CartLineItem:
    """A product in the cart with its price locked at add time."""

    id: str
    name: str
    price: Money
    quantity: int = 1
    image_url: str | None = None
    customization: Customization | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("Cart item id is required")
        Quantity(self.quantity)

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": float(self.price.amount),
            "quantity": self.quantity,
            "image_url": self.image_url,
            "customization": self.customization.to_payload() if self.customization else None,
        }


class Cart:
    """Ordered collection of line items keyed by product id."""

    def __init__(self, items: list[CartLineItem] | None = None) -> None:
        self._items: list[CartLineItem] = []
        for item in items or []:
            self.add(item)

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return tuple(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def add(self, item: CartLineItem) -> None:
        """Add *item*; an id already in the cart has its quantity increased."""
        for i, existing in enumerate(self._items):
            if existing.id == item.id:
                self._items[i] = replace(existing, quantity=existing.quantity + item.quantity)
                return
        self._items.append(item)

    def update_quantity(self, item_id: str, quantity: int) -> None:
        """Set the quantity of *item_id*, clamped to at least 1."""
        i = self._index_of(item_id)
        self._items[i] = replace(self._items[i], quantity=max(1, int(quantity)))

    def remove(self, item_id: str) -> None:
        del self._items[self._index_of(item_id)]

    def clear(self) -> None:
        self._items.clear()

    def subtotal(self) -> Money:
        result = Money.zero()
        for item in self._items:
            result = result + item.line_total
        return result

    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    def snapshot(self) -> tuple[CartLineItem, ...]:
        return tuple(self._items)

    def _index_of(self, item_id: str) -> int:
        for i, item in enumerate(self._items):
            if item.id == item_id:
                return i
        raise EntityNotFoundError(f"Cart item '{item_id}' not found")
