"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CartItemSpec:
    """Input: one cart line as given on the command line."""

    product_id: str
    name: str
    price: str
    quantity: int


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    name: str
    quantity: int
    unit_price: str  # formatted, e.g. "750 ৳"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str | None
    tracking_id: str
    tracking_id_is_provisional: bool
    customer_name: str
    phone: str
    address_line: str
    status: str
    status_label: str
    items: list[OrderLineItemDTO]
    images: list[str]
    payment_method: str
    transaction_id: str
    delivery_fee: str
    total: str
    instructions: str
    created_at: str
