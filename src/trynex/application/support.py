"""Customer-support deep links."""

from __future__ import annotations

from urllib.parse import quote

DEFAULT_WHATSAPP_TEMPLATE = "আসসালামু আলাইকুম! আমার অর্ডার সম্পর্কে জানতে চাই।"


def whatsapp_support_url(
    number: str,
    template: str = DEFAULT_WHATSAPP_TEMPLATE,
    tracking_id: str | None = None,
) -> str:
    """``https://wa.me/<digits>?text=<message>``, mentioning *tracking_id* if given."""
    digits = "".join(ch for ch in number if ch.isdigit())
    message = template
    if tracking_id:
        message = f"{template} ট্র্যাকিং আইডি: {tracking_id}"
    return f"https://wa.me/{digits}?text={quote(message)}"
