"""District / thana table and the delivery-fee rule.

Pure data plus two pure functions. The cart preview and the checkout
wizard both go through ``DeliveryFeePolicy`` so their totals agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

CAPITAL_DISTRICT = "ঢাকা"
INSIDE_CAPITAL_FEE = 80
OUTSIDE_CAPITAL_FEE = 120
# Applied while no district has been chosen yet.
UNSELECTED_DISTRICT_FEE = INSIDE_CAPITAL_FEE
DEFAULT_FREE_DELIVERY_THRESHOLD = 2000

DISTRICTS: tuple[str, ...] = (
    "ঢাকা",
    "চট্টগ্রাম",
    "সিলেট",
    "রাজশাহী",
    "খুলনা",
    "বরিশাল",
    "রংপুর",
    "ময়মনসিংহ",
)

THANAS_BY_DISTRICT: dict[str, tuple[str, ...]] = {
    "ঢাকা": (
        "ধানমন্ডি", "গুলশান", "বনানী", "উত্তরা", "মিরপুর", "রামনা", "তেজগাঁও", "ওয়ারী",
        "সূত্রাপুর", "কোতোয়ালী", "শাহবাগ", "নিউমার্কেট", "হাজারীবাগ", "লালবাগ", "চকবাজার",
    ),
    "চট্টগ্রাম": (
        "কোতোয়ালী", "পাঁচলাইশ", "ডবলমুরিং", "চান্দগাঁও", "বায়েজিদ", "হালিশহর", "আগ্রাবাদ",
        "সীতাকুণ্ড", "মীরসরাই", "সন্দ্বীপ", "বোয়ালখালী", "আনোয়ারা", "চন্দনাইশ", "সাতকানিয়া",
    ),
    "সিলেট": (
        "সিলেট সদর", "জৈন্তাপুর", "কানাইঘাট", "বিশ্বনাথ", "বালাগঞ্জ", "বেলাইছড়ি",
        "ফেঞ্চুগঞ্জ", "গোলাপগঞ্জ", "গোয়াইনঘাট", "হবিগঞ্জ", "লাখাই", "নবীগঞ্জ",
    ),
    "রাজশাহী": (
        "রাজশাহী সদর", "বাগমারা", "চারঘাট", "দুর্গাপুর", "গোদাগাড়ী", "মোহনপুর",
        "পুঠিয়া", "তানোর", "নাটোর", "সিংড়া", "বড়াইগ্রাম", "গুরুদাসপুর",
    ),
    "খুলনা": (
        "খুলনা সদর", "সোনাডাঙ্গা", "খান জাহান আলী", "কয়রা", "পাইকগাছা", "রূপসা",
        "তেরখাদা", "বটিয়াঘাটা", "দাকোপ", "ডুমুরিয়া", "ফকিরহাট", "মোল্লাহাট",
    ),
    "বরিশাল": (
        "বরিশাল সদর", "আগৈলঝাড়া", "বাবুগঞ্জ", "বাকেরগঞ্জ", "বানারীপাড়া", "গৌরনদী",
        "হিজলা", "মেহেন্দিগঞ্জ", "মুলাদী", "উজিরপুর", "ভোলা", "চরফ্যাশন",
    ),
    "রংপুর": (
        "রংপুর সদর", "বদরগঞ্জ", "গঙ্গাচড়া", "কাউনিয়া", "মিঠাপুকুর", "পীরগঞ্জ",
        "পীরগাছা", "তারাগঞ্জ", "কুড়িগ্রাম", "ভুরুঙ্গামারী", "চিলমারী", "রাজারহাট",
    ),
    "ময়মনসিংহ": (
        "ময়মনসিংহ সদর", "ভালুকা", "ত্রিশাল", "মুক্তাগাছা", "নান্দাইল", "তারাকান্দা",
        "গৌরীপুর", "গফরগাঁও", "ঈশ্বরগঞ্জ", "হালুয়াঘাট", "ফুলবাড়ীয়া", "ধোবাউড়া",
    ),
}


def available_thanas(district: str | None) -> list[str]:
    """Ordered thana list for *district*, or ``[]`` when there is no data."""
    if not district:
        return []
    return list(THANAS_BY_DISTRICT.get(district.strip(), ()))


def compute_delivery_fee(
    district: str | None,
    subtotal: Decimal | int,
    free_delivery_threshold: Decimal | int | None = None,
) -> int:
    """Delivery fee in taka for *district* at the given cart *subtotal*.

    80 inside the capital, 120 anywhere else, 80 while no district is
    chosen. With a threshold configured, orders at or above it ship free.
    """
    if free_delivery_threshold is not None and Decimal(subtotal) >= Decimal(free_delivery_threshold):
        return 0
    if not district or not district.strip():
        return UNSELECTED_DISTRICT_FEE
    if district.strip() == CAPITAL_DISTRICT:
        return INSIDE_CAPITAL_FEE
    return OUTSIDE_CAPITAL_FEE


@dataclass(frozen=True)
class DeliveryFeePolicy:
    """Shared fee configuration for cart preview and checkout."""

    free_delivery_threshold: Decimal | None = None

    def fee_for(self, district: str | None, subtotal: Decimal | int) -> int:
        return compute_delivery_fee(district, subtotal, self.free_delivery_threshold)
