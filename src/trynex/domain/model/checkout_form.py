"""Checkout form state and per-step validation rules."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import IntEnum

from trynex.domain.model.address import available_thanas
from trynex.domain.model.value_objects import is_valid_phone

MIN_ADDRESS_LENGTH = 10


class CheckoutStep(IntEnum):
    IDENTITY = 1
    ADDRESS = 2
    PAYMENT = 3
    REVIEW = 4

    @property
    def title(self) -> str:
        return _STEP_TITLES[self]


_STEP_TITLES = {
    CheckoutStep.IDENTITY: "ব্যক্তিগত তথ্য",
    CheckoutStep.ADDRESS: "ডেলিভারি ঠিকানা",
    CheckoutStep.PAYMENT: "পেমেন্ট তথ্য",
    CheckoutStep.REVIEW: "অর্ডার সম্পূর্ণ করুন",
}


@dataclass
class CheckoutFormData:
    # Step 1
    customer_name: str = ""
    phone: str = ""
    # Step 2
    district: str = ""
    thana: str = ""
    address: str = ""
    # Step 3
    payment_number: str = ""
    transaction_id: str = ""
    special_instructions: str = ""

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))


def validate_step(form: CheckoutFormData, step: CheckoutStep | int) -> dict[str, str]:
    """Return ``{field: message}`` for every rule of *step* that *form* breaks.

    Only the fields owned by *step* are inspected; the review step owns
    no fields of its own.
    """
    step = CheckoutStep(step)
    errors: dict[str, str] = {}

    if step == CheckoutStep.IDENTITY:
        if not form.customer_name.strip():
            errors["customer_name"] = "নাম লিখুন"
        if not form.phone.strip():
            errors["phone"] = "ফোন নম্বর লিখুন"
        elif not is_valid_phone(form.phone):
            errors["phone"] = "সঠিক বাংলাদেশি ফোন নম্বর লিখুন"

    elif step == CheckoutStep.ADDRESS:
        thanas = available_thanas(form.district)
        if not form.district.strip():
            errors["district"] = "জেলা নির্বাচন করুন"
        # Districts without thana data leave the field optional.
        if thanas and form.thana not in thanas:
            errors["thana"] = "থানা নির্বাচন করুন"
        if len(form.address.strip()) < MIN_ADDRESS_LENGTH:
            errors["address"] = "বিস্তারিত ঠিকানা লিখুন"

    elif step == CheckoutStep.PAYMENT:
        if not form.payment_number.strip():
            errors["payment_number"] = "পেমেন্ট নম্বর লিখুন"
        if not form.transaction_id.strip():
            errors["transaction_id"] = "ট্রানজেকশন আইডি লিখুন"

    return errors
