"""Unit tests for the district table and the delivery-fee rule."""

from decimal import Decimal

import pytest

from trynex.domain.model.address import (
    CAPITAL_DISTRICT,
    DISTRICTS,
    THANAS_BY_DISTRICT,
    DeliveryFeePolicy,
    available_thanas,
    compute_delivery_fee,
)

NON_CAPITAL = [d for d in DISTRICTS if d != CAPITAL_DISTRICT]


class TestComputeDeliveryFee:

    def test_inside_capital(self):
        assert compute_delivery_fee("ঢাকা", 1500) == 80

    def test_outside_capital(self):
        assert compute_delivery_fee("চট্টগ্রাম", 1500) == 120

    def test_unknown_district_is_outside_capital(self):
        assert compute_delivery_fee("কক্সবাজার", 1500) == 120

    def test_no_district_falls_back_to_capital_fee(self):
        assert compute_delivery_fee("", 1500) == 80
        assert compute_delivery_fee(None, 1500) == 80

    @pytest.mark.parametrize("subtotal", [0, 1, 999, 1600, 2000, 50000])
    def test_fee_ignores_subtotal_without_threshold(self, subtotal):
        assert compute_delivery_fee(CAPITAL_DISTRICT, subtotal) == 80
        for district in NON_CAPITAL:
            assert compute_delivery_fee(district, subtotal) == 120

    @pytest.mark.parametrize("subtotal", [0, 500, 1999, 2000, 10000])
    def test_capital_and_other_districts_always_differ(self, subtotal):
        capital_fee = compute_delivery_fee(CAPITAL_DISTRICT, subtotal)
        for district in NON_CAPITAL:
            assert compute_delivery_fee(district, subtotal) != capital_fee

    def test_threshold_makes_delivery_free_at_and_above(self):
        assert compute_delivery_fee("চট্টগ্রাম", 2000, free_delivery_threshold=2000) == 0
        assert compute_delivery_fee("ঢাকা", 2500, free_delivery_threshold=2000) == 0

    def test_threshold_does_not_apply_below(self):
        assert compute_delivery_fee("চট্টগ্রাম", 1999, free_delivery_threshold=2000) == 120

    def test_decimal_subtotal(self):
        assert compute_delivery_fee("ঢাকা", Decimal("1999.99"), Decimal("2000")) == 80


class TestDeliveryFeePolicy:

    def test_default_policy_has_no_threshold(self):
        assert DeliveryFeePolicy().fee_for("ঢাকা", 100000) == 80

    def test_configured_threshold(self):
        policy = DeliveryFeePolicy(free_delivery_threshold=Decimal("2000"))
        assert policy.fee_for("সিলেট", 2000) == 0
        assert policy.fee_for("সিলেট", 1000) == 120


class TestAvailableThanas:

    def test_known_district_in_order(self):
        thanas = available_thanas("ঢাকা")
        assert thanas[0] == "ধানমন্ডি"
        assert thanas == list(THANAS_BY_DISTRICT["ঢাকা"])

    def test_unknown_or_empty_district(self):
        assert available_thanas("কক্সবাজার") == []
        assert available_thanas("") == []
        assert available_thanas(None) == []

    def test_returns_a_copy(self):
        thanas = available_thanas("সিলেট")
        thanas.clear()
        assert available_thanas("সিলেট")

    def test_every_district_has_thanas(self):
        for district in DISTRICTS:
            assert available_thanas(district)
