"""Order queries and their display DTOs."""

import json

import pytest

from tests.fakes import FakeOrderRepository
from trynex.application.show_order import ShowOrderHandler, to_dto
from trynex.application.support import whatsapp_support_url
from trynex.domain.exceptions import EntityNotFoundError
from trynex.domain.model.order import OrderRecord


def _record(**overrides):
    fields = dict(
        id="1", tracking_id="TN1", customer_name="Rahim", phone="01812345678",
        district="ঢাকা", thana="ধানমন্ডি", address="House 12, Road 5", total="1580",
        items=json.dumps([{"name": "Mug", "price": 750, "quantity": 2}]),
        payment_info={"method": "cash_on_delivery", "trx_id": "TX1", "delivery_fee": 80},
        created_at="2024-05-01T10:30:00",
    )
    fields.update(overrides)
    return OrderRecord(**fields)


def _setup(*records):
    repo = FakeOrderRepository(list(records) or [_record()])
    return ShowOrderHandler(repo), repo


class TestShowOrder:

    def test_by_tracking_id(self):
        handler, _ = _setup()
        dto = handler.by_tracking_id(" TN1 ")
        assert dto.id == "1"
        assert dto.total == "1580 ৳"

    def test_unknown_tracking_id(self):
        handler, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="TN404"):
            handler.by_tracking_id("TN404")

    def test_by_id(self):
        handler, _ = _setup(_record(), _record(id="2", tracking_id="TN2"))
        assert handler.by_id("2").tracking_id == "TN2"
        with pytest.raises(EntityNotFoundError):
            handler.by_id("3")

    def test_list_all(self):
        handler, _ = _setup(_record(), _record(id="2", tracking_id="TN2"))
        assert [dto.id for dto in handler.list_all()] == ["1", "2"]


class TestToDto:

    def test_formats_for_display(self):
        dto = to_dto(_record())
        assert dto.address_line == "House 12, Road 5, ধানমন্ডি, ঢাকা"
        assert dto.items[0].unit_price == "750 ৳"
        assert dto.items[0].line_total == "1500 ৳"
        assert dto.delivery_fee == "80 ৳"
        assert dto.payment_method == "ক্যাশ অন ডেলিভারি"
        assert dto.status_label == "অপেক্ষমান"
        assert dto.created_at == "2024-05-01 10:30"

    def test_missing_values_render_as_dash(self):
        dto = to_dto(_record(payment_info=None, created_at=None, total="n/a"))
        assert dto.delivery_fee == "-"
        assert dto.created_at == "-"
        assert dto.total == "-"

    def test_address_without_thana(self):
        assert to_dto(_record(district="কক্সবাজার", thana="")).address_line == "House 12, Road 5, কক্সবাজার"


class TestWhatsappSupportUrl:

    def test_number_is_reduced_to_digits(self):
        url = whatsapp_support_url("+880 1940-689487", template="hi")
        assert url == "https://wa.me/8801940689487?text=hi"

    def test_tracking_id_is_appended(self):
        url = whatsapp_support_url("8801940689487", template="hello", tracking_id="TN1")
        assert url.startswith("https://wa.me/8801940689487?text=hello%20")
        assert url.endswith("TN1")


class TestToDtoWithHostileValues:

    def test_non_finite_values_render(self):
        dto = to_dto(_record(
            items='[{"name": "Mug", "price": "Infinity", "quantity": 1}, {"name": "Cap", "price": 5, "quantity": 1e999}]',
            payment_info='{"delivery_fee": 1e999}',
            total="Infinity",
        ))
        assert [(i.name, i.line_total) for i in dto.items] == [("Cap", "5 ৳")]
        assert dto.total == "-"
        assert dto.delivery_fee == "0 ৳"
