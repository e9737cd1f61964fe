"""Offline JSON order store."""

import json
import re
from datetime import datetime, timezone

import pytest

from trynex.domain.exceptions import EntityNotFoundError, OrderSubmissionError
from trynex.domain.model.cart import CartLineItem, Customization
from trynex.domain.model.order import PAYMENT_METHOD_COD, OrderCreateRequest, PaymentInfo
from trynex.domain.model.value_objects import Money
from trynex.domain.service.order_detail_renderer import render_order
from trynex.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
    generate_tracking_id,
)


def _request(name="Rahim"):
    return OrderCreateRequest(
        items=(
            CartLineItem(
                id="mug", name="Mug", price=Money.of("750"), quantity=2,
                customization=Customization(custom_images=("data:img/1",)),
            ),
        ),
        customer_name=name,
        phone="01812345678",
        district="ঢাকা",
        thana="ধানমন্ডি",
        address="House 12, Road 5",
        total=Money.of("1580"),
        payment_info=PaymentInfo(
            method=PAYMENT_METHOD_COD,
            payment_number="01812345678",
            transaction_id="TX1",
            amount_paid=Money.of("1580"),
            delivery_fee=80,
        ),
        custom_instructions="",
        custom_images=("data:img/1",),
    )


def _setup(tmp_path):
    path = tmp_path / "data" / "orders.json"
    return JsonOrderRepository(path), path


class TestJsonOrderRepository:

    def test_creates_empty_store(self, tmp_path):
        repo, path = _setup(tmp_path)
        assert json.loads(path.read_text(encoding="utf-8")) == []
        assert repo.list_all() == []

    def test_server_assigned_fields(self, tmp_path):
        repo, _ = _setup(tmp_path)
        record = repo.create(_request())
        assert record.id
        assert re.fullmatch(r"TN\d+", record.tracking_id)
        assert record.status == "pending"
        assert record.created_at

    def test_polymorphic_fields_stored_as_json_strings(self, tmp_path):
        repo, path = _setup(tmp_path)
        repo.create(_request())
        stored = json.loads(path.read_text(encoding="utf-8"))[0]
        assert isinstance(stored["items"], str)
        assert isinstance(stored["payment_info"], str)
        assert json.loads(stored["custom_images"]) == ["data:img/1"]
        assert stored["customer_name"] == "Rahim"

    def test_stored_record_renders(self, tmp_path):
        repo, _ = _setup(tmp_path)
        record = repo.create(_request())
        detail = render_order(repo.get_by_tracking_id(record.tracking_id))
        assert detail.items[0].name == "Mug"
        assert detail.payment.transaction_id == "TX1"
        assert detail.custom_images == ["data:img/1"]

    def test_unknown_tracking_id(self, tmp_path):
        repo, _ = _setup(tmp_path)
        assert repo.get_by_tracking_id("TN0") is None

    def test_list_newest_first(self, tmp_path):
        repo, path = _setup(tmp_path)
        repo.create(_request("First"))
        repo.create(_request("Second"))
        orders = json.loads(path.read_text(encoding="utf-8"))
        orders[0]["created_at"] = "2024-01-01T00:00:00+00:00"
        orders[1]["created_at"] = "2024-02-01T00:00:00+00:00"
        path.write_text(json.dumps(orders), encoding="utf-8")
        assert [r.customer_name for r in repo.list_all()] == ["Second", "First"]

    def test_update_status(self, tmp_path):
        repo, path = _setup(tmp_path)
        record = repo.create(_request())
        repo.update_status(record.id, "shipped")
        assert repo.get_by_tracking_id(record.tracking_id).status == "shipped"
        assert "updated_at" in json.loads(path.read_text(encoding="utf-8"))[0]

    def test_update_unknown_order(self, tmp_path):
        repo, _ = _setup(tmp_path)
        with pytest.raises(EntityNotFoundError):
            repo.update_status("missing", "shipped")

    @pytest.mark.parametrize("content", ["{not json", "{}"])
    def test_corrupted_store_fails_submission(self, tmp_path, content):
        repo, path = _setup(tmp_path)
        path.write_text(content, encoding="utf-8")
        with pytest.raises(OrderSubmissionError) as exc_info:
            repo.create(_request())
        assert exc_info.value.kind == OrderSubmissionError.MALFORMED


class TestGenerateTrackingId:

    def test_format(self):
        now = datetime(2024, 5, 1, tzinfo=timezone.utc)
        tracking_id = generate_tracking_id(now)
        millis = str(int(now.timestamp() * 1000))
        assert tracking_id.startswith(f"TN{millis}")
        assert 0 <= int(tracking_id[len(millis) + 2:]) <= 999
