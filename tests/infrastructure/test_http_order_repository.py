"""HTTP order repository against a scripted session."""

import pytest
import requests

from tests.fakes import FakeSession, make_response
from trynex.domain.exceptions import (
    AuthenticationError,
    EntityNotFoundError,
    OrderFetchError,
    OrderSubmissionError,
    StatusUpdateError,
)
from trynex.domain.model.cart import CartLineItem
from trynex.domain.model.order import PAYMENT_METHOD_COD, OrderCreateRequest, PaymentInfo
from trynex.domain.model.value_objects import Money
from trynex.infrastructure.http.http_order_repository import HttpOrderRepository

BASE_URL = "http://shop.test"


def _request():
    return OrderCreateRequest(
        items=(CartLineItem(id="mug", name="Mug", price=Money.of("1500")),),
        customer_name="Rahim",
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
        custom_images=(),
    )


def _setup(*responses, **kwargs):
    session = FakeSession(*responses)
    repo = HttpOrderRepository(BASE_URL + "/", timeout=5, session=session, **kwargs)
    return repo, session


class TestCreate:

    def test_success(self):
        repo, session = _setup(make_response(201, {"id": 9, "tracking_id": "TN9", "status": "pending"}))
        record = repo.create(_request())
        assert record.id == "9"
        assert record.tracking_id == "TN9"
        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == "http://shop.test/api/orders"
        assert call["timeout"] == 5
        assert call["json"]["total"] == "1580"
        assert call["json"]["payment_info"]["trx_id"] == "TX1"

    def test_sends_exactly_one_request(self):
        repo, session = _setup(make_response(500, {"error": "boom"}))
        with pytest.raises(OrderSubmissionError):
            repo.create(_request())
        assert len(session.calls) == 1

    def test_timeout(self):
        repo, _ = _setup(requests.exceptions.Timeout("slow"))
        with pytest.raises(OrderSubmissionError) as exc_info:
            repo.create(_request())
        assert exc_info.value.kind == OrderSubmissionError.TIMEOUT

    def test_network_error(self):
        repo, _ = _setup(requests.exceptions.ConnectionError("refused"))
        with pytest.raises(OrderSubmissionError) as exc_info:
            repo.create(_request())
        assert exc_info.value.kind == OrderSubmissionError.NETWORK

    def test_http_error_uses_server_message(self):
        repo, _ = _setup(make_response(500, {"message": "Database unavailable"}))
        with pytest.raises(OrderSubmissionError, match="Database unavailable") as exc_info:
            repo.create(_request())
        assert exc_info.value.kind == OrderSubmissionError.HTTP
        assert exc_info.value.status_code == 500

    def test_http_error_with_plain_text_body(self):
        repo, _ = _setup(make_response(502, text="Bad Gateway"))
        with pytest.raises(OrderSubmissionError, match="502 - Bad Gateway"):
            repo.create(_request())

    @pytest.mark.parametrize("response", [
        make_response(200, text="<html>ok</html>"),
        make_response(200, ["not", "an", "object"]),
    ])
    def test_malformed_success_body(self, response):
        repo, _ = _setup(response)
        with pytest.raises(OrderSubmissionError) as exc_info:
            repo.create(_request())
        assert exc_info.value.kind == OrderSubmissionError.MALFORMED

    def test_missing_tracking_id_is_not_an_error(self):
        repo, _ = _setup(make_response(201, {"id": 9}))
        assert repo.create(_request()).tracking_id is None


class TestQueries:

    def test_list_all_accepts_bare_list(self):
        repo, session = _setup(make_response(200, [{"id": 1}, {"id": 2}]))
        assert [r.id for r in repo.list_all()] == ["1", "2"]
        assert session.calls[0]["url"] == "http://shop.test/api/orders"

    def test_list_all_accepts_wrapped_list_and_skips_junk(self):
        repo, _ = _setup(make_response(200, {"orders": [{"id": 1}, "junk"]}))
        assert [r.id for r in repo.list_all()] == ["1"]

    def test_list_all_failure(self):
        repo, _ = _setup(make_response(503, {"error": "down"}))
        with pytest.raises(OrderFetchError, match="down"):
            repo.list_all()

    def test_list_all_unexpected_shape(self):
        repo, _ = _setup(make_response(200, {"count": 0}))
        with pytest.raises(OrderFetchError):
            repo.list_all()

    def test_get_by_tracking_id(self):
        repo, session = _setup(make_response(200, {"id": 1, "tracking_id": "TN 1"}))
        assert repo.get_by_tracking_id("TN 1").tracking_id == "TN 1"
        assert session.calls[0]["url"] == "http://shop.test/api/orders/TN%201"

    def test_get_by_tracking_id_not_found(self):
        repo, _ = _setup(make_response(404, {"error": "Order not found"}))
        assert repo.get_by_tracking_id("TN404") is None


class TestUpdateStatus:

    def test_status_sub_resource(self):
        repo, session = _setup(make_response(200, {"ok": True}))
        repo.update_status("7", "shipped")
        assert session.calls[0]["method"] == "PATCH"
        assert session.calls[0]["url"] == "http://shop.test/api/orders/7/status"
        assert session.calls[0]["json"] == {"status": "shipped"}

    def test_record_shape(self):
        repo, session = _setup(make_response(200, {}), status_path="record")
        repo.update_status("7", "shipped")
        assert session.calls[0]["url"] == "http://shop.test/api/orders/7"

    def test_no_content_is_success(self):
        repo, _ = _setup(make_response(204))
        repo.update_status("7", "completed")

    def test_method_not_allowed_retries_other_shape_once(self):
        repo, session = _setup(make_response(405), make_response(200, {}))
        repo.update_status("7", "delivered")
        assert [c["url"] for c in session.calls] == [
            "http://shop.test/api/orders/7/status",
            "http://shop.test/api/orders/7",
        ]

    def test_second_405_is_an_error(self):
        repo, session = _setup(make_response(405), make_response(405))
        with pytest.raises(StatusUpdateError):
            repo.update_status("7", "delivered")
        assert len(session.calls) == 2

    def test_unknown_order(self):
        repo, session = _setup(make_response(404, {"error": "Order not found"}), make_response(404))
        with pytest.raises(EntityNotFoundError):
            repo.update_status("99", "shipped")
        assert len(session.calls) == 2

    def test_missing_route_falls_back_to_other_shape(self):
        repo, session = _setup(make_response(404, text="Cannot PATCH"), make_response(200, {}), status_path="record")
        repo.update_status("7", "shipped")
        assert [c["url"] for c in session.calls] == [
            "http://shop.test/api/orders/7",
            "http://shop.test/api/orders/7/status",
        ]

    def test_not_found_then_method_not_allowed_means_missing_order(self):
        repo, _ = _setup(make_response(404), make_response(405))
        with pytest.raises(EntityNotFoundError):
            repo.update_status("99", "shipped")

    def test_server_error(self):
        repo, _ = _setup(make_response(500, {"error": "boom"}))
        with pytest.raises(StatusUpdateError, match="boom"):
            repo.update_status("7", "shipped")

    def test_network_error(self):
        repo, _ = _setup(requests.exceptions.ConnectionError("refused"))
        with pytest.raises(StatusUpdateError):
            repo.update_status("7", "shipped")


class TestAuthenticateAdmin:

    def test_accepted(self):
        repo, session = _setup(make_response(200, {"success": True}))
        assert repo.authenticate_admin("admin@trynex.com", "secret")
        assert session.calls[0]["url"] == "http://shop.test/api/admin/login"

    @pytest.mark.parametrize("status", [400, 401, 403])
    def test_rejected(self, status):
        repo, _ = _setup(make_response(status, {"error": "Invalid credentials"}))
        assert not repo.authenticate_admin("admin@trynex.com", "wrong")

    def test_server_error(self):
        repo, _ = _setup(make_response(500))
        with pytest.raises(AuthenticationError):
            repo.authenticate_admin("admin@trynex.com", "secret")

    def test_bearer_token_header(self):
        _, session = _setup(auth_token="abc")
        assert session.headers["Authorization"] == "Bearer abc"
