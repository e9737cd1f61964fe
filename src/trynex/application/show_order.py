"""Application service: order queries (tracking lookup, admin views)."""

from __future__ import annotations

from trynex.application.dto import OrderDTO, OrderLineItemDTO
from trynex.domain.exceptions import EntityNotFoundError
from trynex.domain.model.order import OrderRecord
from trynex.domain.repository.order_repository import OrderRepository
from trynex.domain.service.order_detail_renderer import render_order


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def by_tracking_id(self, tracking_id: str) -> OrderDTO:
        record = self._order_repo.get_by_tracking_id(tracking_id.strip())
        if record is None:
            raise EntityNotFoundError(f"Order with tracking id '{tracking_id}' not found")
        return to_dto(record)

    def by_id(self, order_id: str) -> OrderDTO:
        for record in self._order_repo.list_all():
            if record.id == order_id:
                return to_dto(record)
        raise EntityNotFoundError(f"Order #{order_id} not found")

    def list_all(self) -> list[OrderDTO]:
        return [to_dto(record) for record in self._order_repo.list_all()]


def to_dto(record: OrderRecord) -> OrderDTO:
    detail = render_order(record)
    fee = detail.payment.delivery_fee
    return OrderDTO(
        id=detail.id,
        tracking_id=detail.tracking_id,
        tracking_id_is_provisional=detail.tracking_id_is_provisional,
        customer_name=detail.customer_name,
        phone=detail.phone,
        address_line=", ".join(p for p in (detail.address, detail.thana, detail.district) if p),
        status=detail.status,
        status_label=detail.status_label,
        items=[
            OrderLineItemDTO(
                name=item.name,
                quantity=item.quantity,
                unit_price=str(item.price),
                line_total=str(item.line_total),
            )
            for item in detail.items
        ],
        images=list(detail.custom_images),
        payment_method=detail.payment.method_label,
        transaction_id=detail.payment.transaction_id,
        delivery_fee=f"{fee} ৳" if fee is not None else "-",
        total=str(detail.total) if detail.total is not None else "-",
        instructions=detail.custom_instructions,
        created_at=detail.created_at.strftime("%Y-%m-%d %H:%M") if detail.created_at else "-",
    )
