"""Application service: admin order status changes.

Any admin may move any order from any status to any other, including
"backwards" moves such as delivered -> pending or un-cancelling an
order. There is deliberately no transition graph here.

After every successful change the full order collection is refetched;
the cached list is never edited in place.
"""

from __future__ import annotations

import structlog

from trynex.domain.exceptions import (
    EntityNotFoundError,
    StatusUpdateError,
    TransitionRejected,
    ValidationError,
)
from trynex.domain.model.order import OrderRecord, OrderStatus
from trynex.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class OrderStatusEngine:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo
        self._orders: list[OrderRecord] = []

    @property
    def orders(self) -> list[OrderRecord]:
        """Orders as of the last refetch."""
        return list(self._orders)

    def refresh(self) -> list[OrderRecord]:
        self._orders = self._order_repo.list_all()
        return self.orders

    def find(self, order_id: str) -> OrderRecord | None:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def set_status(self, order_id: str, new_status: str | OrderStatus) -> list[OrderRecord]:
        """Request a status change, then refetch and return every order."""
        status = new_status if isinstance(new_status, OrderStatus) else OrderStatus.parse(new_status)
        if status is None:
            raise ValidationError(
                f"Unknown order status '{new_status}'. "
                f"Expected one of: {', '.join(s.value for s in OrderStatus)}"
            )

        try:
            self._order_repo.update_status(order_id, status.value)
        except EntityNotFoundError as exc:
            logger.warning("Status change rejected", order_id=order_id, status=status.value)
            raise TransitionRejected(f"Order #{order_id} not found") from exc
        except StatusUpdateError:
            logger.warning("Status change failed", order_id=order_id, status=status.value)
            raise

        logger.info("Order status changed", order_id=order_id, status=status.value)
        return self.refresh()
