"""Abstract boundary to the order service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from trynex.domain.model.order import OrderCreateRequest, OrderRecord


class OrderRepository(ABC):

    @abstractmethod
    def create(self, request: OrderCreateRequest) -> OrderRecord:
        """Persist a new order and return the stored record.

        Raises OrderSubmissionError on any failure.
        """

    @abstractmethod
    def list_all(self) -> list[OrderRecord]:
        """Return every order, newest first where the store knows the order."""

    @abstractmethod
    def get_by_tracking_id(self, tracking_id: str) -> OrderRecord | None:
        """Return the order with this tracking id, or None if not found."""

    @abstractmethod
    def update_status(self, order_id: str, status: str) -> None:
        """Set the order's status.

        Raises EntityNotFoundError when the order does not exist and
        StatusUpdateError for any other failure.
        """
