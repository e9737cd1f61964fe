"""JSON-file-backed implementation of OrderRepository.

Stands in for the order service in offline mode. It stores records the
way the shop server does: ``items``, ``custom_images`` and
``payment_info`` are kept JSON-encoded, and the server, not the client,
assigns ``id``, ``tracking_id``, ``status`` and ``created_at``.
"""

from __future__ import annotations

import json
import random
import uuid
from datetime import datetime, timezone
from pathlib import Path

from trynex.domain.exceptions import EntityNotFoundError, OrderSubmissionError
from trynex.domain.model.order import OrderCreateRequest, OrderRecord, OrderStatus
from trynex.domain.repository.order_repository import OrderRepository


def generate_tracking_id(now: datetime | None = None) -> str:
    """``TN<epoch ms><0-999>``, the server's tracking id format."""
    now = now or datetime.now(timezone.utc)
    return f"TN{int(now.timestamp() * 1000)}{random.randint(0, 999)}"


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def create(self, request: OrderCreateRequest) -> OrderRecord:
        try:
            orders = self._load_raw()
        except (OSError, ValueError) as exc:
            raise OrderSubmissionError(
                f"Could not read order store: {exc}", kind=OrderSubmissionError.MALFORMED
            ) from exc
        if not isinstance(orders, list):
            raise OrderSubmissionError(
                f"Order store must hold a JSON list, got {type(orders).__name__}",
                kind=OrderSubmissionError.MALFORMED,
            )
        raw = self._to_raw(request)
        orders.append(raw)
        try:
            self._persist_raw(orders)
        except OSError as exc:
            raise OrderSubmissionError(
                f"Could not write order store: {exc}", kind=OrderSubmissionError.NETWORK
            ) from exc
        return OrderRecord.from_payload(raw)

    def list_all(self) -> list[OrderRecord]:
        records = [OrderRecord.from_payload(raw) for raw in self._load_raw()]
        return sorted(records, key=lambda r: r.created_at or "", reverse=True)

    def get_by_tracking_id(self, tracking_id: str) -> OrderRecord | None:
        for raw in self._load_raw():
            if raw.get("tracking_id") == tracking_id:
                return OrderRecord.from_payload(raw)
        return None

    def update_status(self, order_id: str, status: str) -> None:
        orders = self._load_raw()
        for raw in orders:
            if raw.get("id") == order_id:
                raw["status"] = status
                raw["updated_at"] = datetime.now(timezone.utc).isoformat()
                self._persist_raw(orders)
                return
        raise EntityNotFoundError(f"Order #{order_id} not found")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(request: OrderCreateRequest) -> dict:
        payload = request.to_payload()
        now = datetime.now(timezone.utc)
        payload.update(
            {
                "id": str(uuid.uuid4()),
                "tracking_id": generate_tracking_id(now),
                "status": OrderStatus.PENDING.value,
                "created_at": now.isoformat(),
                "items": json.dumps(payload["items"], ensure_ascii=False),
                "custom_images": json.dumps(payload["custom_images"], ensure_ascii=False),
                "payment_info": json.dumps(payload["payment_info"], ensure_ascii=False),
            }
        )
        return payload

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, orders: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(orders, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
