"""HTTP implementation of OrderRepository against the shop's REST API."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests
import structlog

from trynex.domain.exceptions import (
    AuthenticationError,
    EntityNotFoundError,
    MalformedRecordError,
    OrderFetchError,
    OrderSubmissionError,
    StatusUpdateError,
)
from trynex.domain.model.order import OrderCreateRequest, OrderRecord
from trynex.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)

ORDERS_PATH = "/api/orders"
ADMIN_LOGIN_PATH = "/api/admin/login"


def _error_message(response: requests.Response) -> str:
    """Best human-readable message from an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if body.get(key):
                return str(body[key])
    text = (response.text or "").strip()
    return text or f"HTTP {response.status_code}"


class HttpOrderRepository(OrderRepository):

    def __init__(
        self,
        base_url: str,
        timeout: float = 20.0,
        status_path: str = "status",
        session: requests.Session | None = None,
        auth_token: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._status_path = status_path
        self._session = session or requests.Session()
        if auth_token:
            self._session.headers["Authorization"] = f"Bearer {auth_token}"

    # --- OrderRepository interface --------------------------------------------

    def create(self, request: OrderCreateRequest) -> OrderRecord:
        try:
            response = self._session.post(
                self._url(ORDERS_PATH), json=request.to_payload(), timeout=self._timeout
            )
        except requests.exceptions.Timeout as exc:
            raise OrderSubmissionError(
                f"Order service did not answer within {self._timeout:g}s",
                kind=OrderSubmissionError.TIMEOUT,
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise OrderSubmissionError(
                f"Could not reach the order service: {exc}",
                kind=OrderSubmissionError.NETWORK,
            ) from exc

        if not response.ok:
            raise OrderSubmissionError(
                f"Order creation failed: {response.status_code} - {_error_message(response)}",
                kind=OrderSubmissionError.HTTP,
                status_code=response.status_code,
            )

        try:
            return OrderRecord.from_payload(response.json())
        except (ValueError, MalformedRecordError) as exc:
            raise OrderSubmissionError(
                f"Order service returned an unreadable response: {exc}",
                kind=OrderSubmissionError.MALFORMED,
                status_code=response.status_code,
            ) from exc

    def list_all(self) -> list[OrderRecord]:
        body = self._get_json(ORDERS_PATH)
        if isinstance(body, dict) and isinstance(body.get("orders"), list):
            body = body["orders"]
        if not isinstance(body, list):
            raise OrderFetchError(f"Expected a list of orders, got {type(body).__name__}")

        records: list[OrderRecord] = []
        for index, raw in enumerate(body):
            try:
                records.append(OrderRecord.from_payload(raw))
            except MalformedRecordError as exc:
                logger.warning("Skipping malformed order in listing", index=index, error=str(exc))
        return records

    def get_by_tracking_id(self, tracking_id: str) -> OrderRecord | None:
        body = self._get_json(f"{ORDERS_PATH}/{quote(tracking_id, safe='')}", allow_missing=True)
        if body is None:
            return None
        try:
            return OrderRecord.from_payload(body)
        except MalformedRecordError as exc:
            raise OrderFetchError(str(exc)) from exc

    def update_status(self, order_id: str, status: str) -> None:
        """PATCH the new status using the configured endpoint shape.

        Servers without the configured route answer 405 or 404, so either
        answer from the first shape is retried once on the other shape. The
        order only counts as missing when no shape accepted the request and
        at least one of them answered 404.
        """
        styles = [self._status_path] + [s for s in ("status", "record") if s != self._status_path]
        codes: list[int] = []
        for style in styles:
            response = self._patch_status(order_id, status, style)
            codes.append(response.status_code)
            if response.status_code not in (404, 405):
                break
            logger.info("Status endpoint shape unavailable", style=style, status_code=response.status_code)

        if response.ok:
            return
        if response.status_code in (404, 405) and 404 in codes:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        raise StatusUpdateError(
            f"Status update failed: {response.status_code} - {_error_message(response)}"
        )

    # --- Admin authentication -------------------------------------------------

    def authenticate_admin(self, email: str, password: str) -> bool:
        try:
            response = self._session.post(
                self._url(ADMIN_LOGIN_PATH),
                json={"email": email, "password": password},
                timeout=self._timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise AuthenticationError(f"Could not reach the login service: {exc}") from exc
        if response.status_code in (400, 401, 403):
            return False
        if not response.ok:
            raise AuthenticationError(
                f"Login failed: {response.status_code} - {_error_message(response)}"
            )
        return True

    # --- HTTP helpers ---------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _status_url(self, order_id: str, style: str) -> str:
        path = f"{ORDERS_PATH}/{quote(str(order_id), safe='')}"
        return self._url(f"{path}/status" if style == "status" else path)

    def _patch_status(self, order_id: str, status: str, style: str) -> requests.Response:
        try:
            return self._session.patch(
                self._status_url(order_id, style), json={"status": status}, timeout=self._timeout
            )
        except requests.exceptions.RequestException as exc:
            raise StatusUpdateError(f"Could not reach the order service: {exc}") from exc

    def _get_json(self, path: str, allow_missing: bool = False) -> Any:
        try:
            response = self._session.get(self._url(path), timeout=self._timeout)
        except requests.exceptions.RequestException as exc:
            raise OrderFetchError(f"Could not reach the order service: {exc}") from exc

        if allow_missing and response.status_code == 404:
            return None
        if not response.ok:
            raise OrderFetchError(
                f"Fetching orders failed: {response.status_code} - {_error_message(response)}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise OrderFetchError(f"Order service returned invalid JSON: {exc}") from exc
