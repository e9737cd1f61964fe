"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import hmac

from trynex.application.admin_session import AdminSession, Authenticator
from trynex.domain.model.address import DeliveryFeePolicy
from trynex.domain.repository.order_repository import OrderRepository
from trynex.infrastructure.config import Settings
from trynex.infrastructure.http.http_order_repository import HttpOrderRepository
from trynex.infrastructure.persistence.json_order_repository import JsonOrderRepository

TOKEN_SESSION_LABEL = "api-token"


def order_repository(settings: Settings, offline: bool = False) -> OrderRepository:
    if offline:
        return JsonOrderRepository(settings.data_dir / "orders.json")
    return _http_repository(settings)


def fee_policy(settings: Settings) -> DeliveryFeePolicy:
    return DeliveryFeePolicy(free_delivery_threshold=settings.free_delivery_threshold)


def admin_session(settings: Settings, offline: bool = False) -> AdminSession:
    authenticator: Authenticator
    if offline:
        authenticator = _offline_authenticator(settings)
    else:
        authenticator = _http_repository(settings).authenticate_admin
    return AdminSession(
        authenticator,
        session_file=settings.data_dir / "admin_session.json",
        preauthorized_as=TOKEN_SESSION_LABEL if settings.admin_token else None,
    )


def _http_repository(settings: Settings) -> HttpOrderRepository:
    return HttpOrderRepository(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout,
        status_path=settings.status_path,
        auth_token=settings.admin_token,
    )


def _offline_authenticator(settings: Settings) -> Authenticator:
    def authenticate(email: str, password: str) -> bool:
        if not settings.offline_admin_email or not settings.offline_admin_password:
            return False
        return email == settings.offline_admin_email and hmac.compare_digest(
            password.encode("utf-8"), settings.offline_admin_password.encode("utf-8")
        )

    return authenticate
