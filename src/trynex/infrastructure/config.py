"""Runtime settings read from the environment (and a local ``.env``)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv

from trynex.application.support import DEFAULT_WHATSAPP_TEMPLATE
from trynex.domain.exceptions import ValidationError
from trynex.domain.model.address import DEFAULT_FREE_DELIVERY_THRESHOLD

STATUS_PATH_STYLES = ("status", "record")
FREE_DELIVERY_THRESHOLD_KEY = "TRYNEX_FREE_DELIVERY_THRESHOLD"


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "http://127.0.0.1:5000"
    request_timeout: float = 20.0
    status_path: str = "status"
    free_delivery_threshold: Decimal | None = None
    whatsapp_number: str = "+8801940689487"
    whatsapp_template: str = DEFAULT_WHATSAPP_TEMPLATE
    data_dir: Path = Path("data")
    admin_token: str | None = None
    offline_admin_email: str | None = None
    offline_admin_password: str | None = None

    @staticmethod
    def from_env(environ: dict[str, str] | None = None) -> Settings:
        if environ is None:
            load_dotenv()
            environ = dict(os.environ)

        status_path = environ.get("TRYNEX_STATUS_PATH", "status").strip().lower()
        if status_path not in STATUS_PATH_STYLES:
            raise ValidationError(
                f"TRYNEX_STATUS_PATH must be one of {', '.join(STATUS_PATH_STYLES)}, got {status_path!r}"
            )

        return Settings(
            api_base_url=environ.get("TRYNEX_API_BASE_URL", Settings.api_base_url).rstrip("/"),
            request_timeout=_positive_float(environ, "TRYNEX_REQUEST_TIMEOUT", Settings.request_timeout),
            status_path=status_path,
            free_delivery_threshold=_free_delivery_threshold(environ),
            whatsapp_number=environ.get("TRYNEX_WHATSAPP_NUMBER", Settings.whatsapp_number),
            whatsapp_template=environ.get("TRYNEX_WHATSAPP_TEMPLATE", DEFAULT_WHATSAPP_TEMPLATE),
            data_dir=Path(environ.get("TRYNEX_DATA_DIR", "data")),
            admin_token=environ.get("TRYNEX_ADMIN_TOKEN") or None,
            offline_admin_email=environ.get("ADMIN_EMAIL") or None,
            offline_admin_password=environ.get("ADMIN_PASSWORD") or None,
        )


def _positive_float(environ: dict[str, str], key: str, default: float) -> float:
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValidationError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValidationError(f"{key} must be positive, got {raw!r}")
    return value


def _optional_decimal(environ: dict[str, str], key: str) -> Decimal | None:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as exc:
        raise ValidationError(f"{key} must be a number, got {raw!r}") from exc
    if not value.is_finite() or value < 0:
        raise ValidationError(f"{key} must be a non-negative number, got {raw!r}")
    return value


def _free_delivery_threshold(environ: dict[str, str]) -> Decimal | None:
    """A number, or ``standard`` for the shop's usual free-delivery amount."""
    raw = environ.get(FREE_DELIVERY_THRESHOLD_KEY, "")
    if raw.strip().lower() == "standard":
        return Decimal(DEFAULT_FREE_DELIVERY_THRESHOLD)
    return _optional_decimal(environ, FREE_DELIVERY_THRESHOLD_KEY)
