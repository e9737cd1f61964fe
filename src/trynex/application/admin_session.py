"""Admin session guard.

Replaces the storefront's ``localStorage`` flag with an explicit object
built at the composition root. Admin commands check
``is_authenticated()`` before doing anything.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import structlog

from trynex.domain.exceptions import AuthenticationError, ValidationError

logger = structlog.get_logger(__name__)

Authenticator = Callable[[str, str], bool]


class AdminSession:

    def __init__(
        self,
        authenticator: Authenticator,
        session_file: Path | None = None,
        preauthorized_as: str | None = None,
    ) -> None:
        self._authenticator = authenticator
        self._session_file = session_file
        self._email: str | None = preauthorized_as or self._load()

    @property
    def email(self) -> str | None:
        return self._email

    def is_authenticated(self) -> bool:
        return self._email is not None

    def login(self, email: str, password: str) -> None:
        if not email or not password:
            raise ValidationError("Email and password are required")
        if not self._authenticator(email.strip(), password):
            logger.warning("Admin login rejected", email=email)
            raise AuthenticationError("Invalid credentials")
        self._email = email.strip()
        self._persist()
        logger.info("Admin logged in", email=self._email)

    def logout(self) -> None:
        self._email = None
        if self._session_file is not None and self._session_file.exists():
            self._session_file.unlink()
        logger.info("Admin logged out")

    def require(self) -> str:
        """Return the admin email or raise when nobody is logged in."""
        if self._email is None:
            raise AuthenticationError("Admin login required. Run 'trynex admin login' first.")
        return self._email

    # --- Session file ---------------------------------------------------------

    def _load(self) -> str | None:
        if self._session_file is None or not self._session_file.exists():
            return None
        try:
            data = json.loads(self._session_file.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring unreadable admin session file", path=str(self._session_file))
            return None
        email = data.get("email") if isinstance(data, dict) else None
        return email or None

    def _persist(self) -> None:
        if self._session_file is None:
            return
        self._session_file.parent.mkdir(parents=True, exist_ok=True)
        self._session_file.write_text(
            json.dumps({"email": self._email}) + "\n", encoding="utf-8"
        )
