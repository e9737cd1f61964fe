"""Domain-level exceptions.

All checkout and order-lifecycle failures are expressed as subclasses of
DomainException so the CLI layer can catch them uniformly and display
user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or form invariant was violated.

    ``errors`` maps field names to user-facing messages when the failure
    comes from a checkout step; ``step`` is the step that was validated.
    """

    def __init__(
        self,
        message: str,
        errors: dict[str, str] | None = None,
        step: int | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = dict(errors or {})
        self.step = step


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class OrderSubmissionError(DomainException):
    """Creating an order failed; the caller may retry without data loss."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP = "http"
    MALFORMED = "malformed"

    def __init__(self, message: str, kind: str = NETWORK, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class SubmissionInProgressError(DomainException):
    """A second submit was attempted while one is still in flight."""


class StatusUpdateError(DomainException):
    """An admin status change could not be applied."""


class TransitionRejected(StatusUpdateError):
    """The order targeted by a status change does not exist server-side."""


class OrderFetchError(DomainException):
    """Orders could not be read from the order service."""


class MalformedRecordError(DomainException):
    """A persisted order field could not be decoded."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class AuthenticationError(DomainException):
    """Admin credentials were rejected or no session is active."""
