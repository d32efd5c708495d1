"""Error taxonomy shared by repositories and the HTTP layer.

Each error class carries the HTTP status it maps to, so the exception
handlers never have to inspect message text.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for all expected service failures."""

    status_code: int = 500

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ValidationFailedError(ServiceError):
    """Input failed entity validation."""

    status_code = 400

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Validation failed: {', '.join(errors)}", errors)


class NotFoundError(ServiceError):
    """A referenced entity does not exist."""

    status_code = 404


class ConflictError(ServiceError):
    """Duplicate unique key or scheduling clash."""

    status_code = 400


class MalformedIdError(ServiceError):
    """An identifier is not a well-formed ObjectId."""

    status_code = 400


class AuthenticationError(ServiceError):
    """Credentials were rejected."""

    status_code = 401


class StoreError(ServiceError):
    """The document store rejected or failed an operation."""

    status_code = 500


class StoreUnavailableError(StoreError):
    """The document store could not be reached."""
