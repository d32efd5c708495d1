"""Field-level validators for every entity.

Each validator returns a ``ValidationResult`` listing human-readable errors.
With ``partial=True`` only the fields present in the payload are checked,
which is how updates are validated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cityhunt.database import DocumentStore

APPOINTMENT_STATUSES = ("scheduled", "confirmed", "completed", "cancelled")
ACTIVE_APPOINTMENT_STATUSES = ("scheduled", "confirmed")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_DIGEST_RE = re.compile(r"^[0-9a-fA-F]{64}$")

PASSWORD_ERROR = "Password must be a valid SHA256 hash (64 hex characters)"
RESULT_ERROR = "Result must be an object with message (string) and data (any type or null)"


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _min_length(value: Any, length: int) -> bool:  # noqa: ANN401
    return isinstance(value, str) and len(value.strip()) >= length


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def is_valid_date(value: Any) -> bool:  # noqa: ANN401
    """``YYYY-MM-DD`` that is also a real calendar date (rejects 2023-02-30)."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return False
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return False
    return parsed.isoformat() == value


def is_valid_time(value: Any) -> bool:  # noqa: ANN401
    return isinstance(value, str) and bool(_TIME_RE.match(value))


def is_valid_digest(value: Any) -> bool:  # noqa: ANN401
    """A password digest is exactly 64 hexadecimal characters."""
    return isinstance(value, str) and bool(_DIGEST_RE.match(value))


def is_valid_result(result: Any) -> bool:  # noqa: ANN401
    """A checkpoint result: non-empty ``message`` and a ``data`` key (null allowed)."""
    return (
        isinstance(result, dict)
        and isinstance(result.get("message"), str)
        and len(result["message"].strip()) > 0
        and "data" in result
    )


def _is_positive_number(value: Any) -> bool:  # noqa: ANN401
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def validate_user(data: dict[str, Any], *, partial: bool = False) -> ValidationResult:
    result = ValidationResult()

    if (not partial or "name" in data) and not _min_length(data.get("name"), 2):
        result.errors.append("Name is required and must be at least 2 characters long")

    email = data.get("email")
    if email is not None:
        if not isinstance(email, str):
            result.errors.append("Email must be a string")
        elif email.strip() and not is_valid_email(email.strip()):
            result.errors.append("Email format is invalid")

    return result


def validate_login(data: dict[str, Any]) -> ValidationResult:
    result = ValidationResult()
    username = data.get("username")
    if not isinstance(username, str) or not username.strip():
        result.errors.append("Username is required")
    if not is_valid_digest(data.get("password")):
        result.errors.append(PASSWORD_ERROR)
    return result


def validate_appointment(data: dict[str, Any], *, partial: bool = False) -> ValidationResult:
    result = ValidationResult()

    def checks(name: str) -> bool:
        return not partial or name in data

    if checks("userId") and not DocumentStore.is_valid_id(data.get("userId")):
        result.errors.append("Valid userId is required")
    if checks("title") and not _min_length(data.get("title"), 3):
        result.errors.append("Title is required and must be at least 3 characters long")
    if checks("date") and not is_valid_date(data.get("date")):
        result.errors.append("Valid date is required (format: YYYY-MM-DD)")
    if checks("time") and not is_valid_time(data.get("time")):
        result.errors.append("Valid time is required (format: HH:MM)")
    if data.get("duration") is not None and not _is_positive_number(data["duration"]):
        result.errors.append("Duration must be a positive number (in minutes)")
    if data.get("status") is not None and data["status"] not in APPOINTMENT_STATUSES:
        result.errors.append(f"Status must be one of: {', '.join(APPOINTMENT_STATUSES)}")

    return result


def validate_checkpoint(data: dict[str, Any], *, partial: bool = False) -> ValidationResult:
    result = ValidationResult()

    def checks(name: str) -> bool:
        return not partial or name in data

    if checks("internalId") and not _min_length(data.get("internalId"), 2):
        result.errors.append("InternalId is required and must be at least 2 characters long")
    if checks("location") and not _min_length(data.get("location"), 2):
        result.errors.append("Location is required and must be at least 2 characters long")
    if data.get("description") is not None and not isinstance(data["description"], str):
        result.errors.append("Description must be a string when provided")
    if checks("isMajorCheckpoint") and not isinstance(data.get("isMajorCheckpoint"), bool):
        result.errors.append("IsMajorCheckpoint must be a boolean value")
    if data.get("result") is not None and not is_valid_result(data["result"]):
        result.errors.append(RESULT_ERROR)

    return result


def is_valid_prova_id(value: Any) -> bool:  # noqa: ANN401
    """A non-empty string or an integer; never a query document."""
    if isinstance(value, str):
        return bool(value.strip())
    return isinstance(value, int) and not isinstance(value, bool)


def validate_street(data: dict[str, Any]) -> ValidationResult:
    result = ValidationResult()
    location = data.get("location")
    if not is_valid_prova_id(data.get("provaId")) or not isinstance(location, str) or not location.strip():
        result.errors.append("provaId and location are required")
    return result
