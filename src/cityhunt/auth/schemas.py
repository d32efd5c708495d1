"""Request schemas for authentication endpoints.

Passwords are always SHA-256 hex digests computed by the client.
"""

from __future__ import annotations

from pydantic import field_validator

from cityhunt.schemas import RequestBody


class RegisterRequest(RequestBody):
    name: str | None = None
    email: str | None = None
    username: str | None = None
    password: str | None = None
    colour: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        """Normalize email to lowercase."""
        return v.lower().strip() if v is not None else None


class LoginRequest(RequestBody):
    username: str | None = None
    password: str | None = None


class ChangePasswordRequest(RequestBody):
    user_id: str
    current_password: str | None = None
    new_password: str | None = None


class ResetPasswordRequest(RequestBody):
    user_id: str
    new_password: str | None = None
