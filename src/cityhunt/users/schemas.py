"""Request schemas for user endpoints."""

from __future__ import annotations

from pydantic import StrictBool, field_validator

from cityhunt.schemas import RequestBody


class UserCreateRequest(RequestBody):
    name: str | None = None
    email: str | None = None
    username: str | None = None
    status: str | None = None
    colour: str | None = None
    is_admin_use_only: StrictBool | None = None

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str | None) -> str | None:
        """Usernames are stored trimmed and lower-cased."""
        return v.strip().lower() if v is not None else None


class UserUpdateRequest(RequestBody):
    name: str | None = None
    email: str | None = None
    status: str | None = None
    colour: str | None = None


class UserProgressUpdateRequest(UserUpdateRequest):
    """Username-addressed update; may also move the progress timestamps."""

    last_major_checkpoint: str | None = None
    last_checkpoint: str | None = None
    last_minor_checkpoint: str | None = None
    last_help: str | None = None


class ScoreRequest(RequestBody):
    is_major_checkpoint: StrictBool
