"""Request schemas for street endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import StrictInt, StrictStr, field_validator

from cityhunt.schemas import RequestBody

# provaId is used verbatim as a query value, so objects and arrays are refused.
ProvaId = StrictStr | StrictInt


class StreetVerifyRequest(RequestBody):
    prova_id: ProvaId | None = None
    location: str | None = None
    username: str | None = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None


class StreetCreateRequest(RequestBody):
    prova_id: ProvaId | None = None
    location: str | None = None
    info: Any = None
