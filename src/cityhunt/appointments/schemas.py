"""Request schemas for appointment endpoints."""

from __future__ import annotations

from pydantic import StrictFloat, StrictInt

from cityhunt.schemas import RequestBody


class AppointmentUpdateRequest(RequestBody):
    title: str | None = None
    description: str | None = None
    date: str | None = None
    time: str | None = None
    duration: StrictInt | StrictFloat | None = None
    status: str | None = None
    notes: str | None = None


class AppointmentCreateRequest(AppointmentUpdateRequest):
    user_id: str | None = None
