"""Appointment router: all /api/appointments/* endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Response

from cityhunt.appointments.repository import AppointmentRepository
from cityhunt.appointments.schemas import AppointmentCreateRequest, AppointmentUpdateRequest
from cityhunt.dependencies import PageParams, get_appointment_repository
from cityhunt.errors import NotFoundError
from cityhunt.schemas import ok, ok_page

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


@router.get("")
async def list_appointments(
    paging: PageParams = Depends(),  # noqa: B008
    status: str | None = None,
    date: str | None = None,
    appointments: AppointmentRepository = Depends(get_appointment_repository),  # noqa: B008
) -> dict[str, Any]:
    """List appointments with the owning user embedded, soonest first."""
    query: dict[str, Any] = {}
    if status:
        query["status"] = status
    if date:
        query["date"] = date
    return ok_page(await appointments.find_all(query, page=paging.page, limit=paging.limit))


@router.get("/stats")
async def appointment_stats(
    appointments: AppointmentRepository = Depends(get_appointment_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await appointments.get_stats())


@router.get("/range")
async def appointments_in_range(
    start: str = Query(...),
    end: str = Query(...),
    paging: PageParams = Depends(),  # noqa: B008
    appointments: AppointmentRepository = Depends(get_appointment_repository),  # noqa: B008
) -> dict[str, Any]:
    """Appointments dated between ``start`` and ``end`` inclusive."""
    return ok_page(await appointments.find_by_date_range(start, end, page=paging.page, limit=paging.limit))


@router.get("/user/{user_id}")
async def appointments_for_user(
    user_id: str,
    paging: PageParams = Depends(),  # noqa: B008
    appointments: AppointmentRepository = Depends(get_appointment_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok_page(await appointments.find_by_user_id(user_id, page=paging.page, limit=paging.limit))


@router.get("/{appointment_id}")
async def get_appointment(
    appointment_id: str,
    appointments: AppointmentRepository = Depends(get_appointment_repository),  # noqa: B008
) -> dict[str, Any]:
    appointment = await appointments.find_by_id(appointment_id)
    if appointment is None:
        msg = "Appointment not found"
        raise NotFoundError(msg)
    return ok(appointment)


@router.post("", status_code=201)
async def create_appointment(
    body: AppointmentCreateRequest,
    appointments: AppointmentRepository = Depends(get_appointment_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await appointments.create(body.payload()))


@router.put("/{appointment_id}")
async def update_appointment(
    appointment_id: str,
    body: AppointmentUpdateRequest,
    appointments: AppointmentRepository = Depends(get_appointment_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await appointments.update_by_id(appointment_id, body.payload()))


@router.delete("/{appointment_id}", status_code=204)
async def delete_appointment(
    appointment_id: str,
    appointments: AppointmentRepository = Depends(get_appointment_repository),  # noqa: B008
) -> Response:
    await appointments.delete_by_id(appointment_id)
    return Response(status_code=204)
