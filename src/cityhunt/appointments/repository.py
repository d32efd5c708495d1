"""Appointment persistence with user denormalization and slot conflict checks.

A user may hold at most one scheduled or confirmed appointment per
(date, time). The check runs before the write and is not atomic with it.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

import structlog

from cityhunt.database import Join, utcnow
from cityhunt.errors import ConflictError, NotFoundError, ValidationFailedError
from cityhunt.pagination import paged
from cityhunt.users.repository import USERS
from cityhunt.validation import (
    ACTIVE_APPOINTMENT_STATUSES,
    APPOINTMENT_STATUSES,
    is_valid_date,
    validate_appointment,
)

if TYPE_CHECKING:
    from bson import ObjectId

    from cityhunt.database import Document, DocumentStore, SortSpec

logger = structlog.get_logger()

APPOINTMENTS = "appointments"
DEFAULT_DURATION = 30
CONFLICT_MESSAGE = "User already has an appointment at this date and time"

USER_JOIN = Join(from_collection=USERS, local_field="userId", foreign_field="_id", as_field="user")
APPOINTMENT_PROJECTION: Document = {
    "_id": 1,
    "title": 1,
    "description": 1,
    "date": 1,
    "time": 1,
    "duration": 1,
    "status": 1,
    "notes": 1,
    "createdAt": 1,
    "updatedAt": 1,
    "user._id": 1,
    "user.name": 1,
    "user.email": 1,
}


def _clean_text(value: Any) -> str | None:  # noqa: ANN401
    return value.strip() if isinstance(value, str) and value.strip() else None


class AppointmentRepository:
    """Validate-then-persist operations on the ``appointments`` collection."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def find_all(
        self,
        filter: Document | None = None,  # noqa: A002
        *,
        page: int = 1,
        limit: int = 10,
        sort: SortSpec | None = None,
    ) -> dict[str, Any]:
        """Page through appointments with the owning user embedded, soonest first."""
        items, total = await self.store.joined_page(
            APPOINTMENTS,
            match=filter or {},
            join=USER_JOIN,
            project=APPOINTMENT_PROJECTION,
            sort=sort or [("date", 1), ("time", 1)],
            page=page,
            limit=limit,
        )
        return paged(items, page, limit, total)

    async def find_by_id(self, appointment_id: str) -> Document | None:
        oid = self.store.object_id(appointment_id, "appointment ID")
        items, _ = await self.store.joined_page(
            APPOINTMENTS,
            match={"_id": oid},
            join=USER_JOIN,
            project=APPOINTMENT_PROJECTION,
            limit=1,
        )
        return items[0] if items else None

    async def find_by_user_id(self, user_id: str, *, page: int = 1, limit: int = 10) -> dict[str, Any]:
        oid = self.store.object_id(user_id, "user ID")
        return await self.find_all({"userId": oid}, page=page, limit=limit)

    async def find_by_date_range(
        self, start_date: str, end_date: str, *, page: int = 1, limit: int = 10
    ) -> dict[str, Any]:
        if not is_valid_date(start_date) or not is_valid_date(end_date):
            raise ValidationFailedError(["Invalid date format. Use YYYY-MM-DD"])
        return await self.find_all({"date": {"$gte": start_date, "$lte": end_date}}, page=page, limit=limit)

    async def _assert_slot_free(
        self, user_id: ObjectId, date: str, time: str, exclude_id: ObjectId | None = None
    ) -> None:
        query: Document = {
            "userId": user_id,
            "date": date,
            "time": time,
            "status": {"$in": list(ACTIVE_APPOINTMENT_STATUSES)},
        }
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        if await self.store.find_one(APPOINTMENTS, query) is not None:
            raise ConflictError(CONFLICT_MESSAGE)

    async def create(self, data: Document) -> Document:
        """Book an appointment for an existing user.

        Raises:
            ValidationFailedError: If any field is invalid.
            NotFoundError: If the referenced user does not exist.
            ConflictError: If the user already holds the slot.
        """
        validation = validate_appointment(data)
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors)

        user_id = self.store.object_id(data["userId"], "user ID")
        if await self.store.find_by_id(USERS, user_id) is None:
            msg = "User not found"
            raise NotFoundError(msg)

        await self._assert_slot_free(user_id, data["date"], data["time"])

        document: Document = {
            "userId": user_id,
            "title": data["title"].strip(),
            "description": _clean_text(data.get("description")),
            "date": data["date"],
            "time": data["time"],
            "duration": data.get("duration") or DEFAULT_DURATION,
            "status": data.get("status") or "scheduled",
            "notes": _clean_text(data.get("notes")),
        }
        appointment_id = await self.store.insert_one(APPOINTMENTS, document)
        logger.info(
            "appointment_created",
            appointment_id=str(appointment_id),
            user_id=str(user_id),
            date=document["date"],
            time=document["time"],
        )

        created = await self.find_by_id(str(appointment_id))
        if created is None:
            msg = "Appointment not found"
            raise NotFoundError(msg)
        return created

    async def update_by_id(self, appointment_id: str, data: Document) -> Document:
        """Apply the fields present in ``data``; re-checks the slot if date or time move."""
        oid = self.store.object_id(appointment_id, "appointment ID")
        if not data:
            raise ValidationFailedError(["No update data provided"])

        validation = validate_appointment(data, partial=True)
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors)

        changes: Document = {}
        if "title" in data:
            changes["title"] = data["title"].strip()
        if "description" in data:
            changes["description"] = _clean_text(data["description"])
        for key in ("date", "time", "duration", "status"):
            if data.get(key) is not None:
                changes[key] = data[key]
        if "notes" in data:
            changes["notes"] = _clean_text(data["notes"])

        if "date" in changes or "time" in changes:
            current = await self.store.find_by_id(APPOINTMENTS, oid)
            if current is None:
                msg = "Appointment not found"
                raise NotFoundError(msg)
            await self._assert_slot_free(
                current["userId"],
                changes.get("date", current["date"]),
                changes.get("time", current["time"]),
                exclude_id=oid,
            )

        updated = await self.store.find_one_and_update(APPOINTMENTS, {"_id": oid}, {"$set": changes})
        if updated is None:
            msg = "Appointment not found"
            raise NotFoundError(msg)
        logger.info("appointment_updated", appointment_id=appointment_id, fields=sorted(changes))
        return await self.find_by_id(appointment_id)

    async def delete_by_id(self, appointment_id: str) -> None:
        deleted = await self.store.delete_by_id(APPOINTMENTS, self.store.object_id(appointment_id, "appointment ID"))
        if deleted == 0:
            msg = "Appointment not found"
            raise NotFoundError(msg)
        logger.info("appointment_deleted", appointment_id=appointment_id)

    async def get_stats(self) -> dict[str, Any]:
        """Counts per status, today's bookings and the next seven days' active ones."""
        stats: dict[str, Any] = {"totalAppointments": await self.store.count(APPOINTMENTS)}
        for status in APPOINTMENT_STATUSES:
            stats[f"{status}Appointments"] = await self.store.count(APPOINTMENTS, {"status": status})

        today = utcnow().date()
        next_week = today + timedelta(days=7)
        stats["todayAppointments"] = await self.store.count(APPOINTMENTS, {"date": today.isoformat()})
        stats["upcomingAppointments"] = await self.store.count(
            APPOINTMENTS,
            {
                "date": {"$gte": today.isoformat(), "$lte": next_week.isoformat()},
                "status": {"$in": list(ACTIVE_APPOINTMENT_STATUSES)},
            },
        )
        return stats
