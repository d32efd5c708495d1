"""Street destinations and the per-username verification log."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from cityhunt.database import utcnow
from cityhunt.errors import ConflictError, ValidationFailedError
from cityhunt.pagination import paged
from cityhunt.validation import validate_street

if TYPE_CHECKING:
    from cityhunt.database import Document, DocumentStore, SortSpec

logger = structlog.get_logger()

DESTINATIONS = "destinations"
VERIFICATIONS = "streetVerifications"

# Log fields that a username key must not overwrite.
_RESERVED_FIELDS = frozenset({"_id", "provaId", "location", "createdAt", "updatedAt"})


def normalize_location(location: str) -> str:
    return location.strip().lower()


def _is_loggable_username(username: Any) -> bool:  # noqa: ANN401
    """Usernames become field names in the log document."""
    return (
        isinstance(username, str)
        and bool(username)
        and username not in _RESERVED_FIELDS
        and "." not in username
        and not username.startswith("$")
    )


class StreetRepository:
    """Destination lookup plus an upserted log of who verified what."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def verify(self, prova_id: Any, location: str, username: str) -> Document:  # noqa: ANN401
        """Check a (provaId, location) guess and log the attempt under ``username``.

        The log holds one document per (provaId, location); each verifying
        username gets its own timestamp field in it, overwritten on repeat
        attempts.
        """
        if not _is_loggable_username(username):
            raise ValidationFailedError(["A valid username is required"])
        validation = validate_street({"provaId": prova_id, "location": location})
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors)

        normalized = normalize_location(location)
        destination = await self.store.find_one(DESTINATIONS, {"provaId": prova_id, "location": normalized})

        now = utcnow()
        await self.store.find_one_and_update(
            VERIFICATIONS,
            {"provaId": prova_id, "location": normalized},
            {
                "$set": {username: now},
                "$setOnInsert": {"provaId": prova_id, "location": normalized},
            },
            upsert=True,
        )
        logger.info(
            "street_verified",
            prova_id=prova_id,
            location=normalized,
            username=username,
            verified=destination is not None,
        )
        return {
            "verified": destination is not None,
            "provaId": prova_id,
            "location": normalized,
            "username": username,
            "timestamp": now,
            "info": destination.get("info") if destination is not None else None,
        }

    async def create(self, data: Document) -> Document:
        validation = validate_street(data)
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors)

        document: Document = {
            "provaId": data["provaId"],
            "location": normalize_location(data["location"]),
            "info": data.get("info"),
        }
        existing = await self.store.find_one(
            DESTINATIONS, {"provaId": document["provaId"], "location": document["location"]}
        )
        if existing is not None:
            msg = "Street record with this provaId and location already exists"
            raise ConflictError(msg)

        street_id = await self.store.insert_one(DESTINATIONS, document)
        logger.info("street_created", street_id=str(street_id), prova_id=document["provaId"])
        return await self.store.find_by_id(DESTINATIONS, street_id)

    async def find_all(
        self,
        filter: Document | None = None,  # noqa: A002
        *,
        page: int = 1,
        limit: int = 10,
        sort: SortSpec | None = None,
    ) -> dict[str, Any]:
        items, total = await self.store.find_page(
            DESTINATIONS, filter or {}, page=page, limit=limit, sort=sort or [("createdAt", -1)]
        )
        return paged(items, page, limit, total)

    async def find_by_id(self, street_id: str) -> Document | None:
        return await self.store.find_by_id(DESTINATIONS, self.store.object_id(street_id, "street ID"))

    async def get_verification_history(self, *, page: int = 1, limit: int = 10) -> dict[str, Any]:
        items, total = await self.store.find_page(
            VERIFICATIONS, {}, page=page, limit=limit, sort=[("updatedAt", -1)]
        )
        return paged(items, page, limit, total)
