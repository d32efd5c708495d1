"""Checkpoint persistence, result payloads and dashboard aggregates."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

import structlog

from cityhunt.database import contains, utcnow
from cityhunt.errors import ConflictError, NotFoundError, ValidationFailedError
from cityhunt.pagination import paged
from cityhunt.validation import RESULT_ERROR, is_valid_result, validate_checkpoint

if TYPE_CHECKING:
    from cityhunt.database import Document, DocumentStore, SortSpec

logger = structlog.get_logger()

CHECKPOINTS = "checkpoints"
DUPLICATE_MESSAGE = "Checkpoint with this internalId already exists"

CHECKPOINT_PROJECTION: Document = {
    "_id": 1,
    "internalId": 1,
    "location": 1,
    "description": 1,
    "isMajorCheckpoint": 1,
    "result": 1,
    "createdAt": 1,
    "updatedAt": 1,
}


class CheckpointRepository:
    """Validate-then-persist operations on the ``checkpoints`` collection."""

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
        """Page through checkpoints, major ones first and newest first within each group."""
        items, total = await self.store.joined_page(
            CHECKPOINTS,
            match=filter or {},
            project=CHECKPOINT_PROJECTION,
            sort=sort or [("isMajorCheckpoint", -1), ("createdAt", -1)],
            page=page,
            limit=limit,
        )
        return paged(items, page, limit, total)

    async def find_by_id(self, checkpoint_id: str) -> Document | None:
        return await self.store.find_by_id(CHECKPOINTS, self.store.object_id(checkpoint_id, "checkpoint ID"))

    async def find_by_internal_id(self, internal_id: str, *, page: int = 1, limit: int = 10) -> dict[str, Any]:
        return await self.find_all({"internalId": contains(internal_id)}, page=page, limit=limit)

    async def find_by_location(self, location: str, *, page: int = 1, limit: int = 10) -> dict[str, Any]:
        return await self.find_all({"location": contains(location)}, page=page, limit=limit)

    async def find_major(self, *, page: int = 1, limit: int = 10) -> dict[str, Any]:
        return await self.find_all({"isMajorCheckpoint": True}, page=page, limit=limit)

    async def create(self, data: Document) -> Document:
        """Create a checkpoint.

        Raises:
            ValidationFailedError: If any field is invalid.
            ConflictError: If ``internalId`` is already used.
        """
        validation = validate_checkpoint(data)
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors)

        internal_id = data["internalId"].strip()
        if await self.store.find_one(CHECKPOINTS, {"internalId": internal_id}) is not None:
            raise ConflictError(DUPLICATE_MESSAGE)

        description = data.get("description")
        document: Document = {
            "internalId": internal_id,
            "location": data["location"].strip(),
            "description": description.strip() if description else None,
            "isMajorCheckpoint": data["isMajorCheckpoint"],
            "result": data.get("result"),
        }
        checkpoint_id = await self.store.insert_one(CHECKPOINTS, document)
        logger.info("checkpoint_created", checkpoint_id=str(checkpoint_id), internal_id=internal_id)
        return await self.find_by_id(str(checkpoint_id))

    async def update_by_id(self, checkpoint_id: str, data: Document) -> Document:
        oid = self.store.object_id(checkpoint_id, "checkpoint ID")
        if not data:
            raise ValidationFailedError(["No update data provided"])

        validation = validate_checkpoint(data, partial=True)
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors)

        changes: Document = {}
        if "internalId" in data:
            changes["internalId"] = data["internalId"].strip()
            clash = await self.store.find_one(
                CHECKPOINTS, {"internalId": changes["internalId"], "_id": {"$ne": oid}}
            )
            if clash is not None:
                raise ConflictError(DUPLICATE_MESSAGE)
        if "location" in data:
            changes["location"] = data["location"].strip()
        if "description" in data:
            changes["description"] = data["description"].strip() if data["description"] else None
        if "isMajorCheckpoint" in data:
            changes["isMajorCheckpoint"] = data["isMajorCheckpoint"]
        if "result" in data:
            changes["result"] = data["result"]

        updated = await self.store.find_one_and_update(CHECKPOINTS, {"_id": oid}, {"$set": changes})
        if updated is None:
            msg = "Checkpoint not found"
            raise NotFoundError(msg)
        logger.info("checkpoint_updated", checkpoint_id=checkpoint_id, fields=sorted(changes))
        return updated

    async def update_result(self, checkpoint_id: str, result: Document | None) -> Document:
        """Replace the ``result`` payload wholesale; ``None`` clears it."""
        oid = self.store.object_id(checkpoint_id, "checkpoint ID")
        if result is not None and not is_valid_result(result):
            raise ValidationFailedError([RESULT_ERROR])

        updated = await self.store.find_one_and_update(CHECKPOINTS, {"_id": oid}, {"$set": {"result": result}})
        if updated is None:
            msg = "Checkpoint not found"
            raise NotFoundError(msg)
        logger.info("checkpoint_result_updated", checkpoint_id=checkpoint_id, cleared=result is None)
        return updated

    async def delete_by_id(self, checkpoint_id: str) -> None:
        deleted = await self.store.delete_by_id(CHECKPOINTS, self.store.object_id(checkpoint_id, "checkpoint ID"))
        if deleted == 0:
            msg = "Checkpoint not found"
            raise NotFoundError(msg)
        logger.info("checkpoint_deleted", checkpoint_id=checkpoint_id)

    async def get_stats(self) -> dict[str, Any]:
        total = await self.store.count(CHECKPOINTS)
        major = await self.store.count(CHECKPOINTS, {"isMajorCheckpoint": True})
        with_results = await self.store.count(CHECKPOINTS, {"result": {"$exists": True, "$ne": None}})
        recently_updated = await self.store.count(
            CHECKPOINTS, {"updatedAt": {"$gte": utcnow() - timedelta(hours=24)}}
        )
        return {
            "totalCheckpoints": total,
            "majorCheckpoints": major,
            "minorCheckpoints": total - major,
            "checkpointsWithResults": with_results,
            "recentlyUpdated": recently_updated,
        }

    async def get_dashboard_data(self) -> dict[str, Any]:
        major = await self.find_major(limit=10)
        recent = await self.find_all(limit=5, sort=[("updatedAt", -1)])
        return {
            "stats": await self.get_stats(),
            "majorCheckpoints": major["items"],
            "recentCheckpoints": recent["items"],
        }
