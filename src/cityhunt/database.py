"""MongoDB document store adapter.

A ``DocumentStore`` is created once by the application lifespan and handed
to every repository. All writes are timestamped here: inserts receive
``createdAt``/``updatedAt`` and every update refreshes ``updatedAt``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from cityhunt.errors import MalformedIdError, StoreError, StoreUnavailableError

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase

logger = structlog.get_logger()

Document = dict[str, Any]
SortSpec = list[tuple[str, int]]


@dataclass(frozen=True)
class Join:
    """One-to-one lookup of a related collection by foreign key."""

    from_collection: str
    local_field: str
    foreign_field: str = "_id"
    as_field: str = "joined"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def contains(term: str) -> Document:
    """Case-insensitive substring match on the literal ``term``."""
    return {"$regex": re.escape(term), "$options": "i"}


def serialize(value: Any) -> Any:  # noqa: ANN401
    """Recursively convert ObjectIds to strings so documents are JSON-safe."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    return value


class DocumentStore:
    """Typed wrapper around a Motor database with automatic timestamping."""

    def __init__(self, client: AsyncIOMotorClient, db_name: str) -> None:
        self._client = client
        self._db: AsyncIOMotorDatabase = client[db_name]

    @classmethod
    async def connect(cls, uri: str, db_name: str, server_selection_timeout_ms: int = 5000) -> DocumentStore:
        """Open a client and verify the server answers a ping."""
        from motor.motor_asyncio import AsyncIOMotorClient

        client = AsyncIOMotorClient(uri, tz_aware=True, serverSelectionTimeoutMS=server_selection_timeout_ms)
        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            logger.error("store_connect_failed", db_name=db_name, error=str(e))
            msg = f"Could not connect to MongoDB: {e}"
            raise StoreUnavailableError(msg) from e
        logger.info("store_connected", db_name=db_name)
        return cls(client, db_name)

    def close(self) -> None:
        """Release the underlying client."""
        self._client.close()
        logger.info("store_closed")

    async def ping(self) -> None:
        """Round-trip to the server; raises StoreUnavailableError on failure."""
        try:
            await self._db.command("ping")
        except PyMongoError as e:
            msg = f"MongoDB ping failed: {e}"
            raise StoreUnavailableError(msg) from e

    def collection(self, name: str) -> AsyncIOMotorCollection:
        return self._db[name]

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    @staticmethod
    def is_valid_id(value: Any) -> bool:  # noqa: ANN401
        """True if ``value`` is an ObjectId or a string parseable as one."""
        if isinstance(value, ObjectId):
            return True
        return isinstance(value, str) and ObjectId.is_valid(value)

    @staticmethod
    def object_id(value: Any, label: str = "ID") -> ObjectId:  # noqa: ANN401
        """Coerce ``value`` to an ObjectId.

        Raises:
            MalformedIdError: If the value is not a well-formed identifier.
        """
        if not DocumentStore.is_valid_id(value):
            msg = f"Invalid {label} format"
            raise MalformedIdError(msg)
        return value if isinstance(value, ObjectId) else ObjectId(value)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find(
        self,
        collection: str,
        filter: Document | None = None,  # noqa: A002
        *,
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Document]:
        try:
            cursor = self.collection(collection).find(filter or {}, sort=sort, skip=skip, limit=limit)
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            raise self._wrap(collection, "find", e) from e

    async def find_page(
        self,
        collection: str,
        filter: Document | None = None,  # noqa: A002
        *,
        page: int = 1,
        limit: int = 10,
        sort: SortSpec | None = None,
    ) -> tuple[list[Document], int]:
        """Fetch one page of documents plus the total count of the filter."""
        items = await self.find(collection, filter, sort=sort, skip=(page - 1) * limit, limit=limit)
        total = await self.count(collection, filter)
        return items, total

    async def find_one(self, collection: str, filter: Document) -> Document | None:  # noqa: A002
        try:
            return await self.collection(collection).find_one(filter)
        except PyMongoError as e:
            raise self._wrap(collection, "find_one", e) from e

    async def find_by_id(self, collection: str, id: Any) -> Document | None:  # noqa: A002, ANN401
        return await self.find_one(collection, {"_id": self.object_id(id)})

    async def count(self, collection: str, filter: Document | None = None) -> int:  # noqa: A002
        try:
            return await self.collection(collection).count_documents(filter or {})
        except PyMongoError as e:
            raise self._wrap(collection, "count", e) from e

    async def aggregate(self, collection: str, pipeline: list[Document]) -> list[Document]:
        try:
            return await self.collection(collection).aggregate(pipeline).to_list(length=None)
        except PyMongoError as e:
            raise self._wrap(collection, "aggregate", e) from e

    async def joined_page(
        self,
        collection: str,
        *,
        match: Document | None = None,
        join: Join | None = None,
        project: Document | None = None,
        sort: SortSpec | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Document], int]:
        """Paginated listing that denormalizes one related document per row.

        Pipeline: match -> lookup -> unwind (keeping unmatched rows) ->
        project -> sort -> skip -> limit. The total is the count of the
        matched set, independent of the page.
        """
        match = match or {}
        pipeline: list[Document] = [{"$match": match}]
        if join is not None:
            pipeline.append(
                {
                    "$lookup": {
                        "from": join.from_collection,
                        "localField": join.local_field,
                        "foreignField": join.foreign_field,
                        "as": join.as_field,
                    }
                }
            )
            pipeline.append({"$unwind": {"path": f"${join.as_field}", "preserveNullAndEmptyArrays": True}})
        if project:
            pipeline.append({"$project": project})
        if sort:
            pipeline.append({"$sort": dict(sort)})
        pipeline.append({"$skip": (page - 1) * limit})
        pipeline.append({"$limit": limit})

        items = await self.aggregate(collection, pipeline)
        total = await self.count(collection, match)
        return items, total

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert_one(self, collection: str, document: Document) -> ObjectId:
        now = utcnow()
        stamped = {**document, "createdAt": now, "updatedAt": now}
        try:
            result = await self.collection(collection).insert_one(stamped)
        except PyMongoError as e:
            raise self._wrap(collection, "insert_one", e) from e
        return result.inserted_id

    async def update_one(
        self,
        collection: str,
        filter: Document,  # noqa: A002
        update: Document,
        *,
        upsert: bool = False,
    ) -> int:
        """Apply ``update`` to the first match; returns the matched count."""
        try:
            stamped = self._stamp(update, upsert=upsert)
            result = await self.collection(collection).update_one(filter, stamped, upsert=upsert)
        except PyMongoError as e:
            raise self._wrap(collection, "update_one", e) from e
        return result.matched_count

    async def update_by_id(self, collection: str, id: Any, update: Document) -> int:  # noqa: A002, ANN401
        return await self.update_one(collection, {"_id": self.object_id(id)}, update)

    async def find_one_and_update(
        self,
        collection: str,
        filter: Document,  # noqa: A002
        update: Document,
        *,
        upsert: bool = False,
    ) -> Document | None:
        """Apply ``update`` and return the document as it is afterwards."""
        try:
            return await self.collection(collection).find_one_and_update(
                filter,
                self._stamp(update, upsert=upsert),
                upsert=upsert,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._wrap(collection, "find_one_and_update", e) from e

    async def delete_one(self, collection: str, filter: Document) -> int:  # noqa: A002
        try:
            result = await self.collection(collection).delete_one(filter)
        except PyMongoError as e:
            raise self._wrap(collection, "delete_one", e) from e
        return result.deleted_count

    async def delete_by_id(self, collection: str, id: Any) -> int:  # noqa: A002, ANN401
        return await self.delete_one(collection, {"_id": self.object_id(id)})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _stamp(update: Document, *, upsert: bool = False) -> Document:
        now = utcnow()
        stamped = {**update, "$set": {**update.get("$set", {}), "updatedAt": now}}
        if upsert:
            stamped["$setOnInsert"] = {**update.get("$setOnInsert", {}), "createdAt": now}
        return stamped

    @staticmethod
    def _wrap(collection: str, operation: str, error: PyMongoError) -> StoreError:
        logger.error("store_operation_failed", collection=collection, operation=operation, error=str(error))
        return StoreError(f"{operation} on {collection} failed: {error}")
