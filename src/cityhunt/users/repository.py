"""User persistence: registration-independent CRUD, search, stats and ranking."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog

from cityhunt.database import contains
from cityhunt.errors import ConflictError, NotFoundError, ValidationFailedError
from cityhunt.pagination import paged
from cityhunt.validation import validate_user

if TYPE_CHECKING:
    from cityhunt.database import Document, DocumentStore, SortSpec

logger = structlog.get_logger()

USERS = "users"

_TIMESTAMP_FIELDS = {
    "lastMajorCheckpoint": "lastCheckpoint",
    "lastCheckpoint": "lastCheckpoint",
    "lastMinorCheckpoint": "lastMinorCheckpoint",
    "lastHelp": "lastHelp",
}


def normalize_username(username: str) -> str:
    return username.strip().lower()


def public_user(user: Document | None) -> Document | None:
    """Strip the password digest before a user leaves the service."""
    if user is None:
        return None
    return {k: v for k, v in user.items() if k != "password"}


def _clean_email(email: Any) -> str | None:  # noqa: ANN401
    return email.strip() if isinstance(email, str) and email.strip() else None


def _as_datetime(value: Any) -> datetime:  # noqa: ANN401
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as e:
        msg = f"Invalid timestamp: {value}"
        raise ValidationFailedError([msg]) from e


class UserRepository:
    """Validate-then-persist operations on the ``users`` collection."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def find_by_id(self, user_id: str) -> Document | None:
        return public_user(await self.store.find_by_id(USERS, self.store.object_id(user_id, "user ID")))

    async def find_by_email(self, email: str) -> Document | None:
        return await self.store.find_one(USERS, {"email": email.strip()})

    async def find_by_username(self, username: str) -> Document | None:
        return await self.store.find_one(USERS, {"username": normalize_username(username)})

    async def find_all(
        self,
        filter: Document | None = None,  # noqa: A002
        *,
        page: int = 1,
        limit: int = 10,
        sort: SortSpec | None = None,
    ) -> dict[str, Any]:
        """Page through users, newest first unless ``sort`` says otherwise."""
        items, total = await self.store.find_page(
            USERS,
            filter or {},
            page=page,
            limit=limit,
            sort=sort or [("createdAt", -1)],
        )
        return paged([public_user(u) for u in items], page, limit, total)

    async def create(self, data: Document) -> Document:
        """Create a user.

        Raises:
            ValidationFailedError: If name/email are invalid.
            ConflictError: If the email or username is already taken.
        """
        validation = validate_user(data)
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors)

        email = _clean_email(data.get("email"))
        if email and await self.find_by_email(email):
            msg = "User with this email already exists"
            raise ConflictError(msg)

        document: Document = {
            "name": data["name"].strip(),
            "email": email,
            "status": data.get("status") or "active",
            "checkpointsCompleted": 0,
        }
        if data.get("username"):
            username = normalize_username(data["username"])
            if await self.find_by_username(username):
                msg = "User with this username already exists"
                raise ConflictError(msg)
            document["username"] = username
        for key in ("colour", "isAdminUseOnly", "password"):
            if data.get(key) is not None:
                document[key] = data[key]

        user_id = await self.store.insert_one(USERS, document)
        logger.info("user_created", user_id=str(user_id))
        return await self.find_by_id(str(user_id))

    async def _check_update(self, data: Document, owner_matches: Any) -> Document:  # noqa: ANN401
        """Validate the fields present in ``data`` and build the ``$set`` document."""
        if not data:
            raise ValidationFailedError(["No update data provided"])

        validation = validate_user(data, partial=True)
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors)

        email = _clean_email(data.get("email"))
        if email:
            existing = await self.find_by_email(email)
            if existing is not None and not owner_matches(existing):
                msg = "User with this email already exists"
                raise ConflictError(msg)

        changes: Document = {}
        if "name" in data:
            changes["name"] = data["name"].strip()
        if "email" in data:
            changes["email"] = email
        for key in ("status", "colour"):
            if data.get(key) is not None:
                changes[key] = data[key]
        return changes

    async def update_by_id(self, user_id: str, data: Document) -> Document:
        oid = self.store.object_id(user_id, "user ID")
        changes = await self._check_update(data, lambda existing: existing["_id"] == oid)

        updated = await self.store.find_one_and_update(USERS, {"_id": oid}, {"$set": changes})
        if updated is None:
            msg = "User not found"
            raise NotFoundError(msg)
        logger.info("user_updated", user_id=user_id, fields=sorted(changes))
        return public_user(updated)

    async def update_by_username(self, username: str, data: Document) -> Document:
        """Update a user addressed by username; also accepts progress timestamps."""
        normalized = normalize_username(username)
        changes = await self._check_update(data, lambda existing: existing.get("username") == normalized)
        for source, target in _TIMESTAMP_FIELDS.items():
            if data.get(source):
                changes[target] = _as_datetime(data[source])

        updated = await self.store.find_one_and_update(USERS, {"username": normalized}, {"$set": changes})
        if updated is None:
            msg = "User not found"
            raise NotFoundError(msg)
        logger.info("user_updated", username=normalized, fields=sorted(changes))
        return public_user(updated)

    async def delete_by_id(self, user_id: str) -> None:
        deleted = await self.store.delete_by_id(USERS, self.store.object_id(user_id, "user ID"))
        if deleted == 0:
            msg = "User not found"
            raise NotFoundError(msg)
        logger.info("user_deleted", user_id=user_id)

    async def search(self, term: str, *, page: int = 1, limit: int = 10) -> dict[str, Any]:
        """Case-insensitive substring match over name, email and username."""
        pattern = contains(term)
        query = {"$or": [{"name": pattern}, {"email": pattern}, {"username": pattern}]}
        result = await self.find_all(query, page=page, limit=limit)
        result["searchTerm"] = term
        return result

    async def get_stats(self) -> dict[str, Any]:
        total = await self.store.count(USERS)
        active = await self.store.count(USERS, {"status": "active"})
        recent = await self.store.find(USERS, sort=[("createdAt", -1)], limit=5)
        return {
            "totalUsers": total,
            "activeUsers": active,
            "inactiveUsers": total - active,
            "recentUsers": [public_user(u) for u in recent],
        }

    async def get_ranking(self, limit: int = 20) -> dict[str, Any]:
        """Top users by completed checkpoints; earlier ``lastCheckpoint`` wins ties.

        Users flagged ``isAdminUseOnly`` never appear.
        """
        pipeline: list[Document] = [
            {"$match": {"isAdminUseOnly": {"$ne": True}}},
            {"$sort": {"checkpointsCompleted": -1, "lastCheckpoint": 1}},
            {"$limit": limit},
            {"$project": {"name": 1, "checkpointsCompleted": 1, "colour": 1}},
        ]
        ranking = await self.store.aggregate(USERS, pipeline)
        return {"ranking": ranking, "totalUsers": len(ranking)}
