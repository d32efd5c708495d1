"""Checkpoint scoring: advance a user's progress when they reach a checkpoint.

Major checkpoints increment ``checkpointsCompleted`` and stamp
``lastCheckpoint``/``lastHelp``; minor ones only stamp
``lastMinorCheckpoint``. The increment is a single ``$inc`` update, so
concurrent scoring of one user cannot lose a point.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import structlog

from cityhunt.checkpoints.repository import CheckpointRepository
from cityhunt.database import utcnow
from cityhunt.errors import NotFoundError
from cityhunt.users.repository import USERS, normalize_username, public_user

if TYPE_CHECKING:
    from cityhunt.database import Document, DocumentStore

logger = structlog.get_logger()

# Major-checkpoint timestamps are written one hour ahead of the server clock.
# Clients currently depend on this offset.
MAJOR_TIMESTAMP_OFFSET = timedelta(hours=1)


class ScoringWorkflow:
    """Cross-entity update tying checkpoint progress to the user record."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self.checkpoints = CheckpointRepository(store)

    async def record(self, username: str, is_major: bool) -> Document:  # noqa: FBT001
        """Score one checkpoint for ``username``.

        Raises:
            NotFoundError: If no user has that username.
        """
        normalized = normalize_username(username)
        now = utcnow()
        if is_major:
            stamped = now + MAJOR_TIMESTAMP_OFFSET
            update: Document = {
                "$inc": {"checkpointsCompleted": 1},
                "$set": {"lastCheckpoint": stamped, "lastHelp": stamped},
            }
        else:
            update = {"$set": {"lastMinorCheckpoint": now}}

        updated = await self.store.find_one_and_update(USERS, {"username": normalized}, update)
        if updated is None:
            msg = "User not found"
            raise NotFoundError(msg)

        logger.info(
            "checkpoint_scored",
            username=normalized,
            major=is_major,
            checkpoints_completed=updated.get("checkpointsCompleted"),
        )
        return public_user(updated)

    async def complete_checkpoint(self, checkpoint_id: str, username: str) -> Document:
        """Score ``username`` for reaching the checkpoint, using its major/minor flag."""
        checkpoint = await self.checkpoints.find_by_id(checkpoint_id)
        if checkpoint is None:
            msg = "Checkpoint not found"
            raise NotFoundError(msg)
        user = await self.record(username, bool(checkpoint.get("isMajorCheckpoint")))
        return {"user": user, "checkpoint": checkpoint}
