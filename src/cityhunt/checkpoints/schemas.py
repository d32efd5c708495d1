"""Request schemas for checkpoint endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import Field, StrictBool

from cityhunt.schemas import RequestBody


class CheckpointRequest(RequestBody):
    """Create and update share one body; updates apply only the fields sent."""

    internal_id: str | None = None
    location: str | None = None
    description: str | None = None
    is_major_checkpoint: StrictBool | None = None
    result: dict[str, Any] | None = None


class CheckpointResultRequest(RequestBody):
    result: dict[str, Any] | None = None


class CompleteCheckpointRequest(RequestBody):
    username: str = Field(..., min_length=1)
