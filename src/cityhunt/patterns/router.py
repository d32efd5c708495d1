"""Pattern router: binary sequence lookup."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from cityhunt.dependencies import get_pattern_repository
from cityhunt.patterns.repository import PatternRepository
from cityhunt.patterns.schemas import PatternRequest
from cityhunt.schemas import ok

router = APIRouter(prefix="/api/patterns", tags=["Patterns"])


@router.post("/validate")
async def validate_pattern(
    body: PatternRequest,
    patterns: PatternRepository = Depends(get_pattern_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await patterns.validate_pattern(body.sequence))


@router.get("/validate")
async def validate_pattern_query(
    sequence: str = "",
    patterns: PatternRepository = Depends(get_pattern_repository),  # noqa: B008
) -> dict[str, Any]:
    """Same lookup as the POST form, for clients that can only GET."""
    return ok(await patterns.validate_pattern(sequence))
