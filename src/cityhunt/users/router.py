"""User management router: all /api/users/* endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Response

from cityhunt.config import get_settings
from cityhunt.dependencies import PageParams, get_scoring_workflow, get_user_repository
from cityhunt.errors import NotFoundError
from cityhunt.schemas import ok, ok_page
from cityhunt.scoring import ScoringWorkflow
from cityhunt.users.repository import UserRepository
from cityhunt.users.schemas import ScoreRequest, UserCreateRequest, UserProgressUpdateRequest, UserUpdateRequest

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("")
async def list_users(
    paging: PageParams = Depends(),  # noqa: B008
    status: str | None = None,
    users: UserRepository = Depends(get_user_repository),  # noqa: B008
) -> dict[str, Any]:
    """List users, newest first, optionally filtered by status."""
    query = {"status": status} if status else {}
    return ok_page(await users.find_all(query, page=paging.page, limit=paging.limit))


@router.get("/search")
async def search_users(
    q: str = Query(..., min_length=1),
    paging: PageParams = Depends(),  # noqa: B008
    users: UserRepository = Depends(get_user_repository),  # noqa: B008
) -> dict[str, Any]:
    """Case-insensitive search over name, email and username."""
    return ok_page(await users.search(q, page=paging.page, limit=paging.limit))


@router.get("/stats")
async def user_stats(users: UserRepository = Depends(get_user_repository)) -> dict[str, Any]:  # noqa: B008
    return ok(await users.get_stats())


@router.get("/ranking")
async def user_ranking(
    limit: int | None = Query(None, ge=1),
    users: UserRepository = Depends(get_user_repository),  # noqa: B008
) -> dict[str, Any]:
    """Public leaderboard by completed checkpoints, capped at the maximum page size."""
    settings = get_settings()
    result = await users.get_ranking(min(limit or settings.ranking_limit, settings.max_page_size))
    return ok(result["ranking"], totalUsers=result["totalUsers"])


@router.get("/{user_id}")
async def get_user(user_id: str, users: UserRepository = Depends(get_user_repository)) -> dict[str, Any]:  # noqa: B008
    user = await users.find_by_id(user_id)
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return ok(user)


@router.post("", status_code=201)
async def create_user(
    body: UserCreateRequest,
    users: UserRepository = Depends(get_user_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await users.create(body.payload()))


@router.put("/username/{username}")
async def update_user_by_username(
    username: str,
    body: UserProgressUpdateRequest,
    users: UserRepository = Depends(get_user_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await users.update_by_username(username, body.payload()))


@router.post("/username/{username}/score")
async def score_user(
    username: str,
    body: ScoreRequest,
    scoring: ScoringWorkflow = Depends(get_scoring_workflow),  # noqa: B008
) -> dict[str, Any]:
    """Record a reached checkpoint for the user."""
    return ok(await scoring.record(username, body.is_major_checkpoint))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    body: UserUpdateRequest,
    users: UserRepository = Depends(get_user_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await users.update_by_id(user_id, body.payload()))


@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: str, users: UserRepository = Depends(get_user_repository)) -> Response:  # noqa: B008
    await users.delete_by_id(user_id)
    return Response(status_code=204)
