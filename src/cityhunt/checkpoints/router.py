"""Checkpoint router: all /api/checkpoints/* endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response

from cityhunt.checkpoints.repository import CheckpointRepository
from cityhunt.checkpoints.schemas import CheckpointRequest, CheckpointResultRequest, CompleteCheckpointRequest
from cityhunt.database import contains
from cityhunt.dependencies import PageParams, get_checkpoint_repository, get_scoring_workflow
from cityhunt.errors import NotFoundError
from cityhunt.schemas import ok, ok_page
from cityhunt.scoring import ScoringWorkflow

router = APIRouter(prefix="/api/checkpoints", tags=["Checkpoints"])


@router.get("")
async def list_checkpoints(
    paging: PageParams = Depends(),  # noqa: B008
    location: str | None = None,
    isMajorCheckpoint: bool | None = None,  # noqa: N803
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> dict[str, Any]:
    """List checkpoints, major first, optionally filtered by location or kind."""
    query: dict[str, Any] = {}
    if location:
        query["location"] = contains(location)
    if isMajorCheckpoint is not None:
        query["isMajorCheckpoint"] = isMajorCheckpoint
    return ok_page(await checkpoints.find_all(query, page=paging.page, limit=paging.limit))


@router.get("/stats")
async def checkpoint_stats(
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await checkpoints.get_stats())


@router.get("/dashboard")
async def checkpoint_dashboard(
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> dict[str, Any]:
    """Stats plus the top major and most recently updated checkpoints."""
    return ok(await checkpoints.get_dashboard_data())


@router.get("/major")
async def major_checkpoints(
    paging: PageParams = Depends(),  # noqa: B008
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok_page(await checkpoints.find_major(page=paging.page, limit=paging.limit))


@router.get("/search/internal/{internal_id}")
async def search_by_internal_id(
    internal_id: str,
    paging: PageParams = Depends(),  # noqa: B008
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok_page(await checkpoints.find_by_internal_id(internal_id, page=paging.page, limit=paging.limit))


@router.get("/search/location/{location}")
async def search_by_location(
    location: str,
    paging: PageParams = Depends(),  # noqa: B008
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok_page(await checkpoints.find_by_location(location, page=paging.page, limit=paging.limit))


@router.get("/{checkpoint_id}")
async def get_checkpoint(
    checkpoint_id: str,
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> dict[str, Any]:
    checkpoint = await checkpoints.find_by_id(checkpoint_id)
    if checkpoint is None:
        msg = "Checkpoint not found"
        raise NotFoundError(msg)
    return ok(checkpoint)


@router.post("", status_code=201)
async def create_checkpoint(
    body: CheckpointRequest,
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await checkpoints.create(body.payload()))


@router.put("/{checkpoint_id}")
async def update_checkpoint(
    checkpoint_id: str,
    body: CheckpointRequest,
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await checkpoints.update_by_id(checkpoint_id, body.payload()))


@router.put("/{checkpoint_id}/result")
async def update_checkpoint_result(
    checkpoint_id: str,
    body: CheckpointResultRequest,
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> dict[str, Any]:
    """Replace the result payload; send ``null`` to clear it."""
    return ok(await checkpoints.update_result(checkpoint_id, body.result))


@router.post("/{checkpoint_id}/complete")
async def complete_checkpoint(
    checkpoint_id: str,
    body: CompleteCheckpointRequest,
    scoring: ScoringWorkflow = Depends(get_scoring_workflow),  # noqa: B008
) -> dict[str, Any]:
    """Score a user for reaching this checkpoint."""
    return ok(await scoring.complete_checkpoint(checkpoint_id, body.username))


@router.delete("/{checkpoint_id}", status_code=204)
async def delete_checkpoint(
    checkpoint_id: str,
    checkpoints: CheckpointRepository = Depends(get_checkpoint_repository),  # noqa: B008
) -> Response:
    await checkpoints.delete_by_id(checkpoint_id)
    return Response(status_code=204)
