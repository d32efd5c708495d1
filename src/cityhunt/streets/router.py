"""Street router: destination records and verification attempts."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from cityhunt.dependencies import PageParams, get_street_repository
from cityhunt.errors import NotFoundError
from cityhunt.schemas import ok, ok_page
from cityhunt.streets.repository import StreetRepository
from cityhunt.streets.schemas import StreetCreateRequest, StreetVerifyRequest

router = APIRouter(prefix="/api/streets", tags=["Streets"])


@router.post("/verify")
async def verify_street(
    body: StreetVerifyRequest,
    streets: StreetRepository = Depends(get_street_repository),  # noqa: B008
) -> dict[str, Any]:
    """Check a provaId/location guess and record who made it."""
    return ok(await streets.verify(body.prova_id, body.location, body.username))


@router.post("", status_code=201)
async def create_street(
    body: StreetCreateRequest,
    streets: StreetRepository = Depends(get_street_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok(await streets.create(body.payload()))


@router.get("")
async def list_streets(
    paging: PageParams = Depends(),  # noqa: B008
    streets: StreetRepository = Depends(get_street_repository),  # noqa: B008
) -> dict[str, Any]:
    return ok_page(await streets.find_all(page=paging.page, limit=paging.limit))


@router.get("/verifications")
async def verification_history(
    paging: PageParams = Depends(),  # noqa: B008
    streets: StreetRepository = Depends(get_street_repository),  # noqa: B008
) -> dict[str, Any]:
    """Verification log, most recently touched first."""
    return ok_page(await streets.get_verification_history(page=paging.page, limit=paging.limit))


@router.get("/{street_id}")
async def get_street(
    street_id: str,
    streets: StreetRepository = Depends(get_street_repository),  # noqa: B008
) -> dict[str, Any]:
    street = await streets.find_by_id(street_id)
    if street is None:
        msg = "Street record not found"
        raise NotFoundError(msg)
    return ok(street)
