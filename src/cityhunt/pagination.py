"""Offset pagination shared by every list endpoint."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict


class Pagination(BaseModel):
    """Pagination block returned next to a page of items."""

    model_config = ConfigDict(populate_by_name=True)

    currentPage: int  # noqa: N815
    totalPages: int  # noqa: N815
    totalItems: int  # noqa: N815
    hasNextPage: bool  # noqa: N815
    hasPrevPage: bool  # noqa: N815


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """Compute the pagination block for ``total`` items split into pages of ``limit``.

    ``totalPages`` is ``ceil(total / limit)`` and ``hasNextPage`` holds
    exactly when ``page * limit < total``.
    """
    if limit < 1:
        msg = "limit must be at least 1"
        raise ValueError(msg)
    return Pagination(
        currentPage=page,
        totalPages=math.ceil(total / limit),
        totalItems=total,
        hasNextPage=page * limit < total,
        hasPrevPage=page > 1,
    )


def paged(items: list[dict[str, Any]], page: int, limit: int, total: int) -> dict[str, Any]:
    """Bundle a page of documents with its pagination block."""
    return {"items": items, "pagination": build_pagination(page, limit, total).model_dump()}
