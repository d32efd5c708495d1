"""Request schemas for pattern endpoints."""

from __future__ import annotations

from pydantic import StrictInt, StrictStr

from cityhunt.schemas import RequestBody


class PatternRequest(RequestBody):
    sequence: StrictStr | StrictInt | None = None
