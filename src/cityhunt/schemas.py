"""Request body base class and response envelopes shared by all routers."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from cityhunt.database import serialize


class RequestBody(BaseModel):
    """Body with camelCase wire names; unknown fields are dropped.

    Field types stay permissive where the entity validators own the rules,
    so clients get the validators' messages rather than pydantic's.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def payload(self) -> dict[str, Any]:
        """Only the fields the client actually sent, under their wire names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


def ok(data: Any, **extra: Any) -> dict[str, Any]:  # noqa: ANN401
    return {"success": True, "data": serialize(data), **serialize(extra)}


def ok_page(result: dict[str, Any]) -> dict[str, Any]:
    """Envelope for a repository page: ``items`` become ``data``."""
    body = {k: v for k, v in result.items() if k != "items"}
    return {"success": True, "data": serialize(result["items"]), **serialize(body)}
