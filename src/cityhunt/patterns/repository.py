"""Binary-pattern lookup table (read-only; patterns are loaded externally)."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from cityhunt.database import Document, DocumentStore

logger = structlog.get_logger()

PATTERNS = "patterns"

_NON_BINARY = re.compile(r"[^01]")


def clean_sequence(sequence: Any) -> str:  # noqa: ANN401
    """Drop every character that is not '0' or '1'."""
    return _NON_BINARY.sub("", "" if sequence is None else str(sequence))


class PatternRepository:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def validate_pattern(self, sequence: Any) -> Document:  # noqa: ANN401
        """Look up the messages stored for ``sequence`` after cleaning it."""
        cleaned = clean_sequence(sequence)
        no_match: Document = {"cleaned": cleaned, "matched": False, "message": []}
        if not cleaned:
            return no_match

        found = await self.store.find(PATTERNS, {"sequence": cleaned}, limit=1)
        if not found:
            logger.debug("pattern_not_found", cleaned=cleaned)
            return no_match

        pattern = found[0]
        message = pattern.get("message")
        return {
            "cleaned": cleaned,
            "matched": True,
            "message": message if isinstance(message, list) else [],
            "_id": pattern["_id"],
            "sequence": pattern["sequence"],
        }
