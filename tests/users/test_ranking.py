"""Leaderboard ordering."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from cityhunt.config import get_settings
from cityhunt.database import DocumentStore
from cityhunt.users.repository import USERS, UserRepository


def _at(hour: int) -> datetime:
    return datetime(2024, 5, 1, hour, tzinfo=timezone.utc)


async def _seed(store: DocumentStore) -> None:
    rows = [
        ("Slow", 3, _at(12), False),
        ("Fast", 3, _at(9), False),
        ("Leader", 5, _at(15), False),
        ("Staff", 9, _at(8), True),
        ("Newbie", 0, _at(7), False),
    ]
    for name, completed, last, admin in rows:
        await store.insert_one(
            USERS,
            {
                "name": name,
                "username": name.lower(),
                "colour": "green",
                "checkpointsCompleted": completed,
                "lastCheckpoint": last,
                "isAdminUseOnly": admin,
                "password": "f" * 64,
            },
        )


@pytest.mark.asyncio
async def test_ranking_order(store: DocumentStore) -> None:
    """More checkpoints first; on a tie the earlier finisher wins."""
    await _seed(store)
    result = await UserRepository(store).get_ranking()
    assert [r["name"] for r in result["ranking"]] == ["Leader", "Fast", "Slow", "Newbie"]
    assert result["totalUsers"] == 4


@pytest.mark.asyncio
async def test_ranking_excludes_admins_and_private_fields(store: DocumentStore) -> None:
    await _seed(store)
    result = await UserRepository(store).get_ranking()
    for row in result["ranking"]:
        assert set(row) == {"_id", "name", "checkpointsCompleted", "colour"}
    assert "Staff" not in [r["name"] for r in result["ranking"]]


@pytest.mark.asyncio
async def test_ranking_limit(client: AsyncClient, store: DocumentStore) -> None:
    await _seed(store)
    response = await client.get("/api/users/ranking", params={"limit": 2})
    assert response.status_code == 200
    body = response.json()
    assert [r["name"] for r in body["data"]] == ["Leader", "Fast"]
    assert body["totalUsers"] == 2


@pytest.mark.asyncio
async def test_ranking_limit_capped(client: AsyncClient, store: DocumentStore, monkeypatch: pytest.MonkeyPatch) -> None:
    """A limit above the maximum page size is clamped rather than passed to the store."""
    monkeypatch.setattr(get_settings(), "max_page_size", 3)
    await _seed(store)
    response = await client.get("/api/users/ranking", params={"limit": 1000})
    assert response.status_code == 200
    assert [r["name"] for r in response.json()["data"]] == ["Leader", "Fast", "Slow"]
