"""Scoring users for reached checkpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from cityhunt.database import DocumentStore
from cityhunt.errors import NotFoundError
from cityhunt.scoring import ScoringWorkflow


@pytest.mark.asyncio
async def test_major_checkpoint_increments(client: AsyncClient, user: dict) -> None:
    response = await client.post("/api/users/username/alice/score", json={"isMajorCheckpoint": True})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["checkpointsCompleted"] == 1
    assert data["lastCheckpoint"] == data["lastHelp"]
    assert "lastMinorCheckpoint" not in data

    response = await client.post("/api/users/username/ALICE/score", json={"isMajorCheckpoint": True})
    assert response.json()["data"]["checkpointsCompleted"] == 2


@pytest.mark.asyncio
async def test_minor_checkpoint_only_stamps(client: AsyncClient, user: dict) -> None:
    response = await client.post("/api/users/username/alice/score", json={"isMajorCheckpoint": False})
    data = response.json()["data"]
    assert data["checkpointsCompleted"] == 0
    assert "lastMinorCheckpoint" in data
    assert "lastCheckpoint" not in data


@pytest.mark.asyncio
async def test_unknown_user(store: DocumentStore) -> None:
    with pytest.raises(NotFoundError):
        await ScoringWorkflow(store).record("ghost", is_major=True)


@pytest.mark.asyncio
async def test_complete_checkpoint_uses_its_flag(client: AsyncClient, user: dict) -> None:
    response = await client.post(
        "/api/checkpoints",
        json={"internalId": "CP-01", "location": "Piazza", "isMajorCheckpoint": True},
    )
    checkpoint_id = response.json()["data"]["_id"]

    response = await client.post(f"/api/checkpoints/{checkpoint_id}/complete", json={"username": "alice"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["checkpointsCompleted"] == 1
    assert data["checkpoint"]["internalId"] == "CP-01"


@pytest.mark.asyncio
async def test_complete_missing_checkpoint(client: AsyncClient, user: dict) -> None:
    response = await client.post("/api/checkpoints/65a1b2c3d4e5f60718293a4b/complete", json={"username": "alice"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Checkpoint not found"
