"""Checkpoint CRUD, results and dashboard aggregates."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

MISSING_ID = "65a1b2c3d4e5f60718293a4b"


async def _checkpoint(client: AsyncClient, internal_id: str, *, major: bool = False, **fields) -> dict:
    body = {"internalId": internal_id, "location": "Piazza Maggiore", "isMajorCheckpoint": major, **fields}
    response = await client.post("/api/checkpoints", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_create_checkpoint(client: AsyncClient) -> None:
    data = await _checkpoint(client, " CP-01 ", description="  Fountain  ")
    assert data["internalId"] == "CP-01"
    assert data["description"] == "Fountain"
    assert data["isMajorCheckpoint"] is False
    assert data["result"] is None


@pytest.mark.asyncio
async def test_duplicate_internal_id(client: AsyncClient) -> None:
    await _checkpoint(client, "CP-01")
    response = await client.post(
        "/api/checkpoints",
        json={"internalId": "CP-01", "location": "Elsewhere", "isMajorCheckpoint": True},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Checkpoint with this internalId already exists"


@pytest.mark.asyncio
async def test_create_requires_boolean_flag(client: AsyncClient) -> None:
    """A string flag is refused at the body schema, before anything is stored."""
    response = await client.post(
        "/api/checkpoints",
        json={"internalId": "CP-01", "location": "Piazza", "isMajorCheckpoint": "true"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Validation error"
    assert (await client.get("/api/checkpoints")).json()["data"] == []


@pytest.mark.asyncio
async def test_create_rejects_non_object_result(client: AsyncClient) -> None:
    response = await client.post(
        "/api/checkpoints",
        json={"internalId": "CP-01", "location": "Piazza", "isMajorCheckpoint": True, "result": ["a"]},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Validation error"


@pytest.mark.asyncio
async def test_update_rename_clash(client: AsyncClient) -> None:
    await _checkpoint(client, "CP-01")
    second = await _checkpoint(client, "CP-02")
    response = await client.put(f"/api/checkpoints/{second['_id']}", json={"internalId": "CP-01"})
    assert response.status_code == 400

    response = await client.put(f"/api/checkpoints/{second['_id']}", json={"internalId": "CP-02", "location": "Porta"})
    assert response.status_code == 200
    assert response.json()["data"]["location"] == "Porta"


@pytest.mark.asyncio
async def test_update_result_replaces_and_clears(client: AsyncClient) -> None:
    checkpoint = await _checkpoint(client, "CP-01", result={"message": "Old", "data": {"hint": 1}})

    response = await client.put(
        f"/api/checkpoints/{checkpoint['_id']}/result",
        json={"result": {"message": "Look up", "data": None}},
    )
    assert response.status_code == 200
    assert response.json()["data"]["result"] == {"message": "Look up", "data": None}

    response = await client.put(f"/api/checkpoints/{checkpoint['_id']}/result", json={"result": None})
    assert response.json()["data"]["result"] is None


@pytest.mark.asyncio
async def test_update_result_invalid(client: AsyncClient) -> None:
    checkpoint = await _checkpoint(client, "CP-01")
    response = await client.put(f"/api/checkpoints/{checkpoint['_id']}/result", json={"result": {"data": 1}})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_result_missing_checkpoint(client: AsyncClient) -> None:
    response = await client.put(f"/api/checkpoints/{MISSING_ID}/result", json={"result": None})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_major_first(client: AsyncClient) -> None:
    await _checkpoint(client, "CP-01")
    await _checkpoint(client, "CP-02", major=True)
    response = await client.get("/api/checkpoints")
    assert [c["internalId"] for c in response.json()["data"]] == ["CP-02", "CP-01"]

    response = await client.get("/api/checkpoints", params={"isMajorCheckpoint": "false"})
    assert [c["internalId"] for c in response.json()["data"]] == ["CP-01"]


@pytest.mark.asyncio
async def test_search(client: AsyncClient) -> None:
    await _checkpoint(client, "NORTH-1", location="Via Nord")
    await _checkpoint(client, "SOUTH-1", location="Via Sud")
    response = await client.get("/api/checkpoints/search/internal/north")
    assert [c["internalId"] for c in response.json()["data"]] == ["NORTH-1"]
    response = await client.get("/api/checkpoints/search/location/SUD")
    assert [c["internalId"] for c in response.json()["data"]] == ["SOUTH-1"]


@pytest.mark.asyncio
async def test_stats_and_dashboard(client: AsyncClient) -> None:
    await _checkpoint(client, "CP-01", major=True, result={"message": "Done", "data": None})
    await _checkpoint(client, "CP-02")
    await _checkpoint(client, "CP-03")

    stats = (await client.get("/api/checkpoints/stats")).json()["data"]
    assert stats["totalCheckpoints"] == 3
    assert stats["majorCheckpoints"] == 1
    assert stats["minorCheckpoints"] == 2
    assert stats["checkpointsWithResults"] == 1

    dashboard = (await client.get("/api/checkpoints/dashboard")).json()["data"]
    assert dashboard["stats"]["totalCheckpoints"] == 3
    assert [c["internalId"] for c in dashboard["majorCheckpoints"]] == ["CP-01"]
    assert len(dashboard["recentCheckpoints"]) == 3


@pytest.mark.asyncio
async def test_delete_checkpoint(client: AsyncClient) -> None:
    checkpoint = await _checkpoint(client, "CP-01")
    assert (await client.delete(f"/api/checkpoints/{checkpoint['_id']}")).status_code == 204
    assert (await client.get(f"/api/checkpoints/{checkpoint['_id']}")).status_code == 404
    assert (await client.delete(f"/api/checkpoints/{checkpoint['_id']}")).status_code == 404
