"""Binary pattern lookups."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import AsyncClient

from cityhunt.database import DocumentStore
from cityhunt.patterns.repository import PATTERNS


@pytest_asyncio.fixture
async def seeded(store: DocumentStore) -> DocumentStore:
    await store.insert_one(PATTERNS, {"sequence": "101", "message": ["Head to", "the tower"]})
    return store


@pytest.mark.asyncio
async def test_noisy_input_matches(client: AsyncClient, seeded: DocumentStore) -> None:
    response = await client.post("/api/patterns/validate", json={"sequence": "1a0b1"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["matched"] is True
    assert data["cleaned"] == "101"
    assert data["sequence"] == "101"
    assert data["message"] == ["Head to", "the tower"]
    assert "success" not in data


@pytest.mark.asyncio
async def test_get_form(client: AsyncClient, seeded: DocumentStore) -> None:
    response = await client.get("/api/patterns/validate", params={"sequence": "1 0 1"})
    assert response.json()["data"]["matched"] is True


@pytest.mark.asyncio
async def test_no_match(client: AsyncClient, seeded: DocumentStore) -> None:
    response = await client.post("/api/patterns/validate", json={"sequence": "111"})
    body = response.json()
    assert body == {"success": True, "data": {"cleaned": "111", "matched": False, "message": []}}


@pytest.mark.asyncio
async def test_empty_after_cleaning(client: AsyncClient) -> None:
    response = await client.post("/api/patterns/validate", json={"sequence": "xyz"})
    data = response.json()["data"]
    assert data["cleaned"] == ""
    assert data["matched"] is False


@pytest.mark.asyncio
async def test_integer_sequence(client: AsyncClient, seeded: DocumentStore) -> None:
    response = await client.post("/api/patterns/validate", json={"sequence": 1011})
    assert response.json()["data"]["cleaned"] == "1011"


@pytest.mark.asyncio
async def test_rejects_array_sequence(client: AsyncClient) -> None:
    response = await client.post("/api/patterns/validate", json={"sequence": ["1", "0"]})
    assert response.status_code == 400
    assert response.json()["detail"] == "Validation error"
