"""Shared test fixtures.

The store runs on mongomock-motor, an in-memory stand-in for a Motor
client, so ``DocumentStore`` is exercised unchanged.
"""

from __future__ import annotations

import hashlib
import uuid
from collections.abc import AsyncGenerator
from typing import Any

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from cityhunt.database import DocumentStore
from cityhunt.main import create_app


def digest(password: str) -> str:
    """SHA-256 hex digest, the form clients send passwords in."""
    return hashlib.sha256(password.encode()).hexdigest()


@pytest_asyncio.fixture
async def store() -> AsyncGenerator[DocumentStore, None]:
    """A fresh, empty document store per test, on its own database name."""
    client = AsyncMongoMockClient(tz_aware=True)
    yield DocumentStore(client, f"cityhunt_test_{uuid.uuid4().hex[:8]}")


@pytest_asyncio.fixture
async def client(store: DocumentStore) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to an app that uses the test store."""
    app = create_app(store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def create_user(client: AsyncClient, **fields: Any) -> dict[str, Any]:
    """Create a user through the API and return the response data."""
    body = {"name": "Alice Walker", "email": "alice@example.com", "username": "alice", **fields}
    response = await client.post("/api/users", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest_asyncio.fixture
async def user(client: AsyncClient) -> dict[str, Any]:
    return await create_user(client)
