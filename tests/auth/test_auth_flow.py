"""Registration, login and password management."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from cityhunt.validation import PASSWORD_ERROR
from conftest import digest

PASSWORD = digest("correct horse")


async def _register(client: AsyncClient, **fields) -> dict:
    body = {"name": "Carla Rossi", "email": "Carla@Example.com", "username": "Carla", "password": PASSWORD}
    body.update(fields)
    response = await client.post("/api/auth/register", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_register(client: AsyncClient) -> None:
    """Email and username are normalized and the digest never comes back."""
    data = await _register(client)
    assert data["username"] == "carla"
    assert data["email"] == "carla@example.com"
    assert data["status"] == "active"
    assert "password" not in data


@pytest.mark.asyncio
async def test_register_rejects_plaintext_password(client: AsyncClient) -> None:
    response = await client.post(
        "/api/auth/register",
        json={"name": "Carla Rossi", "username": "carla", "password": "hunter2"},
    )
    assert response.status_code == 400
    assert response.json()["errors"] == [PASSWORD_ERROR]


@pytest.mark.asyncio
async def test_register_duplicate_username(client: AsyncClient) -> None:
    await _register(client)
    response = await client.post(
        "/api/auth/register",
        json={"name": "Other", "username": "CARLA", "password": PASSWORD},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "User with this username already exists"


@pytest.mark.asyncio
async def test_login(client: AsyncClient) -> None:
    await _register(client)
    response = await client.post("/api/auth/login", json={"username": "Carla", "password": PASSWORD.upper()})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["username"] == "carla"
    assert "password" not in data["user"]
    assert data["user"]["lastLogin"] == data["loginTime"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient) -> None:
    await _register(client)
    response = await client.post("/api/auth/login", json={"username": "carla", "password": digest("wrong")})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid username or password"


@pytest.mark.asyncio
async def test_login_unknown_user(client: AsyncClient) -> None:
    """Unknown users get the same message as a bad password."""
    response = await client.post("/api/auth/login", json={"username": "nobody", "password": PASSWORD})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid username or password"


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["abc", "a" * 63, "a" * 65, "z" * 64])
async def test_login_rejects_malformed_digest(client: AsyncClient, password: str) -> None:
    """Login applies the same 64-hex rule as registration, before any lookup."""
    await _register(client)
    response = await client.post("/api/auth/login", json={"username": "carla", "password": password})
    assert response.status_code == 400
    assert response.json()["errors"] == [PASSWORD_ERROR]


@pytest.mark.asyncio
async def test_login_rejects_non_string_credentials(client: AsyncClient) -> None:
    await _register(client)
    response = await client.post("/api/auth/login", json={"username": {"$ne": None}, "password": PASSWORD})
    assert response.status_code == 400
    assert response.json()["detail"] == "Validation error"


@pytest.mark.asyncio
async def test_login_user_without_password(client: AsyncClient) -> None:
    await client.post("/api/users", json={"name": "Dario Neri", "username": "dario"})
    response = await client.post("/api/auth/login", json={"username": "dario", "password": PASSWORD})
    assert response.status_code == 401
    assert response.json()["detail"] == "User account is not properly configured"


@pytest.mark.asyncio
async def test_login_inactive_account(client: AsyncClient) -> None:
    user = await _register(client)
    await client.put(f"/api/users/{user['_id']}", json={"status": "inactive"})
    response = await client.post("/api/auth/login", json={"username": "carla", "password": PASSWORD})
    assert response.status_code == 401
    assert response.json()["detail"] == "Account is not active"


@pytest.mark.asyncio
async def test_change_password(client: AsyncClient) -> None:
    user = await _register(client)
    new_password = digest("battery staple")
    response = await client.post(
        "/api/auth/change-password",
        json={"userId": user["_id"], "currentPassword": PASSWORD, "newPassword": new_password},
    )
    assert response.status_code == 200

    old = await client.post("/api/auth/login", json={"username": "carla", "password": PASSWORD})
    assert old.status_code == 401
    new = await client.post("/api/auth/login", json={"username": "carla", "password": new_password})
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_change_password_wrong_current(client: AsyncClient) -> None:
    user = await _register(client)
    response = await client.post(
        "/api/auth/change-password",
        json={"userId": user["_id"], "currentPassword": digest("guess"), "newPassword": digest("new")},
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Current password is incorrect"


@pytest.mark.asyncio
async def test_reset_password(client: AsyncClient) -> None:
    user = await _register(client)
    new_password = digest("reset")
    response = await client.post("/api/auth/reset-password", json={"userId": user["_id"], "newPassword": new_password})
    assert response.status_code == 200
    login = await client.post("/api/auth/login", json={"username": "carla", "password": new_password})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_login_stats(client: AsyncClient) -> None:
    await _register(client)
    await client.post("/api/users", json={"name": "Dario Neri", "username": "dario"})
    await client.post("/api/auth/login", json={"username": "carla", "password": PASSWORD})

    response = await client.get("/api/auth/stats")
    data = response.json()["data"]
    assert data["totalUsers"] == 2
    assert data["usersWithPassword"] == 1
    assert [u["name"] for u in data["recentLogins"]] == ["Carla Rossi"]
