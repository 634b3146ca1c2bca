"""Tests for the admin key management endpoints."""

import time

import pytest
from fastapi import status
from httpx import AsyncClient

from admin_keys.utils.timestamps import SECONDS_PER_DAY


@pytest.mark.asyncio
async def test_create_key(client: AsyncClient) -> None:
    before = int(time.time())

    response = await client.post(
        "/api/admin/keys",
        json={"limit": 10, "description": "partner", "expires_in_days": 7},
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Admin key created successfully"
    key = data["admin_key"]
    assert key["secret"].startswith("admin_key_")
    assert key["limit"] == 10
    assert key["used_count"] == 0
    assert key["remaining"] == 10
    assert key["status"] == "active"
    assert key["description"] == "partner"
    assert before + 7 * SECONDS_PER_DAY <= key["expires_at"] <= int(time.time()) + 7 * SECONDS_PER_DAY


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"limit": 0},
        {"limit": -5},
        {"limit": "many"},
        {"limit": 5, "expires_in_days": 0},
        {"limit": 5, "description": "x" * 501},
    ],
)
async def test_create_key_rejects_bad_input(client: AsyncClient, body) -> None:
    response = await client.post("/api/admin/keys", json=body)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error_code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_list_keys_newest_first(client: AsyncClient) -> None:
    empty = await client.get("/api/admin/keys")
    assert empty.json() == {"success": True, "admin_keys": [], "total": 0}

    for limit in (1, 2):
        await client.post("/api/admin/keys", json={"limit": limit})

    response = await client.get("/api/admin/keys")

    data = response.json()
    assert data["total"] == 2
    created = [k["created_at"] for k in data["admin_keys"]]
    assert created == sorted(created, reverse=True)


@pytest.mark.asyncio
async def test_get_key(client: AsyncClient) -> None:
    created = (await client.post("/api/admin/keys", json={"limit": 3})).json()["admin_key"]

    response = await client.get(f"/api/admin/keys/{created['key_id']}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["admin_key"] == created


@pytest.mark.asyncio
async def test_get_missing_key(client: AsyncClient) -> None:
    response = await client.get("/api/admin/keys/key-missing")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == "Admin key not found"


@pytest.mark.asyncio
async def test_update_key(client: AsyncClient) -> None:
    created = (await client.post("/api/admin/keys", json={"limit": 3})).json()["admin_key"]

    response = await client.put(
        f"/api/admin/keys/{created['key_id']}",
        json={"limit": 30, "description": "raised", "status": "suspended"},
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["message"] == "Admin key updated successfully"
    assert data["admin_key"]["limit"] == 30
    assert data["admin_key"]["description"] == "raised"
    assert data["admin_key"]["status"] == "suspended"
    assert data["admin_key"]["secret"] == created["secret"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"used_count": 0},
        {"secret": "admin_key_chosen"},
        {"status": "revoked"},
        {"limit": 0},
    ],
)
async def test_update_rejects_bad_input(client: AsyncClient, body) -> None:
    created = (await client.post("/api/admin/keys", json={"limit": 3})).json()["admin_key"]

    response = await client.put(f"/api/admin/keys/{created['key_id']}", json=body)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_update_limit_below_usage_conflicts(client: AsyncClient) -> None:
    created = (await client.post("/api/admin/keys", json={"limit": 5})).json()["admin_key"]
    for n in range(3):
        await client.post(
            "/api/external/users",
            json={
                "first_name": "A",
                "last_name": "B",
                "email": f"user{n}@example.com",
                "password": "password123",
            },
            headers={"x-admin-key": created["secret"]},
        )

    response = await client.put(f"/api/admin/keys/{created['key_id']}", json={"limit": 1})

    assert response.status_code == status.HTTP_409_CONFLICT
    data = response.json()
    assert data["error_code"] == "CONFLICT"
    assert data["details"]["used_count"] == 3
    stored = (await client.get(f"/api/admin/keys/{created['key_id']}")).json()["admin_key"]
    assert stored["limit"] == 5
    assert stored["used_count"] == 3


@pytest.mark.asyncio
async def test_update_missing_key(client: AsyncClient) -> None:
    response = await client.put("/api/admin/keys/key-missing", json={"limit": 5})

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_delete_key(client: AsyncClient) -> None:
    created = (await client.post("/api/admin/keys", json={"limit": 3})).json()["admin_key"]

    response = await client.delete(f"/api/admin/keys/{created['key_id']}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "success": True,
        "message": "Admin key deleted successfully",
    }
    assert (await client.get(f"/api/admin/keys/{created['key_id']}")).status_code == 404

    rejected = await client.post(
        "/api/external/users",
        json={"first_name": "A", "last_name": "B", "email": "a@b.c", "password": "pw"},
        headers={"x-admin-key": created["secret"]},
    )
    assert rejected.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_delete_missing_key(client: AsyncClient) -> None:
    response = await client.delete("/api/admin/keys/key-missing")

    assert response.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_key_info(client: AsyncClient) -> None:
    response = await client.get("/api/admin/key-info")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    assert data["key_format"].startswith("admin_key_")
    assert "header" in data["usage"]
    assert "POST /api/external/users" in data["endpoints"]
