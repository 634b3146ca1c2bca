"""End-to-end admin key flows over emulated DynamoDB."""

import pytest
from fastapi import status
from httpx import AsyncClient

# Mark all tests in this module as integration tests
pytestmark = pytest.mark.integration


def user(n: int) -> dict[str, str]:
    return {
        "first_name": "Int",
        "last_name": "Test",
        "email": f"integration{n}@example.com",
        "password": "password123",
    }


async def issue_key(api_client: AsyncClient, limit: int) -> dict:
    response = await api_client.post(
        "/api/admin/keys", json={"limit": limit, "description": "integration"}
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["admin_key"]


@pytest.mark.asyncio
async def test_quota_lifecycle(api_client: AsyncClient) -> None:
    """Issue a key, spend it, get refused, and find every attempt audited."""
    key = await issue_key(api_client, limit=2)
    headers = {"x-admin-key": key["secret"]}

    for n in range(2):
        response = await api_client.post("/api/external/users", json=user(n), headers=headers)
        assert response.status_code == status.HTTP_201_CREATED

    response = await api_client.post("/api/external/users", json=user(2), headers=headers)
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS

    stored = (await api_client.get(f"/api/admin/keys/{key['key_id']}")).json()["admin_key"]
    assert stored["used_count"] == 2

    by_key = (await api_client.get("/api/admin/logs", params={"key_id": key["key_id"]})).json()
    assert by_key["count"] == 3
    created = [r["created_at"] for r in by_key["logs"]]
    assert created == sorted(created, reverse=True)

    by_secret = (await api_client.get("/api/admin/logs", params={"secret": key["secret"]})).json()
    assert {r["log_id"] for r in by_secret["logs"]} == {r["log_id"] for r in by_key["logs"]}

    failures = (
        await api_client.get(
            "/api/admin/logs", params={"key_id": key["key_id"], "success": "false"}
        )
    ).json()
    assert [r["error_message"] for r in failures["logs"]] == ["limit reached"]


@pytest.mark.asyncio
async def test_duplicate_email_across_keys(api_client: AsyncClient) -> None:
    first = await issue_key(api_client, limit=5)
    second = await issue_key(api_client, limit=5)

    await api_client.post("/api/external/users", json=user(0), headers={"x-admin-key": first["secret"]})
    response = await api_client.post(
        "/api/external/users", json=user(0), headers={"x-admin-key": second["secret"]}
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    stored = (await api_client.get(f"/api/admin/keys/{second['key_id']}")).json()["admin_key"]
    assert stored["used_count"] == 0


@pytest.mark.asyncio
async def test_suspend_and_delete(api_client: AsyncClient) -> None:
    key = await issue_key(api_client, limit=5)
    headers = {"x-admin-key": key["secret"]}

    await api_client.put(f"/api/admin/keys/{key['key_id']}", json={"status": "suspended"})
    response = await api_client.post("/api/external/users", json=user(0), headers=headers)
    assert response.json()["error_code"] == "KEY_INACTIVE"

    await api_client.put(f"/api/admin/keys/{key['key_id']}", json={"status": "active"})
    response = await api_client.post("/api/external/users", json=user(0), headers=headers)
    assert response.status_code == status.HTTP_201_CREATED

    await api_client.delete(f"/api/admin/keys/{key['key_id']}")
    response = await api_client.post("/api/external/users", json=user(1), headers=headers)
    assert response.json()["error_code"] == "INVALID_CREDENTIAL"

    listing = (await api_client.get("/api/admin/keys")).json()
    assert key["key_id"] not in {k["key_id"] for k in listing["admin_keys"]}


@pytest.mark.asyncio
async def test_legacy_key(api_client: AsyncClient, legacy_key: str) -> None:
    response = await api_client.get(
        "/api/external/users", params={**user(0), "admin_key": legacy_key}
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["admin_key_info"] is None

    logs = (await api_client.get("/api/admin/logs", params={"key_id": "legacy_key"})).json()
    assert logs["count"] == 1
