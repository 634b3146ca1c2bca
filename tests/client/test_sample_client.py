"""Tests for the sample partner client."""

import httpx
import pytest
from httpx import ASGITransport

from examples.sample_client import AdminKeyClient, QuotaExhausted


async def issue_key(client, limit: int) -> dict:
    return (await client.post("/api/admin/keys", json={"limit": limit})).json()["admin_key"]


@pytest.mark.asyncio
async def test_create_users_until_quota_exhausted(app, client) -> None:
    key = await issue_key(client, limit=2)

    async with AdminKeyClient(
        key["secret"], base_url="http://test", transport=ASGITransport(app=app)
    ) as partner:
        await partner.create_user("Ann", "Lee", "ann@example.com", "pw-1")
        assert partner.remaining == 1
        await partner.create_user("Bob", "Moss", "bob@example.com", "pw-2")
        assert partner.remaining == 0

        with pytest.raises(QuotaExhausted, match="limit reached"):
            await partner.create_user("Cleo", "Park", "cleo@example.com", "pw-3")


@pytest.mark.asyncio
async def test_client_error_is_not_retried(app, client) -> None:
    key = await issue_key(client, limit=5)

    async with AdminKeyClient(
        key["secret"], base_url="http://test", transport=ASGITransport(app=app)
    ) as partner:
        await partner.create_user("Ann", "Lee", "ann@example.com", "pw")

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await partner.create_user("Ann", "Lee", "ann@example.com", "pw")

    assert exc_info.value.response.status_code == 409


@pytest.mark.asyncio
async def test_audit_trail_follows_cursors(app, client) -> None:
    key = await issue_key(client, limit=10)

    async with AdminKeyClient(
        key["secret"], base_url="http://test", transport=ASGITransport(app=app)
    ) as partner:
        for n in range(5):
            await partner.create_user("Ann", "Lee", f"ann{n}@example.com", "pw")

        records = [r async for r in partner.audit_trail(key_id=key["key_id"], page_size=2)]

    assert len(records) == 5
    assert len({r["log_id"] for r in records}) == 5


@pytest.mark.asyncio
async def test_server_errors_are_retried() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503, json={"success": False})
        return httpx.Response(201, json={"success": True, "admin_key_info": None})

    async with AdminKeyClient(
        "admin_key_x",
        base_url="http://test",
        transport=httpx.MockTransport(handler),
        backoff_seconds=0,
    ) as partner:
        data = await partner.create_user("Ann", "Lee", "ann@example.com", "pw")

    assert data["success"] is True
    assert len(calls) == 3
    assert calls[0].headers["x-admin-key"] == "admin_key_x"
