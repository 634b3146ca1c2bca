"""
Sample Python client for the Admin Key Service.

Demonstrates common workflows:
- Creating users with an admin key
- Tracking the key's remaining quota
- Paging through the audit trail (admin network only)
- Error handling and retry logic

Requirements:
    pip install httpx python-dotenv
"""

import asyncio
import os
import sys
from typing import Any, AsyncIterator, Dict, Optional

import httpx
from dotenv import load_dotenv


class QuotaExhausted(Exception):
    """The admin key has no quota left; retrying will not help."""


class AdminKeyClient:
    """
    Async client for the Admin Key Service.

    Handles authentication, retries on server errors and audit paging.
    """

    def __init__(
        self,
        admin_key: str,
        base_url: str = "http://localhost:8000",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        backoff_seconds: float = 1.0,
    ) -> None:
        """
        Initialize the API client.

        Args:
            admin_key: Admin key used for protected endpoints
            base_url: Base URL of the service
            transport: Optional httpx transport (tests pass an ASGI transport)
            backoff_seconds: Base delay for exponential backoff on 5xx
        """
        self.admin_key = admin_key
        self.backoff_seconds = backoff_seconds
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Content-Type": "application/json"},
            transport=transport,
            timeout=30.0,
        )
        self.remaining: Optional[int] = None

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "AdminKeyClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        max_retries: int = 3,
    ) -> Dict[str, Any]:
        """
        Create a user, retrying server errors with exponential backoff.

        Args:
            first_name: First name
            last_name: Last name
            email: Email address
            password: Initial password
            max_retries: Maximum attempts for 5xx errors

        Returns:
            API response with the user and admin_key_info

        Raises:
            QuotaExhausted: If the key has no remaining quota
            httpx.HTTPStatusError: If the request fails for another reason
        """
        body = {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password": password,
        }

        for attempt in range(max_retries):
            try:
                response = await self.client.post(
                    "/api/external/users",
                    json=body,
                    headers={"x-admin-key": self.admin_key},
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429:
                    self.remaining = 0
                    raise QuotaExhausted(e.response.json().get("error")) from e

                if e.response.status_code >= 500 and attempt < max_retries - 1:
                    wait_time = self.backoff_seconds * 2**attempt
                    print(
                        f"Server error. Retry {attempt + 1}/"
                        f"{max_retries} in {wait_time}s...",
                        file=sys.stderr,
                    )
                    await asyncio.sleep(wait_time)
                    continue

                print(
                    f"Error creating user: {e.response.status_code}",
                    file=sys.stderr,
                )
                print(f"Response: {e.response.text}", file=sys.stderr)
                raise

            data = response.json()
            info = data.get("admin_key_info")
            if info:
                self.remaining = info["remaining"]
            return data

        raise httpx.HTTPError("Max retries exceeded")

    async def audit_trail(
        self, key_id: Optional[str] = None, page_size: int = 50
    ) -> AsyncIterator[Dict[str, Any]]:
        """
        Yield audit records newest first, following cursors.

        Args:
            key_id: Only records of this key
            page_size: Records per request (1-500)

        Yields:
            Audit record dicts
        """
        params: Dict[str, Any] = {"limit": page_size}
        if key_id:
            params["key_id"] = key_id

        while True:
            response = await self.client.get("/api/admin/logs", params=params)
            response.raise_for_status()
            page = response.json()
            for record in page["logs"]:
                yield record
            if not page["has_more"]:
                return
            params["cursor"] = page["next_cursor"]


async def example_create_users(client: AdminKeyClient) -> None:
    """Example: Create users until the key runs out."""
    print("\n=== Example 1: Create Users ===")

    for n in range(3):
        try:
            data = await client.create_user(
                first_name="Alice",
                last_name="Example",
                email=f"alice+{n}@example.com",
                password="correct horse battery staple",
            )
        except QuotaExhausted as e:
            print(f"Quota exhausted: {e}")
            return
        print(f"Created {data['user']['email']} (remaining: {client.remaining})")


async def example_audit_trail(client: AdminKeyClient) -> None:
    """Example: Page through the audit trail."""
    print("\n=== Example 2: Audit Trail ===")

    count = 0
    async for record in client.audit_trail(page_size=10):
        outcome = "ok" if record["success"] else record["error_message"]
        print(f"  {record['created_at']} {record['key_id']} {outcome}")
        count += 1
    print(f"Total audit records: {count}")


async def main() -> None:
    """Run the example workflow against a local service."""
    load_dotenv()
    admin_key = os.getenv("ADMIN_KEY")

    if not admin_key:
        print("Error: ADMIN_KEY not set in environment", file=sys.stderr)
        print("Set it in .env file or export ADMIN_KEY=your_key")
        sys.exit(1)

    base_url = os.getenv("ADMIN_KEY_SERVICE_URL", "http://localhost:8000")
    async with AdminKeyClient(admin_key=admin_key, base_url=base_url) as client:
        await example_create_users(client)
        await example_audit_trail(client)

    print("\n=== All examples completed ===")


if __name__ == "__main__":
    asyncio.run(main())
