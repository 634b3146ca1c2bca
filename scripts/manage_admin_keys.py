#!/usr/bin/env python3
"""
CLI for admin key management.

Provides commands to generate, list, update and delete admin keys and to
read the audit trail.
"""

import argparse
import asyncio
import sys
from datetime import UTC, datetime
from typing import List, Optional

from admin_keys.config import Settings
from admin_keys.exceptions import AdminKeyAPIError
from admin_keys.repositories import AdminKeyRepository, AuditLogRepository
from admin_keys.services.admin_key_service import KeyLifecycleManager
from admin_keys.services.audit_service import AuditLogger
from admin_keys.store import create_store


def build_services(settings: Settings) -> tuple[KeyLifecycleManager, AuditLogger]:
    """Lifecycle manager and audit logger over the configured store."""
    store = create_store(settings)
    lifecycle = KeyLifecycleManager(AdminKeyRepository(store, settings), settings)
    audit = AuditLogger(AuditLogRepository(store, settings), settings)
    return lifecycle, audit


def _expiry(expires_at: int) -> str:
    return datetime.fromtimestamp(expires_at, UTC).strftime("%Y-%m-%d %H:%M")


async def cmd_generate(
    lifecycle: KeyLifecycleManager,
    limit: int,
    description: str,
    expires_in_days: Optional[int],
) -> None:
    """
    Issue a new admin key and print its secret.

    Args:
        lifecycle: Key lifecycle service
        limit: Maximum authorized actions
        description: Human-readable description for the key
        expires_in_days: Lifetime in days
    """
    admin_key = await lifecycle.create(
        limit=limit,
        description=description,
        expires_in_days=expires_in_days,
        created_by="cli",
    )

    print("✓ Admin key created successfully")
    print(f"\nKey ID: {admin_key.key_id}")
    print(f"Admin Key: {admin_key.secret}")
    print(f"\nDescription: {admin_key.description or 'None'}")
    print(f"Limit: {admin_key.limit} actions")
    print(f"Expires: {_expiry(admin_key.expires_at)} UTC")
    print("Status: active")


async def cmd_list(lifecycle: KeyLifecycleManager) -> None:
    """List all admin keys with their usage."""
    keys = await lifecycle.list()

    if not keys:
        print("No admin keys found.")
        return

    print(
        f"\n{'Key ID':<38} {'Status':<10} {'Used':>6} {'Limit':>6}"
        f" {'Expires':<17} {'Description':<30}"
    )
    print("-" * 112)

    for admin_key in sorted(keys, key=lambda k: k.created_at):
        desc = admin_key.description
        if len(desc) > 27:
            desc = desc[:27] + "..."
        print(
            f"{admin_key.key_id:<38} {admin_key.status:<10}"
            f" {admin_key.used_count:>6} {admin_key.limit:>6}"
            f" {_expiry(admin_key.expires_at):<17} {desc:<30}"
        )

    print(f"\nTotal: {len(keys)} admin keys")


async def cmd_update(
    lifecycle: KeyLifecycleManager,
    key_id: str,
    limit: Optional[int],
    description: Optional[str],
    status: Optional[str],
    expires_in_days: Optional[int],
) -> None:
    """
    Change fields of an admin key.

    Args:
        lifecycle: Key lifecycle service
        key_id: The key ID to update
        limit: New quota limit
        description: New description
        status: New status
        expires_in_days: New lifetime in days, counted from now
    """
    admin_key = await lifecycle.update(
        key_id,
        limit=limit,
        description=description,
        status=status,
        expires_in_days=expires_in_days,
    )
    print(f"✓ Admin key {key_id} updated")
    print(
        f"  status={admin_key.status} used={admin_key.used_count}"
        f" limit={admin_key.limit} expires={_expiry(admin_key.expires_at)}"
    )


async def cmd_delete(lifecycle: KeyLifecycleManager, key_id: str) -> None:
    """Delete an admin key."""
    await lifecycle.delete(key_id)
    print(f"✓ Admin key {key_id} has been deleted")


async def cmd_logs(
    audit: AuditLogger,
    key_id: Optional[str],
    success: Optional[bool],
    limit: int,
) -> None:
    """
    Print the most recent audit records.

    Args:
        audit: Audit log service
        key_id: Only records of this key
        success: Only successful (True) or failed (False) attempts
        limit: Number of records to show
    """
    page = await audit.query(key_id=key_id, success=success, limit=limit)

    if not page.logs:
        print("No audit records found.")
        return

    for record in page.logs:
        outcome = "OK  " if record.success else "FAIL"
        usage = ""
        if record.usage_after is not None:
            usage = f" usage {record.usage_before}->{record.usage_after}"
        print(
            f"{record.created_at} {outcome} {record.key_id}"
            f" {record.action_subject.get('email', '-')}{usage}"
            + (f" ({record.error_message})" if record.error_message else "")
        )

    print(f"\nShown: {page.count}" + (" (more available)" if page.has_more else ""))


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    """Argument parser for all commands."""
    parser = argparse.ArgumentParser(
        description="Manage admin keys for the Admin Key Service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command")

    generate_parser = subparsers.add_parser("generate", help="Issue a new admin key")
    generate_parser.add_argument(
        "--limit", type=int, required=True, help="Maximum authorized actions"
    )
    generate_parser.add_argument(
        "--description", type=str, default="", help="Description for the key"
    )
    generate_parser.add_argument(
        "--expires-in-days",
        type=int,
        default=settings.default_expires_in_days,
        help=f"Lifetime in days (default: {settings.default_expires_in_days})",
    )

    subparsers.add_parser("list", help="List all admin keys")

    update_parser = subparsers.add_parser("update", help="Update an admin key")
    update_parser.add_argument("key_id", type=str, help="Key ID to update")
    update_parser.add_argument("--limit", type=int, help="New limit")
    update_parser.add_argument("--description", type=str, help="New description")
    update_parser.add_argument(
        "--status",
        choices=["active", "inactive", "suspended"],
        help="New status",
    )
    update_parser.add_argument(
        "--expires-in-days", type=int, help="New lifetime in days from now"
    )

    delete_parser = subparsers.add_parser("delete", help="Delete an admin key")
    delete_parser.add_argument("key_id", type=str, help="Key ID to delete")

    logs_parser = subparsers.add_parser("logs", help="Show recent audit records")
    logs_parser.add_argument("--key-id", type=str, help="Filter by key ID")
    outcome = logs_parser.add_mutually_exclusive_group()
    outcome.add_argument(
        "--success", dest="success", action="store_const", const=True,
        help="Only successful attempts",
    )
    outcome.add_argument(
        "--failed", dest="success", action="store_const", const=False,
        help="Only failed attempts",
    )
    logs_parser.add_argument(
        "--limit", type=int, default=20, help="Number of records (default: 20)"
    )

    return parser


async def run(args: argparse.Namespace, settings: Settings) -> None:
    """Dispatch a parsed command."""
    lifecycle, audit = build_services(settings)

    if args.command == "generate":
        await cmd_generate(
            lifecycle, args.limit, args.description, args.expires_in_days
        )
    elif args.command == "list":
        await cmd_list(lifecycle)
    elif args.command == "update":
        await cmd_update(
            lifecycle,
            args.key_id,
            args.limit,
            args.description,
            args.status,
            args.expires_in_days,
        )
    elif args.command == "delete":
        await cmd_delete(lifecycle, args.key_id)
    elif args.command == "logs":
        await cmd_logs(audit, args.key_id, args.success, args.limit)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    settings = Settings()
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        asyncio.run(run(args, settings))
    except AdminKeyAPIError as exc:
        print(f"✗ Error: {exc.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
