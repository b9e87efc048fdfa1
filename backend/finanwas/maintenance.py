"""Maintenance CLI — scheduled and one-off administrative tasks.

Usage:
    python -m finanwas.maintenance cleanup-snapshots [--days N]
    python -m finanwas.maintenance create-code
    python -m finanwas.maintenance create-admin --email E --name N --password P

Invariants:
    - Each command opens its own engine and disposes it before exiting
    - Exit code 1 on validation failure, 0 otherwise

Design Decisions:
    - argparse + asyncio.run: runs from cron without the API process
"""

import argparse
import asyncio
import logging
import sys

from finanwas.config import get_settings
from finanwas.core.domain_types import Role
from finanwas.core.errors import FinanwasError
from finanwas.core.validators import is_valid_email, validate_password
from finanwas.db.session import create_session_factory
from finanwas.infrastructure.observability import setup_logging
from finanwas.services.snapshots import SnapshotService
from finanwas.services.users import UserService

logger = logging.getLogger(__name__)


async def cleanup_snapshots(days: int) -> int:
    factory = create_session_factory(get_settings().database_url)
    try:
        async with factory() as db:
            deleted = await SnapshotService(db).cleanup_old_snapshots(retention_days=days)
    finally:
        await factory.kw["bind"].dispose()
    print(f"Deleted {deleted} snapshots older than {days} days")
    return 0


async def create_code() -> int:
    factory = create_session_factory(get_settings().database_url)
    try:
        async with factory() as db:
            invitation = await UserService(db).generate_invitation_code()
    finally:
        await factory.kw["bind"].dispose()
    print(invitation.code)
    return 0


async def create_admin(email: str, name: str, password: str) -> int:
    if not is_valid_email(email):
        print("Invalid email", file=sys.stderr)
        return 1
    check = validate_password(password)
    if not check.is_valid:
        for message in check.errors:
            print(message, file=sys.stderr)
        return 1

    factory = create_session_factory(get_settings().database_url)
    try:
        async with factory() as db:
            service = UserService(db)
            if await service.find_by_email(email) is not None:
                print(f"User {email} already exists", file=sys.stderr)
                return 1
            user = await service.create_user(email, password, name.strip(), role=Role.ADMIN.value)
    finally:
        await factory.kw["bind"].dispose()
    logger.info("Admin user created", extra={"user_id": str(user.id)})
    print(f"Created admin {user.email} ({user.id})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="finanwas.maintenance", description="Finanwas maintenance tasks.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    cleanup = commands.add_parser(
        "cleanup-snapshots", help="Delete portfolio snapshots past the retention window",
    )
    cleanup.add_argument(
        "--days", type=int, default=get_settings().snapshot_retention_days,
        help="Retention window in days",
    )

    commands.add_parser("create-code", help="Generate a new invitation code")

    admin = commands.add_parser("create-admin", help="Create an admin account")
    admin.add_argument("--email", required=True)
    admin.add_argument("--name", required=True)
    admin.add_argument("--password", required=True)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    try:
        if args.command == "cleanup-snapshots":
            if args.days < 1:
                print("--days must be at least 1", file=sys.stderr)
                return 1
            return asyncio.run(cleanup_snapshots(args.days))
        if args.command == "create-code":
            return asyncio.run(create_code())
        return asyncio.run(create_admin(args.email, args.name, args.password))
    except FinanwasError as e:
        logger.error(f"{args.command} failed: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
