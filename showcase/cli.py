"""
Showcase Backend — Admin CLI
==============================

What:  `showcase-admin`, the out-of-band way to manage accounts.
Why:   The HTTP API has no registration endpoint; users are seeded here.

Usage:
    showcase-admin init-db
    showcase-admin create-user --email admin@example.com --password '...' --role admin
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from showcase.database import async_session_factory, create_all, dispose_engine
from showcase.exceptions import ValidationError
from showcase.services.user_service import ROLES, create_user

logger = logging.getLogger(__name__)


async def _init_db() -> int:
    await create_all()
    print("Database schema created.")
    return 0


async def _create_user(email: str, password: str, role: str) -> int:
    async with async_session_factory() as session:
        try:
            user = await create_user(session, email=email, password=password, role=role)
            await session.commit()
        except ValidationError as e:
            await session.rollback()
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

    print("Created user:")
    print(f"  id={user.id} email={user.email} role={user.role}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="showcase-admin", description="Showcase account administration")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create tables from the model metadata")

    cu = sub.add_parser("create-user", help="create a user account")
    cu.add_argument("--email", required=True)
    cu.add_argument("--password", required=True)
    cu.add_argument("--role", choices=list(ROLES), default="user")
    return ap


async def _run(args: argparse.Namespace) -> int:
    try:
        if args.command == "init-db":
            return await _init_db()
        return await _create_user(args.email, args.password, args.role)
    finally:
        await dispose_engine()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
