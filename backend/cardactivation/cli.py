"""
Command-line interface for the Card Activation Backend.

Commands:
    serve        run the API with uvicorn
    init-db      connect, create tables and seed the admin and fee ledger
    seed-admin   create the first admin user if none exists
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from cardactivation.config import Settings, settings as default_settings
from cardactivation.database import Database
from cardactivation.exceptions import PersistenceError
from cardactivation.main import initialize_database, setup_logging
from cardactivation.services.admin_service import admin_credential_service

logger = logging.getLogger(__name__)


def _validated(settings: Settings) -> Settings:
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    return settings


async def _init_db(settings: Settings) -> None:
    database = Database(settings)
    try:
        await database.connect()
        await initialize_database(database, settings)
    finally:
        await database.close()


async def _seed_admin(settings: Settings, username: str, password: str) -> bool:
    database = Database(settings)
    try:
        await database.connect()
        if settings.db_auto_create:
            await database.create_all()
        async with database.session() as session:
            admin = await admin_credential_service.seed_if_empty(
                session, username=username, password=password
            )
    finally:
        await database.close()
    return admin is not None


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    uvicorn.run(
        "cardactivation.main:app",
        host=args.host or settings.backend_host,
        port=args.port or settings.backend_port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_init_db(args: argparse.Namespace, settings: Settings) -> int:
    asyncio.run(_init_db(settings))
    print("Database initialised.")
    return 0


def cmd_seed_admin(args: argparse.Namespace, settings: Settings) -> int:
    username = args.username or settings.admin_username
    password = args.password or settings.admin_password
    created = asyncio.run(_seed_admin(settings, username, password))
    if created:
        print(f"Initial admin user created with username: {username}")
    else:
        print("Admin user already exists. No action taken.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cardactivation",
        description="Card Activation Backend management commands",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (default: BACKEND_HOST)")
    serve.add_argument("--port", type=int, help="Port (default: BACKEND_PORT)")
    serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    serve.set_defaults(func=cmd_serve)

    init_db = subparsers.add_parser("init-db", help="Create tables and seed defaults")
    init_db.set_defaults(func=cmd_init_db)

    seed = subparsers.add_parser("seed-admin", help="Create the first admin if none exists")
    seed.add_argument("--username", help="Admin username (default: ADMIN_USERNAME)")
    seed.add_argument("--password", help="Admin password (default: ADMIN_PASSWORD)")
    seed.set_defaults(func=cmd_seed_admin)

    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = _validated(settings or default_settings)
    setup_logging(settings.log_level)
    try:
        return args.func(args, settings)
    except PersistenceError as e:
        logger.error("%s", e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
