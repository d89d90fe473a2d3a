import argparse
from collections.abc import Sequence

import uvicorn

from tradedocs.api.app import create_app
from tradedocs.api.services import build_services
from tradedocs.config.settings import Settings
from tradedocs.database.connection import Database
from tradedocs.database.schema import ensure_schema, verify_schema
from tradedocs.logging.logger import Log


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tradedocs", description="Trade document ingestion service")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("serve", help="Run the HTTP API")
    commands.add_parser("init-schema", help="Create tables and the BOL number unique index")
    sweep = commands.add_parser("sweep-orphans", help="Find blobs no document references")
    sweep.add_argument(
        "--apply",
        action="store_true",
        help="Delete orphaned blobs older than ORPHAN_GRACE_HOURS (default: dry run)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point: settings -> logging -> database -> command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    database = Database.connect(settings)

    try:
        if args.command == "init-schema":
            ensure_schema(database)
            verify_schema(database)
            return

        if settings.db_auto_migrate:
            ensure_schema(database)
        verify_schema(database)
        services = build_services(settings, database)

        if args.command == "sweep-orphans":
            services.orphan_sweeper().sweep(dry_run=not args.apply)
        elif args.command == "serve":
            Log.info(f"Starting API on {settings.api_host}:{settings.api_port}")
            uvicorn.run(
                create_app(services),
                host=settings.api_host,
                port=settings.api_port,
                log_level=settings.log_level.lower(),
            )
    finally:
        database.close()


if __name__ == "__main__":
    main()
