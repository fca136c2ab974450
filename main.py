"""Command-line interface for the storefront account service."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Sequence

from storefront.config import Settings, load_settings
from storefront.database import Database
from storefront.models import AccountStatus

logger = logging.getLogger("storefront.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Storefront account service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the storefront database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP account service")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the HTTP API (default: 8000)",
    )

    list_parser = subparsers.add_parser("list-accounts", help="Print registered accounts")
    list_parser.add_argument(
        "--status",
        choices=[item.value for item in AccountStatus],
        default=None,
        help="Only show accounts in this approval state",
    )

    subparsers.add_parser(
        "purge-reset-codes", help="Delete expired and already used password-reset codes"
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "list-accounts", "purge-reset-codes"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, database: Database, settings: Settings, host: str, port: int) -> None:
    from storefront.service import create_app
    import uvicorn

    logger.info("Starting storefront account API on http://%s:%s", host, port)

    app = create_app(database=database, settings=settings)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _list_accounts(database: Database, status: str | None) -> None:
    accounts = database.list_accounts(AccountStatus(status) if status else None)
    if not accounts:
        print("No accounts match.")
        return

    print(f"{len(accounts)} account(s) found:")
    print(f"{'ID':>4}  {'Name':<24}  {'Email':<32}  {'Status':<9}  Created")
    print("-" * 90)
    for account in accounts:
        created = account.created_at.strftime("%Y-%m-%d %H:%M:%S %Z")
        print(
            f"{account.id:>4}  {account.name:<24}  {account.email:<32}  "
            f"{account.status.value:<9}  {created}"
        )


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    settings = load_settings()
    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(database=database, settings=settings, host=args.host, port=args.port)
    elif args.command == "list-accounts":
        _list_accounts(database, args.status)
    elif args.command == "purge-reset-codes":
        removed = database.purge_expired_reset_codes()
        print(f"Removed {removed} reset code(s).")
    elif args.command == "init-db":
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
