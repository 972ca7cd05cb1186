"""Command-line interface for the hotel-chain admin console."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Sequence

import anyio

from hotelchain.config import Settings, load_settings
from hotelchain.database import DEMO_PASSWORD, Database

logger = logging.getLogger("hotelchain.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="HotelChain admin console utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the console database")
    subparsers.add_parser("seed-demo", help="Create the demo owner, manager and accountant accounts")
    subparsers.add_parser("accounts", help="List operator accounts")

    session_parser = subparsers.add_parser("session", help="Show the persisted operator session")
    session_parser.add_argument(
        "--logout",
        action="store_true",
        help="Clear the persisted session instead of showing it",
    )

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP console")
    serve_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help=(
            "Bind address for the console (default: 127.0.0.1). The console holds a single "
            "operator session for every client, so keep it on localhost."
        ),
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the console (default: 8000)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "seed-demo", "accounts", "session"}

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
    from hotelchain.console import create_app
    import uvicorn

    logger.info("Starting admin console on http://%s:%s", host, port)
    app = create_app(database=database, settings=settings)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _list_accounts(database: Database) -> None:
    accounts = database.list_accounts()
    if not accounts:
        print("No accounts are currently registered.")
        return

    print(f"{len(accounts)} account(s) found:")
    print(f"{'Role':<11}  {'Name':<24}  {'Email':<32}  Hotel")
    print("-" * 80)
    for account in accounts:
        identity = account.identity
        hotel = identity.assigned_hotel_id or "-"
        print(f"{identity.role.value:<11}  {identity.display_name:<24}  {identity.email:<32}  {hotel}")


def _seed_demo(database: Database) -> None:
    created = database.seed_demo_accounts()
    if not created:
        print("Demo accounts already exist.")
        return
    for identity in created:
        print(f"Created {identity.role.value} account {identity.email}")
    print(f"Demo password for all accounts: {DEMO_PASSWORD}")


def _show_session(database: Database, settings: Settings, *, logout: bool) -> None:
    from hotelchain.console import build_session_store

    store = build_session_store(database, settings)
    session = anyio.run(store.restore)
    if logout:
        store.logout()
        print("Persisted session cleared.")
        return
    if session is None:
        print("No operator is signed in.")
        return
    identity = session.identity
    hotel = f" (hotel {identity.assigned_hotel_id})" if identity.assigned_hotel_id else ""
    print(f"Signed in: {identity.display_name} <{identity.email}> as {identity.role.value}{hotel}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    settings = load_settings()
    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(database=database, settings=settings, host=args.host, port=args.port)
    elif args.command == "seed-demo":
        _seed_demo(database)
    elif args.command == "accounts":
        _list_accounts(database)
    elif args.command == "session":
        _show_session(database, settings, logout=args.logout)
    elif args.command == "init-db":
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
