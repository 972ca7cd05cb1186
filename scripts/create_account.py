import argparse
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hotelchain.config import load_settings, resolve_database_path
from hotelchain.database import PASSWORD_MIN_LENGTH, Database
from hotelchain.models import Role


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a HotelChain console account")
    parser.add_argument("name", help="Display name for the operator")
    parser.add_argument("email", help="Unique email address for login")
    parser.add_argument("role", choices=[role.value for role in Role], help="Operator role")
    parser.add_argument(
        "--hotel",
        dest="hotel_id",
        default=None,
        help="Hotel the operator is assigned to (managers only)",
    )
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to HOTELCHAIN_DB_PATH or data/hotelchain.sqlite3)",
    )
    return parser.parse_args()


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if len(password) < PASSWORD_MIN_LENGTH:
            print(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main() -> int:
    args = parse_args()
    if args.hotel_id and args.role != Role.MANAGER.value:
        print("Only managers can be assigned to a hotel.", file=sys.stderr)
        return 1
    password = prompt_for_password()

    db_path = resolve_database_path(args.db_path) if args.db_path else load_settings().database_path

    database = Database(db_path)
    database.initialize()

    try:
        identity = database.create_account(args.email, args.name, password, args.role, args.hotel_id)
    except ValueError as exc:  # duplicates, etc.
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created {identity.role.value} account {identity.display_name} <{identity.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
