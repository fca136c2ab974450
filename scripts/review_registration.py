import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storefront.database import Database, StoreError, resolve_database_path
from storefront.models import AccountStatus

DECISIONS = {
    "approve": AccountStatus.APPROVED,
    "reject": AccountStatus.REJECTED,
}


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Approve or reject a pending storefront registration")
    parser.add_argument("email", help="Email address the customer registered with")
    parser.add_argument("decision", choices=sorted(DECISIONS), help="Approval decision to apply")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to STOREFRONT_DB_PATH or data/storefront.sqlite3)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    db_env = args.db_path or os.getenv("STOREFRONT_DB_PATH")
    db_path = resolve_database_path(db_env)

    database = Database(db_path)
    database.initialize()

    try:
        account = database.set_account_status(args.email.strip(), DECISIONS[args.decision])
    except (ValueError, StoreError) as exc:  # unknown email, terminal state, etc.
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Account #{account.id} <{account.email}> is now {account.status.value}.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
