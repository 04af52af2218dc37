"""Create (or reset) the backup tables in the configured database."""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from dailyreps_backup.core.settings import get_settings
from dailyreps_backup.db.session import build_engine, create_tables, drop_tables


def init_db(url: str, *, drop: bool = False) -> None:
    """Create all tables at `url`, dropping existing ones first when `drop` is set."""
    engine = build_engine(url)
    try:
        if drop:
            drop_tables(engine)
            print("[init_db] dropped all tables")
        create_tables(engine)
    finally:
        engine.dispose()
    print("[init_db] tables ready")


def main() -> None:
    parser = argparse.ArgumentParser(description="Initialise the backup database")
    parser.add_argument(
        "--drop-tables",
        action="store_true",
        help="Drop every backup table before creating them again.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to effective settings URL)",
    )
    args = parser.parse_args()

    url = args.url or get_settings().effective_database_url
    try:
        init_db(url, drop=args.drop_tables)
    except SQLAlchemyError as exc:
        print(f"[init_db] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
