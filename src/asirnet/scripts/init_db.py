"""Create (or reset) the tables for every configured collection database."""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from asirnet.core.settings import settings
from asirnet.db.session import collection_engines, create_tables, drop_tables


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the Asirnet database tables")
    parser.add_argument(
        "--drop-tables",
        action="store_true",
        help="Drop existing tables before creating them again.",
    )
    args = parser.parse_args(argv)

    urls = settings.collection_database_urls
    engines = collection_engines(urls)
    try:
        if args.drop_tables:
            drop_tables(engines)
            print("[init_db] dropped all tables")
        create_tables(engines)
    except SQLAlchemyError as exc:
        print(f"[init_db] ERROR: {exc}", file=sys.stderr)
        return 1

    for name, url in urls.items():
        print(f"[init_db] {name}: {url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
