"""
process_transactions.py
-----------------------
Import a bank-exported CSV statement from the command line.

Without ``--commit`` the file is only parsed and previewed; with it the rows
are categorised and saved to the configured database.

Usage:

    python process_transactions.py statement.csv [--commit] [--database-url URL]
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from csv_import import CSVImportError, transactions_frame
from database import DB_URL, init_db, make_engine
from importer import ImportCommitError, ImportCoordinator
from record_store import RecordStore


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Import transactions from a bank CSV export")
    parser.add_argument("file", type=str, help="CSV file to import")
    parser.add_argument(
        "--commit",
        action="store_true",
        help="Save the parsed transactions instead of only previewing them.",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=DB_URL,
        help="SQLAlchemy database URL (defaults to DATABASE_URL or a local SQLite file).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    engine = make_engine(args.database_url)
    init_db(engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()

    try:
        coordinator = ImportCoordinator(RecordStore(db))
        try:
            coordinator.begin_file(args.file)
        except CSVImportError as exc:
            print(f"Import failed: {exc}", file=sys.stderr)
            return 1

        df = transactions_frame(coordinator.transactions)
        if df.empty:
            print("No transactions found.")
        else:
            print(df.to_string(index=False))
        print(f"{len(df)} transactions parsed, {len(coordinator.skipped)} rows skipped.")

        if args.commit and not df.empty:
            try:
                saved = coordinator.confirm_and_commit()
            except ImportCommitError as exc:
                print(f"Import failed: {exc}", file=sys.stderr)
                return 1
            print(f"Saved {len(saved)} transactions.")
        return 0
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
