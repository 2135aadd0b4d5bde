"""
importer.py
-----------
Drive one CSV import session: parse a file into an in-memory batch, let the
caller review it, then save every row through the record store.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, List, Optional

from categorizer import match_category
from csv_import import ParsedTransaction, SkippedRow, parse_csv
from database import Category, Transaction
from record_store import RecordStore, RecordStoreError
from utils import get_logger

logger = get_logger(__name__)

IMPORT_NOTE = "Imported from CSV"
IMPORT_SOURCE = "csv_upload"


class ImportCommitError(Exception):
    """Saving the batch stopped at a row the record store rejected."""

    def __init__(self, committed: int, row: ParsedTransaction, cause: Exception):
        self.committed = committed
        self.row = row
        super().__init__(
            f"Saved {committed} transactions before failing on {row.description!r}: {cause}"
        )


class ImportCoordinator:
    """Holds at most one uncommitted batch of parsed transactions.

    ``is_importing``, ``progress`` and ``transactions`` may be read from
    another thread while ``begin`` runs.
    """

    def __init__(self, store: RecordStore):
        self.store = store
        self._lock = threading.Lock()
        self._is_importing = False
        self._progress = 0.0
        self._transactions: List[ParsedTransaction] = []
        self._skipped: List[SkippedRow] = []

    @property
    def is_importing(self) -> bool:
        with self._lock:
            return self._is_importing

    @property
    def progress(self) -> float:
        with self._lock:
            return self._progress

    @property
    def transactions(self) -> List[ParsedTransaction]:
        with self._lock:
            return list(self._transactions)

    @property
    def skipped(self) -> List[SkippedRow]:
        with self._lock:
            return list(self._skipped)

    def _set_progress(self, fraction: float) -> None:
        with self._lock:
            self._progress = fraction

    def begin(self, data: bytes) -> List[ParsedTransaction]:
        """Parse ``data`` and make it the current batch, replacing any earlier one.

        Parser errors propagate unchanged and leave no batch behind.
        """
        with self._lock:
            self._is_importing = True
            self._progress = 0.0
            self._transactions = []
            self._skipped = []

        try:
            result = parse_csv(data, progress=self._set_progress)
        finally:
            with self._lock:
                self._is_importing = False

        with self._lock:
            self._transactions = list(result.transactions)
            self._skipped = list(result.skipped)
            self._progress = 1.0
            return list(self._transactions)

    def begin_file(self, path) -> List[ParsedTransaction]:
        return self.begin(Path(path).read_bytes())

    def confirm_and_commit(
        self, override_mapping: Optional[Dict[str, Category]] = None
    ) -> List[Transaction]:
        """Save the current batch and clear it.

        ``override_mapping`` maps a description to the category the user picked
        for it; other rows are categorised with ``match_category``.  If the
        store rejects a row, the rows already saved leave the batch, the rest
        stay for a retry and ``ImportCommitError`` is raised.
        """
        override_mapping = override_mapping or {}
        with self._lock:
            pending = list(self._transactions)

        categories = self.store.fetch_categories()
        created = []

        for row in pending:
            if row.description in override_mapping:
                category = override_mapping[row.description]
            else:
                category = match_category(row.description, categories)
            try:
                txn = self.store.create_transaction(
                    amount=row.amount,
                    date=row.date,
                    description=row.description,
                    category=category,
                    note=IMPORT_NOTE,
                    kind=row.kind,
                    source=IMPORT_SOURCE,
                )
            except RecordStoreError as exc:
                with self._lock:
                    self._transactions = pending[len(created):]
                logger.error("Import stopped after %d of %d transactions", len(created), len(pending))
                raise ImportCommitError(len(created), row, exc) from exc
            created.append(txn)

        with self._lock:
            self._transactions = []
            self._skipped = []

        logger.info("Committed %d imported transactions", len(created))
        return created
