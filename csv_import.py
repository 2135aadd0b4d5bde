"""
csv_import.py
-------------
Parse bank-exported CSV files into transaction candidates.

The parser is deliberately forgiving at the row level: a row whose date or
amount cannot be read, or that is too short, is left out of the result and
recorded in ``ParseResult.skipped`` instead of failing the whole import.  Only
problems with the file as a whole (encoding, no data, unrecognised header)
raise.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, List, Optional

import pandas as pd

from database import TransactionKind
from utils import get_logger

logger = get_logger(__name__)

# Accepted header spellings per logical column, matched exactly (after trimming).
DATE_HEADERS = ["date", "Date", "DATE", "Transaction Date"]
DESCRIPTION_HEADERS = [
    "description", "Description", "DESCRIPTION",
    "Merchant", "merchant", "MERCHANT",
    "Details", "details",
]
AMOUNT_HEADERS = ["amount", "Amount", "AMOUNT", "Transaction Amount"]

# Tried in order; the first full match wins, so MM/dd beats dd/MM for ambiguous dates.
DATE_FORMATS = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%d-%m-%Y",
]

_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

MISSING_FIELDS = "missing_fields"
INVALID_DATE = "invalid_date"
INVALID_AMOUNT = "invalid_amount"


class CSVImportError(Exception):
    """Base class for errors that abort a CSV import."""

    user_message = "The CSV file could not be imported."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)


class InvalidEncodingError(CSVImportError):
    user_message = "The CSV file could not be read. Please ensure it's encoded in UTF-8."


class EmptyFileError(CSVImportError):
    user_message = "The CSV file is empty."


class InvalidFormatError(CSVImportError):
    user_message = (
        "The CSV file format is not recognized. "
        "Please ensure it has Date, Description, and Amount columns."
    )


@dataclass(frozen=True)
class ParsedTransaction:
    date: date
    description: str
    amount: float
    kind: TransactionKind


@dataclass(frozen=True)
class SkippedRow:
    line_number: int
    line: str
    reason: str


@dataclass
class ParseResult:
    transactions: List[ParsedTransaction] = field(default_factory=list)
    skipped: List[SkippedRow] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def to_frame(self) -> pd.DataFrame:
        return transactions_frame(self.transactions)


def transactions_frame(transactions: List[ParsedTransaction]) -> pd.DataFrame:
    """Tabular preview of parsed rows for review before saving."""
    return pd.DataFrame(
        [
            {
                "Date": t.date,
                "Description": t.description,
                "Amount": t.amount,
                "Kind": t.kind.value,
            }
            for t in transactions
        ],
        columns=["Date", "Description", "Amount", "Kind"],
    )


def find_column(header: List[str], names: List[str]) -> Optional[int]:
    for index, column in enumerate(header):
        if column.strip() in names:
            return index
    return None


def split_line(line: str) -> List[str]:
    """Split a CSV line on commas that are not inside double quotes.

    Quote characters only toggle the quoted state and are dropped from the
    field text.
    """
    fields = []
    current = []
    inside_quotes = False

    for char in line:
        if char == '"':
            inside_quotes = not inside_quotes
        elif char == "," and not inside_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    fields.append("".join(current))
    return fields


def parse_date(text: str) -> Optional[date]:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_amount(text: str) -> Optional[float]:
    clean = text.replace("$", "").replace(",", "").strip()
    if not _NUMBER.match(clean):
        return None
    value = float(clean)
    if not math.isfinite(value):
        return None
    return value


def parse_csv(data: bytes, progress: Optional[Callable[[float], None]] = None) -> ParseResult:
    """Parse raw CSV bytes into transactions.

    Args:
        data: The file contents, which must be UTF-8.
        progress: Optional callback receiving the fraction of data rows
            processed so far; the last call is always ``1.0``.

    Raises:
        InvalidEncodingError: the bytes are not valid UTF-8.
        EmptyFileError: there is no data line after the header.
        InvalidFormatError: a date, description or amount column is missing.
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise InvalidEncodingError() from exc

    lines = text.splitlines()
    if len(lines) < 2:
        raise EmptyFileError()

    header = lines[0].split(",")
    date_idx = find_column(header, DATE_HEADERS)
    desc_idx = find_column(header, DESCRIPTION_HEADERS)
    amount_idx = find_column(header, AMOUNT_HEADERS)

    if date_idx is None or desc_idx is None or amount_idx is None:
        logger.warning("Unrecognised CSV header: %s", lines[0])
        raise InvalidFormatError()

    required = max(date_idx, desc_idx, amount_idx)
    result = ParseResult()
    data_lines = lines[1:]
    total = len(data_lines)

    for index, line in enumerate(data_lines):
        line_number = index + 2
        skip_reason = None

        if line.strip():
            columns = split_line(line)
            if len(columns) <= required:
                skip_reason = MISSING_FIELDS
            else:
                parsed_date = parse_date(columns[date_idx].strip())
                amount = parse_amount(columns[amount_idx].strip())
                if parsed_date is None:
                    skip_reason = INVALID_DATE
                elif amount is None:
                    skip_reason = INVALID_AMOUNT
                else:
                    kind = TransactionKind.INCOME if amount >= 0 else TransactionKind.EXPENSE
                    result.transactions.append(
                        ParsedTransaction(
                            date=parsed_date,
                            description=columns[desc_idx].strip(),
                            amount=abs(amount),
                            kind=kind,
                        )
                    )

        if skip_reason:
            logger.debug("Skipping line %d (%s): %s", line_number, skip_reason, line)
            result.skipped.append(SkippedRow(line_number=line_number, line=line, reason=skip_reason))

        if progress:
            progress((index + 1) / total)

    logger.info(
        "Parsed %d transactions (%d rows skipped)", len(result.transactions), result.skipped_count
    )
    return result
