from datetime import date

import pytest

from csv_import import (
    INVALID_AMOUNT,
    INVALID_DATE,
    MISSING_FIELDS,
    EmptyFileError,
    InvalidEncodingError,
    InvalidFormatError,
    parse_amount,
    parse_csv,
    parse_date,
    split_line,
)
from database import TransactionKind


def _csv(*lines: str) -> bytes:
    return "\n".join(lines).encode("utf-8")


def test_negative_amount_is_expense() -> None:
    result = parse_csv(_csv("Date,Description,Amount", "2024-03-15,Grocer,-42.50"))
    txn = result.transactions[0]
    assert txn.amount == 42.50
    assert txn.kind == TransactionKind.EXPENSE


def test_positive_amount_is_income() -> None:
    result = parse_csv(_csv("Date,Description,Amount", "2024-03-15,Salary,100"))
    txn = result.transactions[0]
    assert txn.amount == 100
    assert txn.kind == TransactionKind.INCOME


def test_zero_amount_is_income() -> None:
    result = parse_csv(_csv("Date,Description,Amount", "2024-03-15,Adjustment,0"))
    assert result.transactions[0].kind == TransactionKind.INCOME


def test_quoted_description_keeps_comma() -> None:
    result = parse_csv(_csv("Date,Description,Amount", '2024-01-05, "Whole Foods, Market",-55.10'))
    txn = result.transactions[0]
    assert txn.description == "Whole Foods, Market"
    assert txn.amount == pytest.approx(55.10)
    assert txn.kind == TransactionKind.EXPENSE


def test_split_line_quote_aware() -> None:
    assert split_line('Groceries, "Whole Foods, Market",-55.10') == [
        "Groceries",
        " Whole Foods, Market",
        "-55.10",
    ]


def test_split_line_trailing_comma_yields_empty_field() -> None:
    assert split_line("a,b,") == ["a", "b", ""]


def test_merchant_header_resolves_description() -> None:
    result = parse_csv(_csv("Date,Merchant,Amount", "2024-03-15,Cafe,-3"))
    assert result.transactions[0].description == "Cafe"


def test_alternate_header_spellings() -> None:
    data = _csv("Transaction Date,details,Transaction Amount,Balance", "03/15/2024,Rent,-1200,500")
    txn = parse_csv(data).transactions[0]
    assert txn.date == date(2024, 3, 15)
    assert txn.description == "Rent"
    assert txn.amount == 1200


def test_first_matching_header_wins() -> None:
    data = _csv("Date,Description,Amount,amount", "2024-03-15,Shop,-1,-99")
    assert parse_csv(data).transactions[0].amount == 1


def test_header_is_case_sensitive() -> None:
    with pytest.raises(InvalidFormatError):
        parse_csv(_csv("Date,Description,aMoUnT", "2024-03-15,Shop,-1"))


def test_missing_amount_column_is_invalid_format() -> None:
    with pytest.raises(InvalidFormatError):
        parse_csv(_csv("Date,Description,Memo", "2024-03-15,Shop,note"))


@pytest.mark.parametrize("data", [b"", b"Date,Description,Amount", b"Date,Description,Amount\n"])
def test_empty_or_header_only_file(data: bytes) -> None:
    with pytest.raises(EmptyFileError):
        parse_csv(data)


def test_invalid_utf8() -> None:
    with pytest.raises(InvalidEncodingError):
        parse_csv(b"Date,Description,Amount\n2024-01-01,Caf\xe9,-3\n")


def test_error_messages_are_user_facing() -> None:
    assert str(EmptyFileError()) == "The CSV file is empty."


def test_byte_order_mark_is_ignored() -> None:
    data = "\ufeffDate,Description,Amount\n2024-03-15,Shop,-1".encode("utf-8")
    assert len(parse_csv(data).transactions) == 1


def test_crlf_line_endings() -> None:
    data = b"Date,Description,Amount\r\n2024-03-15,Shop,-1\r\n2024-03-16,Shop,-2\r\n"
    result = parse_csv(data)
    assert [t.amount for t in result.transactions] == [1, 2]
    assert result.skipped == []


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2024-03-15", date(2024, 3, 15)),
        ("03/15/2024", date(2024, 3, 15)),
        ("15/03/2024", date(2024, 3, 15)),
        ("2024/03/15", date(2024, 3, 15)),
        ("03-15-2024", date(2024, 3, 15)),
        ("15-03-2024", date(2024, 3, 15)),
        # Ambiguous values resolve month-first.
        ("03/04/2024", date(2024, 3, 4)),
        ("03-04-2024", date(2024, 3, 4)),
    ],
)
def test_parse_date_formats(text: str, expected: date) -> None:
    assert parse_date(text) == expected


@pytest.mark.parametrize("text", ["", "March 15", "2024-13-45", "15.03.2024"])
def test_parse_date_rejects(text: str) -> None:
    assert parse_date(text) is None


@pytest.mark.parametrize(
    ("text", "expected"),
    [("$1,234.56", 1234.56), ("-$5", -5.0), (" 12 ", 12.0), ("-0.5", -0.5), (".5", 0.5)],
)
def test_parse_amount(text: str, expected: float) -> None:
    assert parse_amount(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", ["", "abc", "nan", "inf", "1_000", "(5.00)"])
def test_parse_amount_rejects(text: str) -> None:
    assert parse_amount(text) is None


def test_bad_rows_are_skipped_and_reported() -> None:
    data = _csv(
        "Date,Description,Amount",
        "2024-03-15,Good,-1",
        "not a date,Bad date,-2",
        "2024-03-16,Bad amount,twelve",
        "2024-03-17,Short",
        "",
        "2024-03-18,Also good,3",
    )
    result = parse_csv(data)

    assert [t.description for t in result.transactions] == ["Good", "Also good"]
    assert [(s.line_number, s.reason) for s in result.skipped] == [
        (3, INVALID_DATE),
        (4, INVALID_AMOUNT),
        (5, MISSING_FIELDS),
    ]
    assert result.skipped_count == 3


def test_valid_header_with_only_bad_rows_succeeds_empty() -> None:
    result = parse_csv(_csv("Date,Description,Amount", "x,y,z", "1,2,3"))
    assert result.transactions == []
    assert result.skipped_count == 2


def test_parsing_is_idempotent() -> None:
    data = _csv("Date,Description,Amount", "2024-03-15,A,-1", "2024-03-16,B,2")
    assert parse_csv(data) == parse_csv(data)


def test_progress_is_monotonic_and_ends_at_one() -> None:
    seen = []
    parse_csv(_csv("Date,Description,Amount", "2024-03-15,A,-1", "bad", "2024-03-16,B,2"), progress=seen.append)
    assert seen == sorted(seen)
    assert seen[-1] == 1.0
    assert len(seen) == 3


def test_to_frame() -> None:
    result = parse_csv(_csv("Date,Description,Amount", "2024-03-15,A,-1"))
    df = result.to_frame()
    assert list(df.columns) == ["Date", "Description", "Amount", "Kind"]
    assert df.iloc[0]["Kind"] == "expense"
