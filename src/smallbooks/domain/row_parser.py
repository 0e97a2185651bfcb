"""Turn one bank statement CSV row into a transaction candidate."""

import re
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from smallbooks.domain.entities import TransactionCandidate
from smallbooks.domain.errors import MissingRequiredField
from smallbooks.utils.amount_parser import parse_amount
from smallbooks.utils.date_parser import parse_date

# Column aliases, in order of preference, after header normalization
DATE_FIELDS = ("date", "transaction_date", "trans_date", "posting_date", "post_date")
DESCRIPTION_FIELDS = ("description", "desc", "memo", "transaction_description", "payee", "name")
AMOUNT_FIELDS = ("amount", "transaction_amount", "trans_amount")
DEBIT_FIELDS = ("debit", "withdrawal", "withdrawals", "debit_amount")
CREDIT_FIELDS = ("credit", "deposit", "deposits", "credit_amount")
REFERENCE_FIELDS = ("reference", "ref", "check_number", "check_num", "transaction_id", "trans_id")


def normalize_header(header: str) -> str:
    """Normalize a CSV header name: "Trans Date " -> "trans_date"."""
    return re.sub(r"\s+", "_", header.strip().lower())


def find_field_value(row: Mapping[str, Optional[str]], field_names: Sequence[str]) -> Optional[str]:
    """Return the first non-empty value among the given columns, stripped."""
    for name in field_names:
        value = row.get(name)
        if value is not None and value.strip() != "":
            return value.strip()
    return None


def resolve_amount(row: Mapping[str, Optional[str]]) -> Optional[Decimal]:
    """Resolve the signed amount of a row.

    A signed amount column wins. Otherwise the sign comes from the column
    role: debit/withdrawal values are outflows, credit/deposit values are
    inflows. Returns None if the row carries no amount at all.
    """
    amount_value = find_field_value(row, AMOUNT_FIELDS)
    if amount_value is not None:
        return parse_amount(amount_value)

    debit_value = find_field_value(row, DEBIT_FIELDS)
    credit_value = find_field_value(row, CREDIT_FIELDS)

    debit = abs(parse_amount(debit_value)) if debit_value is not None else None
    credit = abs(parse_amount(credit_value)) if credit_value is not None else None

    # Some banks fill the unused column with 0.00
    if debit:
        return -debit
    if credit is not None:
        return credit
    if debit is not None:
        return -debit
    return None


def parse_row(
    raw_fields: Mapping[str, Optional[str]], line_number: int, dayfirst: bool = False
) -> TransactionCandidate:
    """Parse one CSV record into a transaction candidate.

    Args:
        raw_fields: Row values keyed by normalized header name
        line_number: 1-based line number of the row in the file
        dayfirst: Read ambiguous dates as day first

    Returns:
        TransactionCandidate

    Raises:
        MissingRequiredField: If date, description or amount is empty
        InvalidAmount: If the amount is not a number
        InvalidDate: If the date cannot be parsed
    """
    row = {normalize_header(k): v for k, v in raw_fields.items() if k is not None}

    date_value = find_field_value(row, DATE_FIELDS)
    description = find_field_value(row, DESCRIPTION_FIELDS)
    if date_value is None or description is None:
        raise MissingRequiredField(
            f"Missing required fields (date or description) on line {line_number}"
        )

    amount = resolve_amount(row)
    if amount is None:
        raise MissingRequiredField(f"Missing amount on line {line_number}")

    reference = find_field_value(row, REFERENCE_FIELDS) or ""

    return TransactionCandidate(
        line_number=line_number,
        date=parse_date(date_value, dayfirst=dayfirst),
        description=description,
        amount=amount,
        reference=reference,
        raw_data=dict(raw_fields),
    )
