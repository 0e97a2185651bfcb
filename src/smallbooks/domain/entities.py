"""Domain model entities for smallbooks.

These are pure data classes representing bookkeeping concepts, independent of
the database schema. Repositories return these, never ORM rows, so the import
pipeline can run against any storage that implements the repository interfaces.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class AccountType(str, Enum):
    """Chart of accounts type."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def normal_balance(self) -> "NormalBalance":
        """Side that increases an account of this type."""
        if self in (AccountType.ASSET, AccountType.EXPENSE):
            return NormalBalance.DEBIT
        return NormalBalance.CREDIT


class NormalBalance(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class TransactionType(str, Enum):
    BANK = "bank"
    CREDIT_CARD = "credit_card"
    JOURNAL = "journal"
    INVOICE = "invoice"
    BILL = "bill"
    PAYMENT = "payment"


class TransactionStatus(str, Enum):
    DRAFT = "draft"
    POSTED = "posted"
    VOID = "void"


class ImportBatchStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Account:
    """Ledger account domain entity."""

    id: int
    code: str
    name: str
    type: AccountType
    normal_balance: NormalBalance
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class TransactionLine:
    """One side of a double-entry posting."""

    id: int
    transaction_id: int
    account_id: int
    debit: Decimal
    credit: Decimal
    description: Optional[str] = None
    category_id: Optional[int] = None


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction domain entity with its lines."""

    id: int
    date: date
    description: str
    reference: Optional[str]
    type: TransactionType
    status: TransactionStatus
    user_id: str
    notes: Optional[str]
    created_at: datetime
    lines: tuple[TransactionLine, ...] = ()


@dataclass(frozen=True)
class CategorizationRule:
    """Learned mapping from a description pattern to a ledger account."""

    id: int
    user_id: str
    pattern: str
    account_id: int
    confidence: Decimal
    match_count: int
    last_matched: Optional[datetime]


@dataclass(frozen=True)
class ImportBatch:
    """Record of one CSV upload and the outcome of its commit."""

    id: int
    user_id: str
    filename: str
    row_count: int
    success_count: int
    error_count: int
    status: ImportBatchStatus
    created_at: datetime


@dataclass(frozen=True)
class TransactionCandidate:
    """Normalized bank statement row, not yet posted to the ledger."""

    line_number: int
    date: date
    description: str
    amount: Decimal
    reference: str = ""
    raw_data: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "line_number": self.line_number,
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": self.amount,
            "reference": self.reference,
            "raw_data": dict(self.raw_data),
        }


@dataclass(frozen=True)
class Suggestion:
    """Suggested ledger account for a candidate."""

    account_id: Optional[int]
    account_name: str
    confidence: float
    reason: str


@dataclass(frozen=True)
class RowErrorEntry:
    """A CSV row that could not be parsed."""

    line: int
    error: str
    data: dict[str, Any]


@dataclass(frozen=True)
class CSVParseResult:
    """Candidates and row errors produced from one CSV file."""

    candidates: list[TransactionCandidate]
    errors: list[RowErrorEntry]
    filename: str
