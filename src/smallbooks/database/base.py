"""Abstract repository interfaces and the unit-of-work handle.

The import pipeline only talks to these interfaces. Every write takes an
explicit UnitOfWork so a whole import can be committed or rolled back as one
unit; reads take it optionally so they can see rows written earlier in the
same unit.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from smallbooks.domain.entities import (
    Account,
    AccountType,
    NormalBalance,
    CategorizationRule,
    ImportBatch,
    ImportBatchStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
)


class UnitOfWork(ABC):
    """Atomic unit of work.

    Used as a context manager: commits when the block exits cleanly, rolls
    back when it raises.
    """

    @abstractmethod
    def commit(self) -> None:
        """Make every write of this unit durable."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard every write of this unit."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""
        pass

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self.close()
        return False


class AccountRepository(ABC):
    """Chart of accounts storage."""

    @abstractmethod
    def create_account(
        self,
        uow: UnitOfWork,
        code: str,
        name: str,
        account_type: AccountType,
        normal_balance: NormalBalance,
        is_active: bool = True,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int, uow: Optional[UnitOfWork] = None) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_code(self, code: str, uow: Optional[UnitOfWork] = None) -> Optional[Account]:
        """Get account by its chart code."""
        pass

    @abstractmethod
    def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        active_only: bool = False,
        uow: Optional[UnitOfWork] = None,
    ) -> list[Account]:
        """List accounts ordered by code."""
        pass


class RuleRepository(ABC):
    """Categorization rule storage."""

    @abstractmethod
    def find_matching_rules(
        self, user_id: str, description: str, uow: Optional[UnitOfWork] = None
    ) -> list[CategorizationRule]:
        """Find the user's rules whose pattern occurs in a lower-cased description.

        Only rules whose account still exists are returned, ordered by
        confidence descending, then match count descending, then ID.
        """
        pass

    @abstractmethod
    def get_rule(
        self, user_id: str, pattern: str, account_id: int, uow: Optional[UnitOfWork] = None
    ) -> Optional[CategorizationRule]:
        """Get the rule for a (user, pattern, account) triple."""
        pass

    @abstractmethod
    def create_rule(
        self,
        uow: UnitOfWork,
        user_id: str,
        pattern: str,
        account_id: int,
        confidence: Decimal,
        match_count: int,
        last_matched: datetime,
    ) -> int:
        """Create a rule. Returns rule ID."""
        pass

    @abstractmethod
    def update_rule(
        self,
        uow: UnitOfWork,
        rule_id: int,
        confidence: Decimal,
        match_count: int,
        last_matched: datetime,
    ) -> None:
        """Update the learning statistics of a rule."""
        pass

    @abstractmethod
    def list_rules(self, user_id: str, uow: Optional[UnitOfWork] = None) -> list[CategorizationRule]:
        """List a user's rules, strongest first."""
        pass


class TransactionRepository(ABC):
    """Ledger transaction storage."""

    @abstractmethod
    def create_transaction(
        self,
        uow: UnitOfWork,
        date: date,
        description: str,
        reference: Optional[str],
        transaction_type: TransactionType,
        status: TransactionStatus,
        user_id: str,
        lines: Sequence[dict[str, Any]],
        notes: Optional[str] = None,
    ) -> int:
        """Create a transaction together with its lines. Returns transaction ID.

        Each line is a dict with account_id, debit, credit and optionally
        description and category_id.
        """
        pass

    @abstractmethod
    def get_transaction(
        self, transaction_id: int, uow: Optional[UnitOfWork] = None
    ) -> Optional[Transaction]:
        """Get transaction by ID, with lines."""
        pass

    @abstractmethod
    def find_similar_transactions(
        self, user_id: str, keyword: str, limit: int = 10, uow: Optional[UnitOfWork] = None
    ) -> list[Transaction]:
        """Find the user's posted transactions whose description contains keyword.

        Matching is case-insensitive; most recent transactions first.
        """
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[TransactionStatus] = None,
        search: Optional[str] = None,
        uow: Optional[UnitOfWork] = None,
    ) -> list[Transaction]:
        """List a user's transactions with optional filters, newest first.

        Args:
            user_id: Owning user
            start_date: Optional start date filter
            end_date: Optional end date filter
            status: Optional status filter
            search: Optional case-insensitive text matched against description
                and reference
        """
        pass


class ImportBatchRepository(ABC):
    """CSV import batch storage."""

    @abstractmethod
    def create_import_batch(
        self, uow: UnitOfWork, user_id: str, filename: str, row_count: int, error_count: int
    ) -> int:
        """Create a batch in processing status. Returns batch ID."""
        pass

    @abstractmethod
    def get_import_batch(
        self, batch_id: int, uow: Optional[UnitOfWork] = None
    ) -> Optional[ImportBatch]:
        """Get batch by ID."""
        pass

    @abstractmethod
    def update_import_batch(
        self,
        uow: UnitOfWork,
        batch_id: int,
        status: ImportBatchStatus,
        success_count: Optional[int] = None,
        error_count: Optional[int] = None,
    ) -> None:
        """Update batch status and, when given, its counts."""
        pass


class Database(AccountRepository, RuleRepository, TransactionRepository, ImportBatchRepository):
    """Abstract database interface for smallbooks."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> UnitOfWork:
        """Open a new unit of work."""
        pass
