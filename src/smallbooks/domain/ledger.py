"""Ledger query service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from smallbooks.database.base import Database
from smallbooks.domain.entities import Transaction, TransactionStatus


def is_balanced(transaction: Transaction) -> bool:
    """Check double-entry balance.

    Debits must equal credits, and every line must carry exactly one
    strictly positive side.
    """
    if not transaction.lines:
        return False
    for line in transaction.lines:
        if line.debit < 0 or line.credit < 0:
            return False
        if (line.debit > 0) == (line.credit > 0):
            return False
    total_debit = sum((line.debit for line in transaction.lines), Decimal("0"))
    total_credit = sum((line.credit for line in transaction.lines), Decimal("0"))
    return total_debit == total_credit


class LedgerService:
    """Service for reading posted ledger transactions."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction with its lines, or None if not found."""
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[TransactionStatus] = None,
        search: Optional[str] = None,
    ) -> list[Transaction]:
        """List a user's transactions, newest first.

        Args:
            user_id: Owning user
            start_date: Optional start date filter
            end_date: Optional end date filter
            status: Optional status filter
            search: Optional text matched against description and reference

        Returns:
            List of transactions with lines
        """
        return self.db.list_transactions(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            status=status,
            search=search,
        )
