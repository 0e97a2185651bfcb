"""Posting confirmed bank statement rows to the ledger."""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Mapping, Sequence

from smallbooks.database.base import Database, UnitOfWork
from smallbooks.domain.entities import (
    AccountType,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from smallbooks.domain.errors import (
    MissingAccountSelection,
    NotFoundError,
    ValidationError,
    account_not_found,
    bank_account_not_found,
    missing_account_selection,
)
from smallbooks.domain.learning import LearningService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _to_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round an amount to the cent precision of ledger lines."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _to_amount(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
        if amount.is_finite():
            return round_to_cents(amount)
    except InvalidOperation:
        pass
    raise ValidationError(f"Invalid amount: {value}")


def build_lines(
    amount: Decimal, bank_account_id: int, account_id: int, description: str
) -> list[dict[str, Any]]:
    """Build the two balanced lines for a bank transaction.

    Outflows (amount < 0) debit the chosen account and credit the bank;
    inflows debit the bank and credit the chosen account.
    """
    value = abs(amount)
    if amount < 0:
        debit_account, credit_account = account_id, bank_account_id
    else:
        debit_account, credit_account = bank_account_id, account_id
    return [
        {"account_id": debit_account, "debit": value, "credit": Decimal("0"), "description": description},
        {"account_id": credit_account, "debit": Decimal("0"), "credit": value, "description": description},
    ]


class ImportCommitService:
    """Service for committing confirmed import rows as ledger transactions."""

    def __init__(self, db: Database):
        """Initialize import commit service.

        Args:
            db: Database instance
        """
        self.db = db
        self.learning_service = LearningService(db)

    def commit(
        self, confirmed_items: Sequence[Mapping[str, Any]], bank_account_id: int, user_id: str
    ) -> list[Transaction]:
        """Post confirmed items as balanced bank transactions, all or nothing.

        Amounts are rounded half up to cents before posting.

        Args:
            confirmed_items: Dicts with date, description, amount, reference
                and account_id, in the order they should be created
            bank_account_id: Asset account the statement belongs to
            user_id: Owning user

        Returns:
            Created transactions with their lines, in input order

        Raises:
            MissingAccountSelection: If an item has no account_id
            NotFoundError: If the bank account or a chosen account does not exist
                or an amount that rounds to zero cents
                or a zero amount
            PersistenceError: If the database rejects a write

        Nothing is written, and no rule is learned, when any item fails.
        """
        with self.db.unit_of_work() as uow:
            bank_account = self.db.get_account(bank_account_id, uow=uow)
            if bank_account is None or bank_account.type != AccountType.ASSET:
                raise NotFoundError(bank_account_not_found(bank_account_id))

            created_ids = [
                self._post_item(uow, item, bank_account_id, user_id) for item in confirmed_items
            ]
            created = [self.db.get_transaction(txn_id, uow=uow) for txn_id in created_ids]

        logger.info(
            "Committed %d transaction(s) to bank account %s for user %s",
            len(created),
            bank_account.code,
            user_id,
        )
        return created

    def _post_item(
        self, uow: UnitOfWork, item: Mapping[str, Any], bank_account_id: int, user_id: str
    ) -> int:
        description = (item.get("description") or "").strip()
        account_id = item.get("account_id")
        if not account_id:
            raise MissingAccountSelection(missing_account_selection(description))

        if self.db.get_account(account_id, uow=uow) is None:
            raise NotFoundError(account_not_found(account_id))
        if not description:
            raise ValidationError("Transaction description is required")

        amount = _to_amount(item.get("amount"))
        if amount == 0:
            raise ValidationError(f"Cannot post a zero amount for transaction: {description}")

        transaction_id = self.db.create_transaction(
            uow,
            date=_to_date(item.get("date")),
            description=description,
            reference=item.get("reference") or None,
            transaction_type=TransactionType.BANK,
            status=TransactionStatus.POSTED,
            user_id=user_id,
            lines=build_lines(amount, bank_account_id, account_id, description),
        )

        self.learning_service.learn(description, account_id, user_id, uow)
        return transaction_id
