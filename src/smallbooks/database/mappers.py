"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the import pipeline only ever
sees frozen domain entities.
"""

from decimal import Decimal

from smallbooks.domain import entities as domain
from smallbooks.database.models import (
    Account as ORMAccount,
    Transaction as ORMTransaction,
    TransactionLine as ORMTransactionLine,
    CategorizationRule as ORMCategorizationRule,
    ImportBatch as ORMImportBatch,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        code=orm_account.code,
        name=orm_account.name,
        type=domain.AccountType(orm_account.type),
        normal_balance=domain.NormalBalance(orm_account.normal_balance),
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
    )


def transaction_line_to_domain(orm_line: ORMTransactionLine) -> domain.TransactionLine:
    """Convert SQLAlchemy TransactionLine model to domain TransactionLine entity."""
    return domain.TransactionLine(
        id=orm_line.id,
        transaction_id=orm_line.transaction_id,
        account_id=orm_line.account_id,
        debit=Decimal(orm_line.debit or 0),
        credit=Decimal(orm_line.credit or 0),
        description=orm_line.description,
        category_id=orm_line.category_id,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model (with lines) to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        reference=orm_transaction.reference,
        type=domain.TransactionType(orm_transaction.type),
        status=domain.TransactionStatus(orm_transaction.status),
        user_id=orm_transaction.user_id,
        notes=orm_transaction.notes,
        created_at=orm_transaction.created_at,
        lines=tuple(transaction_line_to_domain(line) for line in orm_transaction.lines),
    )


def rule_to_domain(orm_rule: ORMCategorizationRule) -> domain.CategorizationRule:
    """Convert SQLAlchemy CategorizationRule model to domain CategorizationRule entity."""
    return domain.CategorizationRule(
        id=orm_rule.id,
        user_id=orm_rule.user_id,
        pattern=orm_rule.pattern,
        account_id=orm_rule.account_id,
        confidence=Decimal(orm_rule.confidence),
        match_count=orm_rule.match_count,
        last_matched=orm_rule.last_matched,
    )


def import_batch_to_domain(orm_batch: ORMImportBatch) -> domain.ImportBatch:
    """Convert SQLAlchemy ImportBatch model to domain ImportBatch entity."""
    return domain.ImportBatch(
        id=orm_batch.id,
        user_id=orm_batch.user_id,
        filename=orm_batch.filename,
        row_count=orm_batch.row_count,
        success_count=orm_batch.success_count,
        error_count=orm_batch.error_count,
        status=domain.ImportBatchStatus(orm_batch.status),
        created_at=orm_batch.created_at,
    )
