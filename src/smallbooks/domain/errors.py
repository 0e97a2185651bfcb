"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class PersistenceError(DomainError):
    """A repository read or write failed."""


class RowError(ValidationError):
    """A single CSV row could not be turned into a transaction candidate."""


class MissingRequiredField(RowError):
    """A required column resolved to an empty value."""


class InvalidAmount(RowError):
    """An amount value is not a number."""


class InvalidDate(RowError):
    """A date value could not be parsed."""


class CSVStreamError(DomainError):
    """The CSV file as a whole could not be read."""


class CommitError(DomainError):
    """Confirmed import items could not be committed to the ledger."""


class MissingAccountSelection(CommitError):
    """A confirmed item has no ledger account chosen."""


def account_not_found(account_id: int | str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def bank_account_not_found(account_id: int) -> str:
    """Return message for a missing or non-asset bank account."""
    return f"Bank account {account_id} not found"


def duplicate_account_code(code: str) -> str:
    """Return message for duplicate account code."""
    return f"Account with code '{code}' already exists"


def missing_account_selection(description: str) -> str:
    """Return message for a confirmed item without an account."""
    return f"No account selected for transaction: {description}"
