"""Account domain service."""

from typing import Optional

from smallbooks.database.base import Database
from smallbooks.domain.entities import Account as AccountEntity, AccountType
from smallbooks.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_account_code,
)

# Default small-business chart of accounts: (code, name, type)
DEFAULT_CHART = [
    ("1000", "Checking Account", AccountType.ASSET),
    ("1010", "Savings Account", AccountType.ASSET),
    ("1200", "Accounts Receivable", AccountType.ASSET),
    ("2000", "Accounts Payable", AccountType.LIABILITY),
    ("2100", "Credit Card Payable", AccountType.LIABILITY),
    ("3000", "Owner's Equity", AccountType.EQUITY),
    ("4000", "Sales Revenue", AccountType.REVENUE),
    ("4100", "Service Revenue", AccountType.REVENUE),
    ("4900", "Other Income", AccountType.REVENUE),
    ("5000", "Cost of Goods Sold", AccountType.EXPENSE),
    ("6000", "Office Supplies", AccountType.EXPENSE),
    ("6100", "Rent", AccountType.EXPENSE),
    ("6200", "Utilities", AccountType.EXPENSE),
    ("6300", "Meals & Entertainment", AccountType.EXPENSE),
    ("6400", "Travel", AccountType.EXPENSE),
    ("6500", "Software & Subscriptions", AccountType.EXPENSE),
    ("6900", "Bank Fees", AccountType.EXPENSE),
]


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self, code: str, name: str, account_type: AccountType | str, is_active: bool = True
    ) -> int:
        """Create a new account.

        The normal balance is derived from the type: asset and expense
        accounts are debit-normal, all others credit-normal.

        Args:
            code: Unique chart code, e.g. "6100"
            name: Account name
            account_type: Account type
            is_active: Whether the account can receive suggestions

        Returns:
            Account ID

        Raises:
            ValidationError: If code or name is empty or the type is unknown
            ConflictError: If an account with the same code exists
        """
        code = code.strip()
        name = name.strip()
        if not code or not name:
            raise ValidationError("Account code and name are required")

        try:
            account_type = AccountType(account_type)
        except ValueError:
            valid = ", ".join(t.value for t in AccountType)
            raise ValidationError(f"Invalid account type '{account_type}'. Must be one of: {valid}")

        if self.db.get_account_by_code(code) is not None:
            raise ConflictError(duplicate_account_code(code))

        with self.db.unit_of_work() as uow:
            return self.db.create_account(
                uow,
                code=code,
                name=name,
                account_type=account_type,
                normal_balance=account_type.normal_balance,
                is_active=is_active,
            )

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def get_account_by_code(self, code: str) -> Optional[AccountEntity]:
        """Get account by chart code."""
        return self.db.get_account_by_code(code)

    def list_accounts(self, account_type: Optional[AccountType] = None) -> list[AccountEntity]:
        """List accounts ordered by code.

        Args:
            account_type: Optional type to filter by

        Returns:
            List of account entities
        """
        return self.db.list_accounts(account_type=account_type)

    def resolve_account(self, account: str | int) -> AccountEntity:
        """Resolve an account code or ID to an account.

        Codes take precedence over IDs, since chart codes are numeric too.

        Raises:
            NotFoundError: If no account matches
        """
        found = self.db.get_account_by_code(str(account).strip())
        if found is not None:
            return found

        try:
            account_id = int(account)
        except (ValueError, TypeError):
            raise NotFoundError(account_not_found(account))

        found = self.db.get_account(account_id)
        if found is None:
            raise NotFoundError(account_not_found(account))
        return found

    def create_default_chart(self) -> int:
        """Create the accounts of DEFAULT_CHART that do not exist yet.

        Returns:
            Number of accounts created
        """
        created = 0
        for code, name, account_type in DEFAULT_CHART:
            if self.db.get_account_by_code(code) is None:
                self.create_account(code=code, name=name, account_type=account_type)
                created += 1
        return created
