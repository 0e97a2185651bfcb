"""Shared pytest fixtures for smallbooks tests."""

import tempfile
import os
from pathlib import Path
import pytest

from smallbooks.database.factories import create_sqlite_database
from smallbooks.domain.account import AccountService
from smallbooks.domain.categorization import CategorizationService
from smallbooks.domain.csv_import import CSVImportService
from smallbooks.domain.entities import AccountType
from smallbooks.domain.import_commit import ImportCommitService
from smallbooks.domain.learning import LearningService
from smallbooks.domain.ledger import LedgerService

USER = "user-1"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_id():
    """Owning user for ledger data in tests."""
    return USER


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def categorization_service(temp_db):
    """Create a CategorizationService with a temporary database."""
    return CategorizationService(temp_db)


@pytest.fixture
def learning_service(temp_db):
    """Create a LearningService with a temporary database."""
    return LearningService(temp_db)


@pytest.fixture
def commit_service(temp_db):
    """Create an ImportCommitService with a temporary database."""
    return ImportCommitService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a CSVImportService with a temporary database."""
    return CSVImportService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def accounts(account_service):
    """Create a small chart of accounts and return the entities by code."""
    chart = [
        ("1000", "Checking", AccountType.ASSET),
        ("2000", "Credit Card", AccountType.LIABILITY),
        ("4000", "Sales", AccountType.REVENUE),
        ("4100", "Consulting Income", AccountType.REVENUE),
        ("6100", "Rent", AccountType.EXPENSE),
        ("6300", "Meals", AccountType.EXPENSE),
        ("6500", "Software", AccountType.EXPENSE),
    ]
    for code, name, account_type in chart:
        account_service.create_account(code=code, name=name, account_type=account_type)
    return {acc.code: acc for acc in account_service.list_accounts()}


@pytest.fixture
def bank(accounts):
    """The checking account statements are imported into."""
    return accounts["1000"]


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
