"""CSV import domain service.

Two steps, matching how a user imports a statement: ``upload`` parses the
file and returns account suggestions for review, ``import_transactions``
posts the rows the user confirmed. Each upload is tracked as an ImportBatch.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from smallbooks.database.base import Database
from smallbooks.domain.categorization import CategorizationService
from smallbooks.domain.csv_ingest import DEFAULT_MAX_FILE_SIZE, parse_csv
from smallbooks.domain.entities import (
    Account,
    AccountType,
    ImportBatch,
    ImportBatchStatus,
)
from smallbooks.domain.errors import NotFoundError, ValidationError, bank_account_not_found
from smallbooks.domain.import_commit import ImportCommitService

logger = logging.getLogger(__name__)


class CSVImportService:
    """Service for importing bank statement CSV files."""

    def __init__(self, db: Database, max_file_size: int = DEFAULT_MAX_FILE_SIZE):
        """Initialize CSV import service.

        Args:
            db: Database instance
            max_file_size: Largest accepted upload, in bytes
        """
        self.db = db
        self.max_file_size = max_file_size
        self.categorization_service = CategorizationService(db)
        self.commit_service = ImportCommitService(db)

    def _get_bank_account(self, bank_account_id: int) -> Account:
        account = self.db.get_account(bank_account_id)
        if account is None or account.type != AccountType.ASSET:
            raise NotFoundError(bank_account_not_found(bank_account_id))
        return account

    def upload(
        self,
        file_bytes: bytes,
        filename: str,
        bank_account_id: int,
        user_id: str,
        dayfirst: bool = False,
    ) -> dict[str, Any]:
        """Parse a statement file and suggest an account for every row.

        Args:
            file_bytes: Raw CSV file contents
            filename: Original file name
            bank_account_id: Asset account the statement belongs to
            user_id: Owning user
            dayfirst: Read ambiguous dates as day first

        Returns:
            Dict with:
            - batch_id: ID of the ImportBatch created for this upload
            - transactions: candidate dicts with suggested_account_id,
              suggested_account_name, confidence and reason
            - errors: list of {"line", "error", "data"} for unparseable rows
            - summary: {"total", "errors"}

        Raises:
            NotFoundError: If the bank account does not exist or is not an asset
            ValidationError: If the file is empty or larger than the limit
            CSVStreamError: If the file cannot be read as CSV
        """
        self._get_bank_account(bank_account_id)

        if not file_bytes:
            raise ValidationError("No file uploaded")
        if len(file_bytes) > self.max_file_size:
            raise ValidationError(
                f"File '{filename}' is {len(file_bytes)} bytes; "
                f"the limit is {self.max_file_size} bytes"
            )

        result = parse_csv(file_bytes, filename, dayfirst=dayfirst)

        transactions = []
        for candidate, suggestion in self.categorization_service.suggest_all(
            result.candidates, user_id, bank_account_id
        ):
            transactions.append(
                {
                    **candidate.to_dict(),
                    "suggested_account_id": suggestion.account_id,
                    "suggested_account_name": suggestion.account_name,
                    "confidence": suggestion.confidence,
                    "reason": suggestion.reason,
                }
            )

        with self.db.unit_of_work() as uow:
            batch_id = self.db.create_import_batch(
                uow,
                user_id=user_id,
                filename=filename,
                row_count=len(result.candidates),
                error_count=len(result.errors),
            )

        logger.info(
            "Upload %s (batch %s): %d transaction(s), %d error(s)",
            filename,
            batch_id,
            len(transactions),
            len(result.errors),
        )

        return {
            "batch_id": batch_id,
            "transactions": transactions,
            "errors": [
                {"line": error.line, "error": error.error, "data": error.data}
                for error in result.errors
            ],
            "summary": {
                "total": len(result.candidates),
                "errors": len(result.errors),
            },
        }

    def import_transactions(
        self,
        bank_account_id: int,
        user_id: str,
        transactions: Sequence[Mapping[str, Any]],
        batch_id: Optional[int] = None,
    ) -> dict[str, Any]:
        """Post the confirmed rows of an upload.

        Rows without an account_id are treated as skipped by the user.

        Args:
            bank_account_id: Asset account the statement belongs to
            user_id: Owning user
            transactions: Dicts with date, description, amount, reference
                and account_id
            batch_id: Optional ImportBatch to mark completed or failed

        Returns:
            Dict with:
            - count: number of transactions created
            - transactions: the created Transaction entities

        Raises:
            ValidationError: If no row has an account selected
            NotFoundError: If the bank account or a chosen account does not exist
            CommitError, PersistenceError: If posting fails; nothing is written
        """
        try:
            self._get_bank_account(bank_account_id)

            to_import = [item for item in transactions if item.get("account_id")]
            if not to_import:
                raise ValidationError("No transactions to import")

            created = self.commit_service.commit(to_import, bank_account_id, user_id)
        except Exception:
            if batch_id is not None:
                self._update_batch_status(batch_id, ImportBatchStatus.FAILED)
            raise

        if batch_id is not None:
            self._update_batch_status(
                batch_id,
                ImportBatchStatus.COMPLETED,
                success_count=len(created),
                skipped_count=len(transactions) - len(created),
            )

        return {"count": len(created), "transactions": created}

    def get_batch(self, batch_id: int) -> Optional[ImportBatch]:
        """Get an import batch by ID."""
        return self.db.get_import_batch(batch_id)

    def _update_batch_status(
        self,
        batch_id: int,
        status: ImportBatchStatus,
        success_count: Optional[int] = None,
        skipped_count: int = 0,
    ) -> None:
        """Record the outcome of a commit on its batch.

        Skipped rows are added to the row errors counted at upload.

        Failures here are logged, never raised: the batch record must not
        change the outcome of the import itself.
        """
        try:
            with self.db.unit_of_work() as uow:
                batch = self.db.get_import_batch(batch_id, uow=uow)
                error_count = None
                if batch is not None and skipped_count:
                    error_count = batch.error_count + skipped_count
                self.db.update_import_batch(
                    uow,
                    batch_id=batch_id,
                    status=status,
                    success_count=success_count,
                    error_count=error_count,
                )
        except Exception:
            logger.exception("Could not mark import batch %s as %s", batch_id, status.value)
