"""Tests for the upload and import workflow."""

from decimal import Decimal

import pytest

from smallbooks.domain.csv_import import CSVImportService
from smallbooks.domain.entities import ImportBatchStatus
from smallbooks.domain.errors import NotFoundError, ValidationError


def _read(fixtures_dir, name):
    return (fixtures_dir / name).read_bytes()


def _confirm_suggestions(upload):
    return [
        {**row, "account_id": row["suggested_account_id"]} for row in upload["transactions"]
    ]


def test_upload(import_service, bank, accounts, user_id, fixtures_dir):
    """Upload returns suggestions for every row and opens a batch."""
    result = import_service.upload(
        _read(fixtures_dir, "statement.csv"), "statement.csv", bank.id, user_id
    )

    assert result["summary"] == {"total": 4, "errors": 0}
    assert result["errors"] == []
    assert len(result["transactions"]) == 4

    first = result["transactions"][0]
    assert first["line_number"] == 2
    assert first["date"] == "2024-01-15"
    assert first["description"] == "Coffee Shop"
    assert first["amount"] == Decimal("-42.50")
    assert first["reference"] == "REF001"
    assert first["suggested_account_id"] == accounts["6100"].id
    assert first["suggested_account_name"] == "Rent"
    assert first["confidence"] == 0.3
    assert first["reason"] == "Default suggestion based on transaction type"
    assert result["transactions"][1]["suggested_account_id"] == accounts["4000"].id

    batch = import_service.get_batch(result["batch_id"])
    assert batch.status == ImportBatchStatus.PROCESSING
    assert batch.filename == "statement.csv"
    assert batch.row_count == 4
    assert batch.error_count == 0
    assert batch.user_id == user_id


def test_upload_reports_row_errors(import_service, bank, user_id, fixtures_dir):
    """Malformed rows are listed alongside the good ones."""
    result = import_service.upload(
        _read(fixtures_dir, "statement_with_errors.csv"), "errors.csv", bank.id, user_id
    )

    assert result["summary"] == {"total": 8, "errors": 2}
    assert [e["line"] for e in result["errors"]] == [5, 8]
    assert result["errors"][1]["data"]["payee"] == "Office Depot"
    assert import_service.get_batch(result["batch_id"]).error_count == 2


def test_upload_empty_file(import_service, bank, user_id):
    """An empty upload is rejected."""
    with pytest.raises(ValidationError):
        import_service.upload(b"", "empty.csv", bank.id, user_id)


def test_upload_size_limit(temp_db, bank, user_id, fixtures_dir):
    """Files above the configured limit are rejected before parsing."""
    service = CSVImportService(temp_db, max_file_size=64)

    with pytest.raises(ValidationError) as exc_info:
        service.upload(_read(fixtures_dir, "statement.csv"), "statement.csv", bank.id, user_id)

    assert "limit is 64 bytes" in str(exc_info.value)


def test_upload_requires_asset_bank(import_service, accounts, user_id, fixtures_dir):
    """The statement must belong to an asset account."""
    with pytest.raises(NotFoundError):
        import_service.upload(
            _read(fixtures_dir, "statement.csv"), "statement.csv", accounts["4000"].id, user_id
        )


def test_import_completes_batch(import_service, ledger_service, bank, user_id, fixtures_dir):
    """Importing confirmed rows posts them and completes the batch."""
    upload = import_service.upload(
        _read(fixtures_dir, "statement.csv"), "statement.csv", bank.id, user_id
    )

    result = import_service.import_transactions(
        bank.id, user_id, _confirm_suggestions(upload), batch_id=upload["batch_id"]
    )

    assert result["count"] == 4
    assert len(ledger_service.list_transactions(user_id)) == 4
    batch = import_service.get_batch(upload["batch_id"])
    assert batch.status == ImportBatchStatus.COMPLETED
    assert batch.success_count == 4
    assert batch.error_count == 0


def test_import_skips_unselected_rows(import_service, bank, user_id, fixtures_dir):
    """Rows without an account are skipped and counted on the batch."""
    upload = import_service.upload(
        _read(fixtures_dir, "statement.csv"), "statement.csv", bank.id, user_id
    )
    rows = _confirm_suggestions(upload)
    rows[0]["account_id"] = None

    result = import_service.import_transactions(bank.id, user_id, rows, batch_id=upload["batch_id"])

    assert result["count"] == 3
    assert [t.description for t in result["transactions"]] == [
        "Client Payment ACME",
        "Office Rent January",
        "Github Subscription",
    ]
    batch = import_service.get_batch(upload["batch_id"])
    assert batch.success_count == 3
    assert batch.error_count == 1


def test_import_nothing_selected(import_service, bank, user_id, fixtures_dir):
    """Importing with no selected rows fails the batch."""
    upload = import_service.upload(
        _read(fixtures_dir, "statement.csv"), "statement.csv", bank.id, user_id
    )
    rows = [{**row, "account_id": None} for row in upload["transactions"]]

    with pytest.raises(ValidationError, match="No transactions to import"):
        import_service.import_transactions(bank.id, user_id, rows, batch_id=upload["batch_id"])

    assert import_service.get_batch(upload["batch_id"]).status == ImportBatchStatus.FAILED


def test_import_failure_writes_nothing(
    import_service, ledger_service, bank, user_id, fixtures_dir
):
    """A bad row fails the batch and leaves the ledger untouched."""
    upload = import_service.upload(
        _read(fixtures_dir, "statement.csv"), "statement.csv", bank.id, user_id
    )
    rows = _confirm_suggestions(upload)
    rows[2]["account_id"] = 99999

    with pytest.raises(NotFoundError):
        import_service.import_transactions(bank.id, user_id, rows, batch_id=upload["batch_id"])

    assert ledger_service.list_transactions(user_id) == []
    assert import_service.get_batch(upload["batch_id"]).status == ImportBatchStatus.FAILED


def test_import_without_batch(import_service, bank, accounts, user_id):
    """A batch is optional when importing."""
    rows = [
        {
            "date": "2024-03-01",
            "description": "Hosting",
            "amount": "-10.00",
            "account_id": accounts["6500"].id,
        }
    ]

    assert import_service.import_transactions(bank.id, user_id, rows)["count"] == 1


def test_second_upload_uses_learned_rules(import_service, bank, accounts, user_id, fixtures_dir):
    """Choices confirmed in one import drive the next upload's suggestions."""
    data = _read(fixtures_dir, "statement.csv")
    upload = import_service.upload(data, "statement.csv", bank.id, user_id)
    rows = _confirm_suggestions(upload)
    rows[0]["account_id"] = accounts["6300"].id
    import_service.import_transactions(bank.id, user_id, rows, batch_id=upload["batch_id"])

    again = import_service.upload(data, "statement.csv", bank.id, user_id)

    coffee = again["transactions"][0]
    assert coffee["suggested_account_id"] == accounts["6300"].id
    assert coffee["confidence"] == 0.7
    assert coffee["reason"] == "Based on 1 similar transaction"
    assert again["batch_id"] != upload["batch_id"]


def test_completed_batch_keeps_row_errors(import_service, bank, user_id, fixtures_dir):
    """Skipped rows are added to the row errors counted at upload."""
    upload = import_service.upload(
        _read(fixtures_dir, "statement_with_errors.csv"), "errors.csv", bank.id, user_id
    )
    rows = _confirm_suggestions(upload)
    rows[0]["account_id"] = None

    import_service.import_transactions(bank.id, user_id, rows, batch_id=upload["batch_id"])

    batch = import_service.get_batch(upload["batch_id"])
    assert batch.status == ImportBatchStatus.COMPLETED
    assert batch.success_count == 7
    assert batch.error_count == 3


@pytest.fixture
def failing_batch_updates(temp_db, monkeypatch):
    """Make every batch status update fail."""

    def fail(*args, **kwargs):
        raise RuntimeError("batch table unavailable")

    monkeypatch.setattr(temp_db, "update_import_batch", fail)


def test_batch_update_failure_keeps_result(
    import_service, bank, user_id, fixtures_dir, failing_batch_updates
):
    """A failed status update does not change a successful import."""
    upload = import_service.upload(
        _read(fixtures_dir, "statement.csv"), "statement.csv", bank.id, user_id
    )

    result = import_service.import_transactions(
        bank.id, user_id, _confirm_suggestions(upload), batch_id=upload["batch_id"]
    )

    assert result["count"] == 4
    assert import_service.get_batch(upload["batch_id"]).status == ImportBatchStatus.PROCESSING


def test_batch_update_failure_keeps_error(
    import_service, ledger_service, bank, user_id, fixtures_dir, failing_batch_updates
):
    """A failed status update does not replace the import's own error."""
    upload = import_service.upload(
        _read(fixtures_dir, "statement.csv"), "statement.csv", bank.id, user_id
    )
    rows = _confirm_suggestions(upload)
    rows[1]["account_id"] = 99999

    with pytest.raises(NotFoundError):
        import_service.import_transactions(bank.id, user_id, rows, batch_id=upload["batch_id"])

    assert ledger_service.list_transactions(user_id) == []
