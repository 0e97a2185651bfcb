"""Tests for committing confirmed import rows."""

from datetime import date
from decimal import Decimal

import pytest

from smallbooks.domain.entities import TransactionStatus, TransactionType
from smallbooks.domain.errors import (
    CommitError,
    MissingAccountSelection,
    NotFoundError,
    ValidationError,
)
from smallbooks.domain.import_commit import build_lines
from smallbooks.domain.ledger import is_balanced


def _item(description, amount, account_id, day=15, reference=""):
    return {
        "date": date(2024, 1, day),
        "description": description,
        "amount": Decimal(amount),
        "reference": reference,
        "account_id": account_id,
    }


def test_build_lines_outflow():
    """An outflow debits the chosen account and credits the bank."""
    lines = build_lines(Decimal("-42.50"), bank_account_id=1, account_id=7, description="Coffee")

    assert [(l["account_id"], l["debit"], l["credit"]) for l in lines] == [
        (7, Decimal("42.50"), Decimal("0")),
        (1, Decimal("0"), Decimal("42.50")),
    ]


def test_build_lines_inflow():
    """An inflow debits the bank and credits the chosen account."""
    lines = build_lines(Decimal("300"), bank_account_id=1, account_id=4, description="Deposit")

    assert [(l["account_id"], l["debit"], l["credit"]) for l in lines] == [
        (1, Decimal("300"), Decimal("0")),
        (4, Decimal("0"), Decimal("300")),
    ]


def test_commit_outflow(commit_service, ledger_service, bank, accounts, user_id):
    """A confirmed outflow becomes a balanced, posted bank transaction."""
    meals = accounts["6300"]

    created = commit_service.commit(
        [_item("Coffee Shop", "-42.50", meals.id, reference="REF001")], bank.id, user_id
    )

    assert len(created) == 1
    txn = ledger_service.get_transaction(created[0].id)
    assert txn.id == created[0].id
    assert txn.date == date(2024, 1, 15)
    assert txn.description == "Coffee Shop"
    assert txn.reference == "REF001"
    assert txn.type == TransactionType.BANK
    assert txn.status == TransactionStatus.POSTED
    assert txn.user_id == user_id
    assert is_balanced(txn)

    by_account = {line.account_id: line for line in txn.lines}
    assert by_account[meals.id].debit == Decimal("42.50")
    assert by_account[meals.id].credit == Decimal("0")
    assert by_account[bank.id].debit == Decimal("0")
    assert by_account[bank.id].credit == Decimal("42.50")


def test_commit_inflow(commit_service, bank, accounts, user_id):
    """A confirmed inflow debits the bank."""
    sales = accounts["4000"]

    (txn,) = commit_service.commit([_item("Client Payment", "1250.00", sales.id)], bank.id, user_id)

    by_account = {line.account_id: line for line in txn.lines}
    assert by_account[bank.id].debit == Decimal("1250.00")
    assert by_account[sales.id].credit == Decimal("1250.00")
    assert txn.reference is None


def test_commit_preserves_order(commit_service, bank, accounts, user_id):
    """Transactions are created and returned in input order."""
    items = [
        _item("First", "-1.00", accounts["6100"].id, day=3),
        _item("Second", "-2.00", accounts["6300"].id, day=1),
        _item("Third", "3.00", accounts["4000"].id, day=2),
    ]

    created = commit_service.commit(items, bank.id, user_id)

    assert [t.description for t in created] == ["First", "Second", "Third"]
    assert created[0].id < created[1].id < created[2].id
    assert all(is_balanced(t) for t in created)


def test_commit_accepts_serialized_items(commit_service, bank, accounts, user_id):
    """Dates and amounts may arrive as strings from an upload round trip."""
    item = {
        "date": "2024-01-20",
        "description": "  Github Subscription ",
        "amount": "-21.00",
        "account_id": accounts["6500"].id,
    }

    (txn,) = commit_service.commit([item], bank.id, user_id)

    assert txn.date == date(2024, 1, 20)
    assert txn.description == "Github Subscription"


def test_commit_learns_rules(commit_service, learning_service, bank, accounts, user_id):
    """Each committed item reinforces the rule for its description."""
    meals = accounts["6300"].id
    commit_service.commit([_item("Coffee Shop", "-4.00", meals)], bank.id, user_id)
    commit_service.commit([_item("COFFEE SHOP", "-5.00", meals)], bank.id, user_id)

    rules = learning_service.list_rules(user_id)
    assert len(rules) == 1
    assert rules[0].pattern == "coffee shop"
    assert rules[0].match_count == 2
    assert rules[0].confidence == Decimal("0.75")


def test_missing_account_rolls_back_everything(
    commit_service, learning_service, ledger_service, bank, accounts, user_id
):
    """When one item has no account, no transaction or rule is written."""
    items = [
        _item("Coffee Shop", "-4.00", accounts["6300"].id),
        _item("Unknown Vendor", "-9.00", None),
        _item("Rent", "-1500.00", accounts["6100"].id),
    ]

    with pytest.raises(MissingAccountSelection) as exc_info:
        commit_service.commit(items, bank.id, user_id)

    assert "Unknown Vendor" in str(exc_info.value)
    assert isinstance(exc_info.value, CommitError)
    assert ledger_service.list_transactions(user_id) == []
    assert learning_service.list_rules(user_id) == []


def test_unknown_account_rolls_back(
    commit_service, learning_service, ledger_service, bank, accounts, user_id
):
    """A chosen account that does not exist aborts the whole commit."""
    items = [
        _item("Coffee Shop", "-4.00", accounts["6300"].id),
        _item("Mystery", "-9.00", 99999),
    ]

    with pytest.raises(NotFoundError):
        commit_service.commit(items, bank.id, user_id)

    assert ledger_service.list_transactions(user_id) == []
    assert learning_service.list_rules(user_id) == []


def test_zero_amount_rejected(commit_service, ledger_service, bank, accounts, user_id):
    """A zero amount cannot produce valid lines."""
    with pytest.raises(ValidationError):
        commit_service.commit([_item("Bank Fee", "0.00", accounts["6100"].id)], bank.id, user_id)

    assert ledger_service.list_transactions(user_id) == []


def test_empty_description_rejected(commit_service, bank, accounts, user_id):
    """An item needs a description."""
    with pytest.raises(ValidationError):
        commit_service.commit([_item("  ", "-1.00", accounts["6100"].id)], bank.id, user_id)


def test_invalid_amount_rejected(commit_service, bank, accounts, user_id):
    """A non-numeric amount is a validation error."""
    item = _item("Coffee", "-1.00", accounts["6300"].id)
    item["amount"] = "lots"

    with pytest.raises(ValidationError):
        commit_service.commit([item], bank.id, user_id)


def test_bank_account_must_be_asset(commit_service, accounts, user_id):
    """Statements can only be committed to an asset account."""
    with pytest.raises(NotFoundError) as exc_info:
        commit_service.commit(
            [_item("Coffee", "-1.00", accounts["6300"].id)], accounts["2000"].id, user_id
        )

    assert str(exc_info.value) == f"Bank account {accounts['2000'].id} not found"


def test_unknown_bank_account(commit_service, accounts, user_id):
    """A bank account that does not exist is reported."""
    with pytest.raises(NotFoundError):
        commit_service.commit([_item("Coffee", "-1.00", accounts["6300"].id)], 99999, user_id)


def test_empty_commit(commit_service, bank, user_id):
    """Committing nothing creates nothing."""
    assert commit_service.commit([], bank.id, user_id) == []


def test_sub_cent_amount_rejected(commit_service, ledger_service, bank, accounts, user_id):
    """An amount that rounds to zero cents cannot be posted."""
    with pytest.raises(ValidationError):
        commit_service.commit([_item("Rounding", "-0.004", accounts["6100"].id)], bank.id, user_id)

    assert ledger_service.list_transactions(user_id) == []


def test_amount_rounded_to_cents(commit_service, ledger_service, bank, accounts, user_id):
    """Extra precision is rounded half up so both lines carry the stored value."""
    (created,) = commit_service.commit(
        [_item("Fuel", "-12.345", accounts["6100"].id)], bank.id, user_id
    )

    txn = ledger_service.get_transaction(created.id)
    assert sorted((l.debit, l.credit) for l in txn.lines) == [
        (Decimal("0"), Decimal("12.35")),
        (Decimal("12.35"), Decimal("0")),
    ]
    assert [(l.debit, l.credit) for l in created.lines] == [(l.debit, l.credit) for l in txn.lines]
    assert is_balanced(txn)
