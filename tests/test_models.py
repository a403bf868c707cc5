"""Tests for value objects, record conversion and date helpers."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from debtpilot.dates import add_months, format_currency, require_finite, to_date
from debtpilot.exceptions import DebtPilotError, InvalidDateError
from debtpilot.models import (
    Debt,
    DebtStatus,
    StoredTransaction,
    Transaction,
    TransactionType,
)


class TestDebtFromRecord:
    def test_camel_case_record(self):
        debt = Debt.from_record(
            {
                "id": 7,
                "name": "Car",
                "remainingAmount": "12000",
                "installmentValue": 450,
                "interestRate": 9.5,
                "totalInstallments": 48,
                "paidInstallments": 20,
                "status": "ACTIVE",
            }
        )

        assert debt == Debt(
            remaining_amount=12000.0,
            installment_value=450.0,
            interest_rate=9.5,
            name="Car",
            total_installments=48,
            paid_installments=20,
            status=DebtStatus.ACTIVE,
            id="7",
        )

    def test_balance_aliases_and_inferred_status(self):
        paid = Debt.from_record({"name": "Old", "balance": 0, "minimum_payment": 10, "apr": None})

        assert paid.status == DebtStatus.PAID
        assert paid.interest_rate == 0.0
        assert not paid.is_active

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValueError):
            Debt.from_record({"balance": 10, "minimum_payment": 1, "status": "frozen"})


class TestTransaction:
    def test_from_signed_record(self):
        txn = Transaction.from_record({"date": "2024-06-01T10:00:00", "memo": "Refund", "amount": 15})

        assert txn.date == date(2024, 6, 1)
        assert txn.type == TransactionType.INCOME
        assert txn.description == "Refund"
        assert txn.amount == 15

    def test_explicit_type_wins_over_sign(self):
        txn = Transaction.from_record(
            {"occurred_at": datetime(2024, 6, 2, 8, 30), "title": "Rent", "amount": 900},
            type="expense",
        )

        assert txn.type == TransactionType.EXPENSE
        assert txn.amount == 900

    def test_tagged_returns_copy(self):
        txn = Transaction(date(2024, 6, 1), "Coffee", 4.5, TransactionType.EXPENSE)

        flagged = txn.tagged(True)

        assert flagged.is_duplicate is True
        assert txn.is_duplicate is None
        assert flagged == Transaction(
            date(2024, 6, 1), "Coffee", 4.5, TransactionType.EXPENSE, is_duplicate=True
        )

    def test_stored_transaction_conversion(self):
        txn = Transaction(date(2024, 6, 1), "Coffee", 4.5, TransactionType.EXPENSE, id="FIT-1")

        row = StoredTransaction.from_transaction("user-1", txn)

        assert row.kind == "expense"
        assert row.external_id == "FIT-1"
        assert row.to_transaction() == txn


class TestDates:
    def test_to_date_accepts_timestamp_wrappers(self):
        class FirestoreLikeTimestamp:
            def toDate(self):
                return datetime(2024, 6, 15, 23, 59)

        assert to_date(FirestoreLikeTimestamp()) == date(2024, 6, 15)
        assert to_date("2024-06-15") == date(2024, 6, 15)

    @pytest.mark.parametrize("value", [None, "", "15 June", 12345])
    def test_to_date_rejects_garbage(self, value):
        with pytest.raises(InvalidDateError):
            to_date(value)

    def test_invalid_date_error_hierarchy(self):
        assert issubclass(InvalidDateError, DebtPilotError)
        assert issubclass(InvalidDateError, ValueError)

    def test_add_months_across_year(self):
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
        assert add_months(date(2024, 6, 15), 0) == date(2024, 6, 15)

    def test_require_finite(self):
        assert require_finite("balance", "12.5") == 12.5
        with pytest.raises(ValueError, match="balance"):
            require_finite("balance", float("nan"))
        with pytest.raises(ValueError, match="balance"):
            require_finite("balance", "abc")

    def test_format_currency(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(-3) == "-$3.00"
        assert format_currency(10, symbol="R$") == "R$10.00"
