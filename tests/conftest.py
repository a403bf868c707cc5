"""Pytest configuration and shared fixtures for DebtPilot tests.

This module provides database fixtures, test data factories, and helper utilities
for testing the payoff engine, duplicate detection and the import flow without
touching a real application database.
"""

from __future__ import annotations

import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from debtpilot.infra.database import create_session_factory
from debtpilot.infra.transaction_store import SQLModelTransactionStore
from debtpilot.models import Debt, DebtStatus, StoredTransaction, Transaction, TransactionType

TODAY = date(2024, 6, 15)


@pytest.fixture(autouse=True)
def _isolated_data_dir(tmp_path, monkeypatch):
    """Keep configs from creating ./instance while tests run."""
    monkeypatch.setenv("DEBTPILOT_DATA_DIR", str(tmp_path / "instance"))
    monkeypatch.delenv("DEBTPILOT_DATABASE_URL", raising=False)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    A file (rather than :memory:) lets worker threads used by the async
    detector see the same data.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False}
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for a single test."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory as used by SQLModelTransactionStore."""
    return create_session_factory(db_engine)


@pytest.fixture
def transaction_store(session_factory) -> SQLModelTransactionStore:
    return SQLModelTransactionStore(session_factory)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def debt_factory():
    """Factory for creating Debt value objects with sensible defaults."""

    def _create_debt(
        remaining_amount: float = 1000.00,
        installment_value: float = 100.00,
        interest_rate: float = 12.0,
        name: str = "Test Debt",
        status: DebtStatus = DebtStatus.ACTIVE,
    ) -> Debt:
        return Debt(
            remaining_amount=remaining_amount,
            installment_value=installment_value,
            interest_rate=interest_rate,
            name=name,
            status=status,
        )

    return _create_debt


@pytest.fixture
def transaction_factory():
    """Factory for creating Transaction value objects.

    ``days_ago`` is relative to the fixed TODAY used across the suite.
    """

    def _create_transaction(
        description: str = "Grocery store",
        amount: float = 50.00,
        type: TransactionType = TransactionType.EXPENSE,
        days_ago: int = 0,
        id: str | None = None,
    ) -> Transaction:
        return Transaction(
            date=TODAY - timedelta(days=days_ago),
            description=description,
            amount=amount,
            type=type,
            id=id,
        )

    return _create_transaction


@pytest.fixture
def stored_transaction_factory(db_session):
    """Factory for persisting transactions directly through the session."""

    def _create(
        description: str = "Grocery store",
        amount: float = 50.00,
        kind: str = "expense",
        days_ago: int = 0,
        user_id: str = "user-1",
    ) -> StoredTransaction:
        row = StoredTransaction(
            user_id=user_id,
            occurred_on=TODAY - timedelta(days=days_ago),
            description=description,
            amount=amount,
            kind=kind,
        )
        db_session.add(row)
        db_session.commit()
        db_session.refresh(row)
        return row

    return _create


class StaticStore:
    """In-memory store returning a fixed window and recording calls."""

    def __init__(self, transactions=(), error: Exception | None = None, fail_times: int = 0):
        self.transactions = list(transactions)
        self.error = error
        self.fail_times = fail_times
        self.calls: list[tuple[str, date]] = []
        self.added: list[Transaction] = []

    def fetch_transactions(self, user_id: str, since: date):
        self.calls.append((user_id, since))
        if self.error is not None and (self.fail_times == 0 or len(self.calls) <= self.fail_times):
            raise self.error
        return list(self.transactions)

    def add_many(self, user_id: str, transactions) -> int:
        items = list(transactions)
        self.added.extend(items)
        return len(items)


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        tolerance: Maximum allowed difference (default 0.01 = 1 cent)

    Raises:
        AssertionError: If values differ by more than tolerance
    """
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"
