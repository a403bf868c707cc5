"""SQLModel implementation of the transaction store."""

from __future__ import annotations

from datetime import date
from typing import Callable, ContextManager, Iterable

from sqlmodel import Session, select

from ..models.stored_transaction import StoredTransaction
from ..models.transaction import Transaction

SessionFactory = Callable[[], ContextManager[Session]]


class SQLModelTransactionStore:
    """Reads and appends a user's transactions through a session factory."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def fetch_transactions(self, user_id: str, since: date) -> list[Transaction]:
        """Return income and expense records dated on or after ``since``."""
        with self.session_factory() as session:
            statement = (
                select(StoredTransaction)
                .where(StoredTransaction.user_id == user_id)
                .where(StoredTransaction.occurred_on >= since)
                .order_by(StoredTransaction.occurred_on.desc())  # type: ignore
            )
            return [row.to_transaction() for row in session.exec(statement).all()]

    def add_many(self, user_id: str, transactions: Iterable[Transaction]) -> int:
        """Persist transactions for ``user_id`` and return how many were written."""
        rows = [StoredTransaction.from_transaction(user_id, txn) for txn in transactions]
        if not rows:
            return 0
        with self.session_factory() as session:
            session.add_all(rows)
        return len(rows)

    def count(self, user_id: str) -> int:
        with self.session_factory() as session:
            statement = select(StoredTransaction).where(StoredTransaction.user_id == user_id)
            return len(session.exec(statement).all())
