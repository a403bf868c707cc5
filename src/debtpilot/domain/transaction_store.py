"""Transaction store protocol consumed by duplicate detection."""

from __future__ import annotations

from datetime import date
from typing import Awaitable, Iterable, Protocol, Sequence, Union

from ..models.transaction import Transaction

FetchResult = Union[Sequence[Transaction], Awaitable[Sequence[Transaction]]]


class TransactionStore(Protocol):
    """Source of a user's previously stored income and expense records."""

    def fetch_transactions(self, user_id: str, since: date) -> FetchResult:
        """Return income and expense records dated on or after ``since``.

        Implementations may be synchronous or return an awaitable; ordering is
        not significant.
        """
        ...


class WritableTransactionStore(TransactionStore, Protocol):
    """A store the import flow can append new transactions to."""

    def add_many(self, user_id: str, transactions: Iterable[Transaction]) -> int:
        ...
