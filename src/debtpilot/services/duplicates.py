"""Fuzzy duplicate detection for imported transactions.

An incoming transaction is a duplicate when some stored transaction of the
same type is dated within a day of it, has the same amount (to the cent)
and a description that is more than 80% similar by edit distance.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping, Optional, Sequence

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from ..config import BaseConfig
from ..dates import days_apart, to_date
from ..domain.transaction_store import TransactionStore
from ..models.transaction import Transaction

logger = logging.getLogger(__name__)


def edit_distance(first: str, second: str) -> int:
    """Levenshtein distance with unit-cost insertions, deletions and substitutions."""

    if len(first) < len(second):
        first, second = second, first
    previous = list(range(len(second) + 1))
    for i, char_a in enumerate(first, start=1):
        current = [i]
        for j, char_b in enumerate(second, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], previous[j], current[j - 1]) + 1)
        previous = current
    return previous[-1]


def string_similarity(first: Optional[str], second: Optional[str]) -> float:
    """Similarity in [0, 1]: ``(longest - distance) / longest``.

    Two empty strings are identical (1.0); a missing or empty value against a
    non-empty one scores 0.
    """

    if first is None or second is None:
        return 0.0
    if not first and not second:
        return 1.0
    if not first or not second:
        return 0.0
    longest = max(len(first), len(second))
    return (longest - edit_distance(first, second)) / longest


def is_probable_duplicate(
    candidate: Transaction,
    existing: Transaction,
    *,
    date_tolerance_days: int = BaseConfig.DUPLICATE_DATE_TOLERANCE_DAYS,
    amount_tolerance: float = BaseConfig.DUPLICATE_AMOUNT_TOLERANCE,
    similarity_threshold: float = BaseConfig.DUPLICATE_SIMILARITY_THRESHOLD,
) -> bool:
    """Apply the composite match rule to a pair of transactions."""

    if candidate.type != existing.type:
        return False
    if days_apart(candidate.date, existing.date) > date_tolerance_days:
        return False
    if abs(candidate.amount - existing.amount) >= amount_tolerance:
        return False
    similarity = string_similarity(
        (candidate.description or "").lower(), (existing.description or "").lower()
    )
    return similarity > similarity_threshold


@dataclass(frozen=True, slots=True)
class DuplicateReport:
    """Classification of an incoming batch; every input appears exactly once."""

    duplicates: tuple[Transaction, ...] = ()
    unique: tuple[Transaction, ...] = ()
    window_size: int = 0
    fetch_failed: bool = False
    ordered: tuple[Transaction, ...] = field(default=(), repr=False)

    def __len__(self) -> int:
        return len(self.duplicates) + len(self.unique)

    def all(self) -> list[Transaction]:
        """Tagged transactions in their original input order."""
        return list(self.ordered)


def classify_duplicates(
    new_transactions: Iterable[Transaction],
    existing: Sequence[Transaction],
    *,
    date_tolerance_days: int = BaseConfig.DUPLICATE_DATE_TOLERANCE_DAYS,
    amount_tolerance: float = BaseConfig.DUPLICATE_AMOUNT_TOLERANCE,
    similarity_threshold: float = BaseConfig.DUPLICATE_SIMILARITY_THRESHOLD,
) -> DuplicateReport:
    """Tag each new transaction against an already-fetched window."""

    duplicates: list[Transaction] = []
    unique: list[Transaction] = []
    ordered: list[Transaction] = []
    for candidate in new_transactions:
        matched = any(
            is_probable_duplicate(
                candidate,
                other,
                date_tolerance_days=date_tolerance_days,
                amount_tolerance=amount_tolerance,
                similarity_threshold=similarity_threshold,
            )
            for other in existing
        )
        tagged = candidate.tagged(matched)
        (duplicates if matched else unique).append(tagged)
        ordered.append(tagged)
    return DuplicateReport(
        duplicates=tuple(duplicates),
        unique=tuple(unique),
        window_size=len(existing),
        ordered=tuple(ordered),
    )


def _as_transaction(record: Transaction | Mapping[str, Any]) -> Transaction:
    if isinstance(record, Transaction):
        return record
    return Transaction.from_record(record)


async def _call_store(store: TransactionStore, user_id: str, since: date) -> list[Transaction]:
    fetch = store.fetch_transactions
    if inspect.iscoroutinefunction(fetch):
        result = await fetch(user_id, since)
    else:
        result = await asyncio.to_thread(fetch, user_id, since)
        if inspect.isawaitable(result):
            result = await result
    return [_as_transaction(record) for record in result or ()]


async def fetch_recent_transactions(
    store: TransactionStore,
    user_id: str,
    *,
    now: date | datetime | None = None,
    window_days: int = BaseConfig.DUPLICATE_WINDOW_DAYS,
    retries: int = BaseConfig.FETCH_RETRY_ATTEMPTS,
    retry_backoff: float = 0.5,
) -> list[Transaction]:
    """Fetch stored transactions dated within ``window_days`` of ``now``.

    Retries ``retries`` extra times with exponential backoff; the last error
    is re-raised.
    """

    since = to_date(now or date.today()) - timedelta(days=window_days)
    fetched: list[Transaction] = []
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(retries, 0) + 1),
        wait=wait_exponential(multiplier=retry_backoff, max=5),
        reraise=True,
    ):
        with attempt:
            fetched = await _call_store(store, user_id, since)
    return [txn for txn in fetched if txn.date >= since]


async def find_duplicates(
    new_transactions: Sequence[Transaction],
    *,
    store: TransactionStore,
    user_id: str,
    now: date | datetime | None = None,
    config: BaseConfig | None = None,
    retries: int | None = None,
    retry_backoff: float = 0.5,
) -> DuplicateReport:
    """Classify an import batch against the user's recent transactions.

    A failing store never blocks the import: the failure is logged and every
    incoming transaction is reported as unique.
    """

    if not new_transactions:
        return DuplicateReport()

    settings = config or BaseConfig
    try:
        window = await fetch_recent_transactions(
            store,
            user_id,
            now=now,
            window_days=settings.DUPLICATE_WINDOW_DAYS,
            retries=settings.FETCH_RETRY_ATTEMPTS if retries is None else retries,
            retry_backoff=retry_backoff,
        )
    except Exception:
        logger.exception(
            "Could not fetch existing transactions; treating batch as unique",
            extra={"user_id": user_id, "batch_size": len(new_transactions)},
        )
        tagged = tuple(txn.tagged(False) for txn in new_transactions)
        return DuplicateReport(unique=tagged, fetch_failed=True, ordered=tagged)

    report = classify_duplicates(
        new_transactions,
        window,
        date_tolerance_days=settings.DUPLICATE_DATE_TOLERANCE_DAYS,
        amount_tolerance=settings.DUPLICATE_AMOUNT_TOLERANCE,
        similarity_threshold=settings.DUPLICATE_SIMILARITY_THRESHOLD,
    )
    logger.info(
        "Duplicate check complete",
        extra={
            "user_id": user_id,
            "batch_size": len(new_transactions),
            "window_size": report.window_size,
            "duplicates": len(report.duplicates),
        },
    )
    return report


async def mark_duplicates(
    transactions: Sequence[Transaction], *, store: TransactionStore, user_id: str, **kwargs: Any
) -> list[Transaction]:
    """Return the batch tagged, duplicates first then unique ones."""

    report = await find_duplicates(transactions, store=store, user_id=user_id, **kwargs)
    return [*report.duplicates, *report.unique]
