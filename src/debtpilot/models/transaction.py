"""Transaction value objects used by statement import and duplicate detection."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Mapping, Optional

from ..dates import to_date


class TransactionType(str, Enum):
    """Direction of money flow; transactions are never compared across types."""

    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def from_signed_amount(cls, amount: float) -> "TransactionType":
        return cls.INCOME if amount >= 0 else cls.EXPENSE


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single income or expense with a non-negative amount."""

    date: date
    description: str
    amount: float
    type: TransactionType
    id: Optional[str] = None
    category: str = ""
    source: Optional[str] = None
    is_duplicate: Optional[bool] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def tagged(self, is_duplicate: bool) -> "Transaction":
        """Return a copy carrying the duplicate-detection tag."""
        return replace(self, is_duplicate=is_duplicate)

    @classmethod
    def from_record(
        cls, record: Mapping[str, Any], type: TransactionType | str | None = None
    ) -> "Transaction":
        """Convert a store record into a transaction.

        Signed amounts are accepted; when no type is given (argument or record
        ``type``/``kind``) it is derived from the sign.
        """

        raw_date = record.get("date")
        if raw_date is None:
            raw_date = record.get("occurred_at", record.get("occurredAt"))
        amount = float(record.get("amount", 0.0) or 0.0)
        kind = type if type is not None else record.get("type", record.get("kind"))
        if kind is None:
            kind = TransactionType.from_signed_amount(amount)
        description = record.get("description")
        if description is None:
            description = record.get("memo", record.get("title", ""))
        raw_id = record.get("id")
        return cls(
            date=to_date(raw_date),
            description=str(description or ""),
            amount=abs(amount),
            type=TransactionType(kind),
            id=None if raw_id is None else str(raw_id),
            category=str(record.get("category") or ""),
            source=record.get("source"),
        )
