"""SQLModel table backing the transaction store."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .transaction import Transaction, TransactionType


class StoredTransaction(SQLModel, table=True):
    """An income or expense persisted for a user."""

    __tablename__: ClassVar[str] = "stored_transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(nullable=False, index=True, max_length=128)
    occurred_on: date = Field(nullable=False, index=True)
    description: str = Field(default="", max_length=255)
    amount: float = Field(nullable=False, ge=0, description="Always non-negative; see kind")
    kind: str = Field(nullable=False, max_length=16, description="income or expense")
    category: str = Field(default="", max_length=80)
    external_id: Optional[str] = Field(default=None, index=True, max_length=128)

    def to_transaction(self) -> Transaction:
        """Return the plain value object the services work with."""
        return Transaction(
            date=self.occurred_on,
            description=self.description,
            amount=self.amount,
            type=TransactionType(self.kind),
            id=self.external_id or (str(self.id) if self.id is not None else None),
            category=self.category,
        )

    @classmethod
    def from_transaction(cls, user_id: str, transaction: Transaction) -> "StoredTransaction":
        return cls(
            user_id=user_id,
            occurred_on=transaction.date,
            description=transaction.description,
            amount=transaction.amount,
            kind=transaction.type.value,
            category=transaction.category,
            external_id=transaction.id,
        )
