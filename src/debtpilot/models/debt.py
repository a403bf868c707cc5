"""Debt value objects consumed by the payoff simulator and prioritizer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class DebtStatus(str, Enum):
    """Lifecycle state maintained by the caller."""

    ACTIVE = "active"
    PAID = "paid"


class PrioritizationMethod(str, Enum):
    """Strategies for ordering debts."""

    SNOWBALL = "snowball"
    AVALANCHE = "avalanche"


def _pick(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return default


@dataclass(frozen=True, slots=True)
class Debt:
    """An installment debt as read from the debt store.

    ``interest_rate`` is the nominal annual rate in percent (12.0 means 12%/year).
    """

    remaining_amount: float
    installment_value: float
    interest_rate: float = 0.0
    name: str = ""
    total_installments: int = 0
    paid_installments: int = 0
    status: DebtStatus = DebtStatus.ACTIVE
    id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == DebtStatus.ACTIVE

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Debt":
        """Build a debt from a store record using camelCase or snake_case keys."""

        remaining = float(_pick(record, "remainingAmount", "remaining_amount", "balance", default=0.0))
        raw_status = _pick(record, "status")
        if raw_status is None:
            status = DebtStatus.PAID if remaining <= 0 else DebtStatus.ACTIVE
        else:
            status = DebtStatus(str(raw_status).strip().lower())
        raw_id = _pick(record, "id")
        return cls(
            remaining_amount=remaining,
            installment_value=float(
                _pick(record, "installmentValue", "installment_value", "minimum_payment", default=0.0)
            ),
            interest_rate=float(_pick(record, "interestRate", "interest_rate", "apr", default=0.0) or 0.0),
            name=str(_pick(record, "name", default="")),
            total_installments=int(_pick(record, "totalInstallments", "total_installments", default=0)),
            paid_installments=int(_pick(record, "paidInstallments", "paid_installments", default=0)),
            status=status,
            id=None if raw_id is None else str(raw_id),
        )


@dataclass(frozen=True, slots=True)
class RankedDebt:
    """A debt with the transient priority assigned by a prioritization method."""

    debt: Debt
    priority: int
    method: PrioritizationMethod

    @property
    def remaining_amount(self) -> float:
        return self.debt.remaining_amount

    @property
    def interest_rate(self) -> float:
        return self.debt.interest_rate

    @property
    def name(self) -> str:
        return self.debt.name
