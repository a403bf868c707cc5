"""Insight value objects derived from a user's debts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .debt import Debt


@dataclass(frozen=True, slots=True)
class DebtInsight:
    """A single recommendation card; severity is high, medium, low, info or success."""

    id: str
    title: str
    message: str
    detail: str
    severity: str


@dataclass(frozen=True, slots=True)
class DebtInsightReport:
    has_debts: bool
    insights: tuple[DebtInsight, ...] = field(default_factory=tuple)
    total_monthly_interest: float = 0.0
    total_debt: float = 0.0
    priority_debt: Optional[Debt] = None

    def get(self, insight_id: str) -> Optional[DebtInsight]:
        return next((i for i in self.insights if i.id == insight_id), None)
