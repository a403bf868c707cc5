"""DebtPilot: debt payoff planning and statement de-duplication."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestingConfig
from .models import Debt, DebtStatus, PrioritizationMethod, Transaction, TransactionType
from .services.amortization import calculate_payoff_date, calculate_savings, compare_scenarios, simulate
from .services.debts import calculate_monthly_interest, sort_avalanche, sort_snowball
from .services.duplicates import classify_duplicates, find_duplicates

__all__ = [
    "BaseConfig",
    "Debt",
    "DebtStatus",
    "DevConfig",
    "PrioritizationMethod",
    "TestingConfig",
    "Transaction",
    "TransactionType",
    "calculate_monthly_interest",
    "calculate_payoff_date",
    "calculate_savings",
    "classify_duplicates",
    "compare_scenarios",
    "find_duplicates",
    "simulate",
    "sort_avalanche",
    "sort_snowball",
]
