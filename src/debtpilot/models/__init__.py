"""Value objects and SQLModel table exports."""

from .amortization import AmortizationStep, SavingsComparison, ScenarioSummary, SimulationResult
from .debt import Debt, DebtStatus, PrioritizationMethod, RankedDebt
from .insight import DebtInsight, DebtInsightReport
from .stored_transaction import StoredTransaction
from .transaction import Transaction, TransactionType

__all__ = [
    "AmortizationStep",
    "Debt",
    "DebtInsight",
    "DebtInsightReport",
    "DebtStatus",
    "PrioritizationMethod",
    "RankedDebt",
    "SavingsComparison",
    "ScenarioSummary",
    "SimulationResult",
    "StoredTransaction",
    "Transaction",
    "TransactionType",
]
