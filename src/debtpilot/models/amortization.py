"""Ephemeral results produced by the payoff simulator."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class AmortizationStep:
    """One month of a payoff schedule (``month`` is 1-indexed)."""

    month: int
    payment: float
    interest: float
    principal: float
    remaining: float


@dataclass(frozen=True, slots=True)
class SimulationResult:
    """Outcome of simulating a single debt until payoff or the horizon."""

    months: int
    total_interest: float
    total_paid: float
    history: tuple[AmortizationStep, ...] = field(default_factory=tuple)
    extra_payment: float = 0.0
    remaining: float = 0.0

    @property
    def horizon_exceeded(self) -> bool:
        """True when the horizon was reached with a balance still owed."""
        return self.remaining > 0

    @property
    def paid_off(self) -> bool:
        return self.remaining == 0


@dataclass(frozen=True, slots=True)
class ScenarioSummary:
    """One row of a scenario comparison, relative to the base scenario."""

    extra_payment: float
    months: int
    total_interest: float
    total_paid: float
    savings: float
    months_saved: int
    horizon_exceeded: bool = False


@dataclass(frozen=True, slots=True)
class SavingsComparison:
    """Signed differences (current minus new) between two payment plans."""

    interest_savings: float
    months_saved: int
    current_months: int
    new_months: int
    current_total_interest: float
    new_total_interest: float
