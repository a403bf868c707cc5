"""Single-debt payoff simulation and what-if comparisons."""

from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from ..config import BaseConfig
from ..dates import add_months, require_finite
from ..exceptions import InvalidDebtError
from ..models.amortization import (
    AmortizationStep,
    SavingsComparison,
    ScenarioSummary,
    SimulationResult,
)
from ..models.debt import Debt

logger = logging.getLogger(__name__)

DEFAULT_SCENARIOS: tuple[float, ...] = (0.0, 100.0, 200.0, 500.0)


def _validated_inputs(debt: Debt, extra_payment: float) -> tuple[float, float, float]:
    """Return (balance, monthly_payment, monthly_rate) or raise InvalidDebtError."""

    balance = require_finite("remaining_amount", debt.remaining_amount, error=InvalidDebtError)
    rate = require_finite("interest_rate", debt.interest_rate, error=InvalidDebtError)
    extra = require_finite("extra_payment", extra_payment, error=InvalidDebtError)
    installment = require_finite("installment_value", debt.installment_value, error=InvalidDebtError)

    if balance < 0:
        raise InvalidDebtError(f"remaining_amount cannot be negative ({balance})")
    if rate < 0:
        raise InvalidDebtError(f"interest_rate cannot be negative ({rate})")
    if extra < 0:
        raise InvalidDebtError(f"extra_payment cannot be negative ({extra})")

    monthly_payment = installment + extra
    if balance > 0 and monthly_payment <= 0:
        raise InvalidDebtError("payment too small to ever pay off this debt")
    return balance, monthly_payment, rate / 12 / 100


def simulate(
    debt: Debt, extra_payment: float = 0.0, *, max_horizon_months: int | None = None
) -> SimulationResult:
    """Amortize ``debt`` month by month until payoff or the horizon.

    Each month interest accrues on the remaining balance at ``rate / 12 / 100``
    and the rest of the payment reduces principal. Once the balance drops below
    one payment, a final month pays the residual plus its interest, so a paid
    off schedule always ends at exactly zero. Hitting ``max_horizon_months``
    with a balance left is reported through ``SimulationResult.horizon_exceeded``.
    """

    horizon = BaseConfig.MAX_HORIZON_MONTHS if max_horizon_months is None else max_horizon_months
    if horizon < 1:
        raise InvalidDebtError(f"max_horizon_months must be >= 1 ({horizon})")

    balance, monthly_payment, monthly_rate = _validated_inputs(debt, extra_payment)

    remaining = balance
    months = 0
    total_interest = 0.0
    history: list[AmortizationStep] = []

    while remaining > 0 and months < horizon:
        months += 1
        interest = remaining * monthly_rate
        total_interest += interest
        principal = monthly_payment - interest

        if principal >= remaining:
            # The regular payment covers everything owed; pay exactly that.
            history.append(
                AmortizationStep(
                    month=months,
                    payment=remaining + interest,
                    interest=interest,
                    principal=remaining,
                    remaining=0.0,
                )
            )
            remaining = 0.0
            break

        remaining -= principal
        history.append(
            AmortizationStep(
                month=months,
                payment=monthly_payment,
                interest=interest,
                principal=principal,
                remaining=max(0.0, remaining),
            )
        )

        if 0 < remaining < monthly_payment and months < horizon:
            months += 1
            last_interest = remaining * monthly_rate
            total_interest += last_interest
            history.append(
                AmortizationStep(
                    month=months,
                    payment=remaining + last_interest,
                    interest=last_interest,
                    principal=remaining,
                    remaining=0.0,
                )
            )
            remaining = 0.0

    residual = max(0.0, remaining)
    if residual > 0:
        logger.warning(
            "Debt not paid off within horizon",
            extra={
                "debt_name": debt.name,
                "horizon_months": horizon,
                "residual": round(residual, 2),
                "monthly_payment": monthly_payment,
            },
        )

    return SimulationResult(
        months=months,
        total_interest=total_interest,
        total_paid=balance + total_interest,
        history=tuple(history),
        extra_payment=float(extra_payment),
        remaining=residual,
    )


def compare_scenarios(
    debt: Debt,
    extra_amounts: Sequence[float] = DEFAULT_SCENARIOS,
    *,
    max_horizon_months: int | None = None,
) -> list[ScenarioSummary]:
    """Simulate each extra payment and report savings against the first one."""

    if not extra_amounts:
        return []

    base_extra = extra_amounts[0]
    base = simulate(debt, base_extra, max_horizon_months=max_horizon_months)
    summaries: list[ScenarioSummary] = []
    for extra in extra_amounts:
        result = base if extra == base_extra else simulate(
            debt, extra, max_horizon_months=max_horizon_months
        )
        is_base = extra == base_extra
        summaries.append(
            ScenarioSummary(
                extra_payment=float(extra),
                months=result.months,
                total_interest=result.total_interest,
                total_paid=result.total_paid,
                savings=0.0 if is_base else base.total_interest - result.total_interest,
                months_saved=0 if is_base else base.months - result.months,
                horizon_exceeded=result.horizon_exceeded,
            )
        )
    return summaries


def calculate_savings(
    debt: Debt,
    current_extra: float = 0.0,
    new_extra: float = 0.0,
    *,
    max_horizon_months: int | None = None,
) -> SavingsComparison:
    """Compare two extra-payment plans; positive values favour ``new_extra``."""

    current = simulate(debt, current_extra, max_horizon_months=max_horizon_months)
    proposed = simulate(debt, new_extra, max_horizon_months=max_horizon_months)
    return SavingsComparison(
        interest_savings=current.total_interest - proposed.total_interest,
        months_saved=current.months - proposed.months,
        current_months=current.months,
        new_months=proposed.months,
        current_total_interest=current.total_interest,
        new_total_interest=proposed.total_interest,
    )


def calculate_payoff_date(months: int, *, today: date | None = None) -> date:
    """Return the date ``months`` calendar months from ``today``."""

    if months < 0:
        raise ValueError(f"months cannot be negative ({months})")
    return add_months(today or date.today(), months)
