"""Rule-based insight cards summarizing a user's debts."""

from __future__ import annotations

import logging
from typing import Iterable

from ..config import BaseConfig
from ..dates import format_currency
from ..exceptions import InvalidDebtError
from ..models.debt import Debt, DebtStatus
from ..models.insight import DebtInsight, DebtInsightReport
from .amortization import calculate_savings, simulate
from .debts import calculate_monthly_interest

logger = logging.getLogger(__name__)


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def _tiered(value: float, *, high: float, medium: float) -> str:
    if value > high:
        return "high"
    if value > medium:
        return "medium"
    return "low"


def generate_debt_insights(
    debts: Iterable[Debt], *, extra_payment: float = BaseConfig.INSIGHT_EXTRA_PAYMENT
) -> DebtInsightReport:
    """Build insight cards for the active debts in ``debts``.

    Debts whose payment plan cannot be simulated are skipped for the
    simulation-based cards; the rest of the report is still produced.
    """

    all_debts = list(debts)
    active = [d for d in all_debts if d.is_active]
    if not active:
        return DebtInsightReport(has_debts=False)

    total_monthly_interest = calculate_monthly_interest(active)
    total_debt = sum(d.remaining_amount for d in active)
    priority_debt = min(active, key=lambda d: d.remaining_amount)
    highest_rate_debt = max(active, key=lambda d: d.interest_rate)

    insights: list[DebtInsight] = []

    if total_monthly_interest > 0:
        insights.append(
            DebtInsight(
                id="monthly-interest",
                title="Monthly interest",
                message=f"You are paying {format_currency(total_monthly_interest)} in interest every month",
                detail=f"That adds up to {format_currency(total_monthly_interest * 12)} per year",
                severity=_tiered(total_monthly_interest, high=500, medium=200),
            )
        )

    try:
        savings = calculate_savings(priority_debt, 0.0, extra_payment)
    except InvalidDebtError:
        logger.info("Skipping extra-payment insight", extra={"debt_name": priority_debt.name})
    else:
        if savings.months_saved > 0:
            months = savings.months_saved
            insights.append(
                DebtInsight(
                    id="extra-payment",
                    title="Savings opportunity",
                    message=(
                        f"Paying {format_currency(extra_payment)} more per month on your priority "
                        f"debt clears it {months} {_plural(months, 'month', 'months')} sooner"
                    ),
                    detail=f"Saving {format_currency(savings.interest_savings)} in interest",
                    severity="info",
                )
            )

    if highest_rate_debt.interest_rate > 0 and highest_rate_debt.remaining_amount > 0:
        try:
            projection = simulate(highest_rate_debt)
        except InvalidDebtError:
            logger.info("Skipping highest-interest insight", extra={"debt_name": highest_rate_debt.name})
        else:
            share = projection.total_interest / highest_rate_debt.remaining_amount * 100
            insights.append(
                DebtInsight(
                    id="highest-interest",
                    title="Watch the interest",
                    message=(
                        f'"{highest_rate_debt.name}" will cost '
                        f"{format_currency(projection.total_interest)} in interest"
                    ),
                    detail=(
                        f"That is {share:.0f}% of the principal "
                        f"({highest_rate_debt.interest_rate:g}% per year)"
                    ),
                    severity=_tiered(share, high=50, medium=25),
                )
            )

    try:
        months_to_payoff = simulate(priority_debt).months
    except InvalidDebtError:
        logger.info("Skipping priority insight", extra={"debt_name": priority_debt.name})
    else:
        insights.append(
            DebtInsight(
                id="priority",
                title="Focus here",
                message=f'Concentrate on paying off "{priority_debt.name}"',
                detail=(
                    f"Balance of {format_currency(priority_debt.remaining_amount)} - paid off in "
                    f"{months_to_payoff} {_plural(months_to_payoff, 'month', 'months')}"
                ),
                severity="success",
            )
        )

    paid_count = sum(1 for d in all_debts if d.status == DebtStatus.PAID)
    if paid_count > 0:
        insights.append(
            DebtInsight(
                id="progress",
                title="You are on the right track",
                message=f"You have already paid off {paid_count} {_plural(paid_count, 'debt', 'debts')}",
                detail="Keep going with your payment plan!",
                severity="success",
            )
        )

    return DebtInsightReport(
        has_debts=True,
        insights=tuple(insights),
        total_monthly_interest=total_monthly_interest,
        total_debt=total_debt,
        priority_debt=priority_debt,
    )
