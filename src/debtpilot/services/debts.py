"""Debt prioritization (snowball and avalanche) and interest summaries."""

from __future__ import annotations

from typing import Callable, Iterable

from ..exceptions import InvalidDebtError
from ..models.debt import Debt, PrioritizationMethod, RankedDebt


def _rank(
    debts: Iterable[Debt],
    *,
    key: Callable[[Debt], float],
    reverse: bool,
    method: PrioritizationMethod,
) -> list[RankedDebt]:
    # sorted() is stable, so ties keep their input order even with reverse=True
    active = [debt for debt in debts if debt.is_active]
    ordered = sorted(active, key=key, reverse=reverse)
    return [
        RankedDebt(debt=debt, priority=index, method=method)
        for index, debt in enumerate(ordered, start=1)
    ]


def sort_snowball(debts: Iterable[Debt]) -> list[RankedDebt]:
    """Return active debts ranked by smallest remaining balance first."""
    return _rank(
        debts,
        key=lambda d: d.remaining_amount,
        reverse=False,
        method=PrioritizationMethod.SNOWBALL,
    )


def sort_avalanche(debts: Iterable[Debt]) -> list[RankedDebt]:
    """Return active debts ranked by highest interest rate first."""
    return _rank(
        debts,
        key=lambda d: d.interest_rate,
        reverse=True,
        method=PrioritizationMethod.AVALANCHE,
    )


def prioritize(debts: Iterable[Debt], method: PrioritizationMethod | str) -> list[RankedDebt]:
    """Rank debts with the requested strategy."""

    try:
        strategy = PrioritizationMethod(method)
    except ValueError as exc:
        raise InvalidDebtError("Invalid debt payoff strategy.") from exc
    if strategy is PrioritizationMethod.SNOWBALL:
        return sort_snowball(debts)
    return sort_avalanche(debts)


def calculate_debt_monthly_interest(debt: Debt | None) -> float:
    """Interest figure shown per debt: ``remaining * annual_rate / 100``.

    The annual rate is deliberately not divided by 12; insight thresholds are
    calibrated to this scale.
    """

    if debt is None or not debt.is_active:
        return 0.0
    return debt.remaining_amount * (debt.interest_rate or 0.0) / 100


def calculate_monthly_interest(debts: Iterable[Debt]) -> float:
    """Sum of :func:`calculate_debt_monthly_interest` over active debts."""
    return sum((calculate_debt_monthly_interest(d) for d in debts), 0.0)


def priority_label(priority: int) -> str:
    """Ordinal label for a priority badge (1st, 2nd, 3rd, 4th...)."""

    if priority < 1:
        raise ValueError("priority starts at 1")
    if 10 <= priority % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(priority % 10, "th")
    return f"{priority}{suffix}"


_METHOD_DESCRIPTIONS = {
    PrioritizationMethod.SNOWBALL: (
        "Snowball method",
        "Pay off the smallest debts first to build momentum",
    ),
    PrioritizationMethod.AVALANCHE: (
        "Avalanche method",
        "Pay off the highest-interest debts first to save the most",
    ),
}


def method_description(method: PrioritizationMethod | str) -> dict[str, str]:
    title, description = _METHOD_DESCRIPTIONS[PrioritizationMethod(method)]
    return {"title": title, "description": description}
