"""Exception types raised by DebtPilot."""

from __future__ import annotations


class DebtPilotError(Exception):
    """Base class for all DebtPilot errors."""


class InvalidDebtError(DebtPilotError, ValueError):
    """A debt (or payment plan) that cannot be simulated or prioritized."""


class InvalidDateError(DebtPilotError, ValueError):
    """A date value that cannot be interpreted as a calendar date."""


class StatementParseError(DebtPilotError, ValueError):
    """A bank statement that cannot be read into transactions."""
