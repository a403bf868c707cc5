"""Service module exports."""

from . import amortization, debts, duplicates, importer, insights, statements

__all__ = [
    "amortization",
    "debts",
    "duplicates",
    "importer",
    "insights",
    "statements",
]
