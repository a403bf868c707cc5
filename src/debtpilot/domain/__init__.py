"""Collaborator protocols."""

from .transaction_store import FetchResult, TransactionStore, WritableTransactionStore

__all__ = ["FetchResult", "TransactionStore", "WritableTransactionStore"]
