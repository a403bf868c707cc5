"""Persistence adapters."""

from .database import create_db_engine, create_session_factory, init_database
from .transaction_store import SQLModelTransactionStore

__all__ = [
    "SQLModelTransactionStore",
    "create_db_engine",
    "create_session_factory",
    "init_database",
]
