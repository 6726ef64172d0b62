"""
Database module for the Spendbook finance tracker.

This module provides the persistence layer and the repositories built on it.

Structure:
- base.py: BaseStore, the persistence-provider interface
- memory.py: In-memory store (development and tests)
- sqlite.py: SQLite store with connection management and schema
- accounts.py: Bank account CRUD
- categories.py: Expense category CRUD
- transactions.py: Transaction CRUD returning joined transactions
- queries.py: Date range filter, rollups and summaries
- repository.py: Main facade that composes all sub-repositories
"""

from .accounts import AccountRepository
from .base import BaseStore, format_month
from .categories import CategoryRepository
from .memory import MemoryStore
from .queries import QueryRepository
from .repository import FinanceRepository, create_repository, create_store
from .sqlite import SQLiteStore
from .transactions import TransactionRepository

__all__ = [
    # Stores
    "BaseStore",
    "MemoryStore",
    "SQLiteStore",
    # Repositories
    "AccountRepository",
    "CategoryRepository",
    "FinanceRepository",
    "QueryRepository",
    "TransactionRepository",
    # Utilities
    "create_repository",
    "create_store",
    "format_month",
]
