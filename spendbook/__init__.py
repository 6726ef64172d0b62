"""
Spendbook - Personal Finance Tracker Core

Bank accounts, expense categories and transactions over an in-memory or
SQLite store, with category, monthly and bank-wise rollups and CSV/XLSX export.
"""

from .db import (
    FinanceRepository,
    MemoryStore,
    SQLiteStore,
    create_repository,
)
from .errors import PersistenceError, SpendbookError, ValidationError
from .models import (
    BankAccount,
    EnrichedTransaction,
    ExpenseCategory,
    RollupRow,
    Transaction,
)
from .services import ExportFormat, ExportService

from .config import VERSION as __version__

__all__ = [
    "BankAccount",
    "EnrichedTransaction",
    "ExpenseCategory",
    "ExportFormat",
    "ExportService",
    "FinanceRepository",
    "MemoryStore",
    "PersistenceError",
    "RollupRow",
    "SQLiteStore",
    "SpendbookError",
    "Transaction",
    "ValidationError",
    "create_repository",
]
