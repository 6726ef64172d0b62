"""
Main repository facade composing the account, category, transaction and query
repositories over a single store.
"""

import logging
from pathlib import Path
from typing import Optional

from spendbook.config import STORE_MEMORY, get_store_backend
from spendbook.models import EnrichedTransaction, RollupRow
from spendbook.services.export import ExportService
from spendbook.services.parsing import DateInput

from .accounts import AccountRepository
from .base import BaseStore
from .categories import CategoryRepository
from .memory import MemoryStore
from .queries import QueryRepository
from .sqlite import SQLiteStore
from .transactions import TransactionRepository

logger = logging.getLogger(__name__)


class FinanceRepository:
    """
    Repository facade used by the request router.

    Owns exactly one store; nothing is shared between instances, so each
    test can build its own repository over its own store.
    """

    def __init__(self, store: BaseStore):
        self.store = store
        self.accounts = AccountRepository(store)
        self.categories = CategoryRepository(store)
        self.transactions = TransactionRepository(store)
        self.queries = QueryRepository(store)
        self.exports = ExportService(self)
        logger.debug(f"Finance repository initialized with {store.name} store")

    # Reporting shortcuts

    def filter_by_date_range(
        self, start: DateInput, end: DateInput
    ) -> list[EnrichedTransaction]:
        return self.queries.filter_by_date_range(start, end)

    def category_rollup(self) -> list[RollupRow]:
        return self.queries.category_rollup()

    def monthly_rollup(self, last: Optional[int] = None) -> list[RollupRow]:
        return self.queries.monthly_rollup(last=last)

    def bank_rollup(self) -> list[RollupRow]:
        return self.queries.bank_rollup()

    def export_csv(
        self, start: Optional[DateInput] = None, end: Optional[DateInput] = None
    ) -> str:
        """CSV text for all transactions, or for [start, end] when both are given."""
        return self.exports.render_csv(self.exports.get_transactions(start, end))

    def close(self):
        self.store.close()


def create_store(
    backend: Optional[str] = None, db_path: Optional[Path] = None
) -> BaseStore:
    """
    Build a store from explicit arguments or the environment.

    Args:
        backend: "sqlite" or "memory"; defaults to SPENDBOOK_STORE
        db_path: SQLite file; defaults to SPENDBOOK_DB_PATH
    """
    backend = backend or get_store_backend()
    if backend == STORE_MEMORY:
        return MemoryStore()
    return SQLiteStore(db_path)


def create_repository(
    store: Optional[BaseStore] = None,
    backend: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> FinanceRepository:
    """Create a repository over the given store, or one built from configuration."""
    return FinanceRepository(store or create_store(backend, db_path))
