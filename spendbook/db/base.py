"""
Base store module defining the persistence-provider contract.

Every storage backend (in-memory, SQLite) implements the same capability set:
entity CRUD for accounts, categories and transactions, the joined transaction
view, and grouped aggregation queries. Repositories depend only on this
interface.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from spendbook.config import MONTH_ABBREVIATIONS, MONTH_LABEL_FORMAT
from spendbook.models import (
    BankAccount,
    EnrichedTransaction,
    ExpenseCategory,
    RollupRow,
    Transaction,
)

logger = logging.getLogger(__name__)

# Columns a partial update may touch, per entity
ACCOUNT_COLUMNS = ("account_name", "group", "description")
CATEGORY_COLUMNS = ("name", "group", "category")
TRANSACTION_COLUMNS = (
    "bank_account_id",
    "expense_category_id",
    "description",
    "amount",
    "transaction_date",
)


def format_month(year: int, month: int) -> str:
    """Format a calendar month as a short label, e.g. "Jan 2024"."""
    return MONTH_LABEL_FORMAT.format(month=MONTH_ABBREVIATIONS[month - 1], year=year)


class BaseStore(ABC):
    """
    Abstract persistence provider.

    Lookups return None when nothing matches and deletes return whether a row
    was removed. Writes that reference a missing account or category raise
    PersistenceError.
    """

    name = "base"

    # =========================================================================
    # Bank Accounts
    # =========================================================================

    @abstractmethod
    def list_accounts(self) -> list[BankAccount]:
        """Return all bank accounts."""

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[BankAccount]:
        """Return one bank account or None."""

    @abstractmethod
    def insert_account(self, account: BankAccount) -> BankAccount:
        """Persist a new bank account."""

    @abstractmethod
    def update_account(
        self, account_id: str, fields: dict[str, Any]
    ) -> Optional[BankAccount]:
        """Merge fields into a bank account; None if it does not exist."""

    @abstractmethod
    def delete_account(self, account_id: str) -> bool:
        """Remove a bank account."""

    # =========================================================================
    # Expense Categories
    # =========================================================================

    @abstractmethod
    def list_categories(self) -> list[ExpenseCategory]:
        """Return all expense categories."""

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[ExpenseCategory]:
        """Return one expense category or None."""

    @abstractmethod
    def insert_category(self, category: ExpenseCategory) -> ExpenseCategory:
        """Persist a new expense category."""

    @abstractmethod
    def update_category(
        self, category_id: str, fields: dict[str, Any]
    ) -> Optional[ExpenseCategory]:
        """Merge fields into an expense category; None if it does not exist."""

    @abstractmethod
    def delete_category(self, category_id: str) -> bool:
        """Remove an expense category."""

    # =========================================================================
    # Transactions
    # =========================================================================

    @abstractmethod
    def list_transactions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[EnrichedTransaction]:
        """
        Return joinable transactions, most recent first.

        Args:
            start: Optional inclusive lower bound on transaction_date
            end: Optional inclusive upper bound on transaction_date
        """

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[EnrichedTransaction]:
        """Return one joinable transaction or None."""

    @abstractmethod
    def insert_transaction(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction."""

    @abstractmethod
    def update_transaction(
        self, transaction_id: str, fields: dict[str, Any]
    ) -> Optional[Transaction]:
        """Merge fields into a transaction; None if it does not exist."""

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> bool:
        """Remove a transaction."""

    # =========================================================================
    # Aggregations
    # =========================================================================

    @abstractmethod
    def category_totals(self) -> list[RollupRow]:
        """Sum joinable transactions per expense_category.category."""

    @abstractmethod
    def monthly_totals(self) -> list[RollupRow]:
        """Sum joinable transactions per calendar month, oldest month first."""

    @abstractmethod
    def bank_totals(self) -> list[RollupRow]:
        """Sum joinable transactions per bank_account.account_name."""

    def close(self):
        """Release any resources held by the store."""
