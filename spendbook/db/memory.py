"""
In-memory store for development and tests.

Each MemoryStore instance owns its own collections, so separate instances are
fully isolated. Entities are copied on the way in and out; callers never hold
references into the store's state.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

from spendbook.config import ERROR_MESSAGES
from spendbook.errors import PersistenceError
from spendbook.models import (
    BankAccount,
    EnrichedTransaction,
    ExpenseCategory,
    RollupRow,
    Transaction,
    group_totals,
)

from .base import (
    ACCOUNT_COLUMNS,
    CATEGORY_COLUMNS,
    TRANSACTION_COLUMNS,
    BaseStore,
    format_month,
)

logger = logging.getLogger(__name__)


class MemoryStore(BaseStore):
    """Store backed by plain dictionaries keyed by entity ID."""

    name = "memory"

    def __init__(self):
        self._accounts: dict[str, BankAccount] = {}
        self._categories: dict[str, ExpenseCategory] = {}
        self._transactions: dict[str, Transaction] = {}
        logger.debug("In-memory store initialized")

    # =========================================================================
    # Bank Accounts
    # =========================================================================

    def list_accounts(self) -> list[BankAccount]:
        return [replace(account) for account in self._accounts.values()]

    def get_account(self, account_id: str) -> Optional[BankAccount]:
        account = self._accounts.get(account_id)
        return replace(account) if account else None

    def insert_account(self, account: BankAccount) -> BankAccount:
        if account.id in self._accounts:
            raise PersistenceError(f"Bank account {account.id} already exists")
        self._accounts[account.id] = replace(account)
        return replace(account)

    def update_account(
        self, account_id: str, fields: dict[str, Any]
    ) -> Optional[BankAccount]:
        existing = self._accounts.get(account_id)
        if not existing:
            return None
        updated = replace(existing, **self._pick(fields, ACCOUNT_COLUMNS))
        self._accounts[account_id] = updated
        return replace(updated)

    def delete_account(self, account_id: str) -> bool:
        return self._accounts.pop(account_id, None) is not None

    # =========================================================================
    # Expense Categories
    # =========================================================================

    def list_categories(self) -> list[ExpenseCategory]:
        return [replace(category) for category in self._categories.values()]

    def get_category(self, category_id: str) -> Optional[ExpenseCategory]:
        category = self._categories.get(category_id)
        return replace(category) if category else None

    def insert_category(self, category: ExpenseCategory) -> ExpenseCategory:
        if category.id in self._categories:
            raise PersistenceError(f"Expense category {category.id} already exists")
        self._categories[category.id] = replace(category)
        return replace(category)

    def update_category(
        self, category_id: str, fields: dict[str, Any]
    ) -> Optional[ExpenseCategory]:
        existing = self._categories.get(category_id)
        if not existing:
            return None
        updated = replace(existing, **self._pick(fields, CATEGORY_COLUMNS))
        self._categories[category_id] = updated
        return replace(updated)

    def delete_category(self, category_id: str) -> bool:
        return self._categories.pop(category_id, None) is not None

    # =========================================================================
    # Transactions
    # =========================================================================

    def _join(self, transaction: Transaction) -> Optional[EnrichedTransaction]:
        """Resolve both references, or None if either is dangling."""
        account = self._accounts.get(transaction.bank_account_id)
        category = self._categories.get(transaction.expense_category_id)
        if not account or not category:
            return None
        return EnrichedTransaction(
            transaction=replace(transaction),
            bank_account=replace(account),
            expense_category=replace(category),
        )

    def _check_references(self, transaction: Transaction):
        """Reject writes pointing at accounts or categories that do not exist."""
        if (
            transaction.bank_account_id not in self._accounts
            or transaction.expense_category_id not in self._categories
        ):
            logger.warning(
                f"Rejected transaction {transaction.id}: "
                f"account={transaction.bank_account_id} "
                f"category={transaction.expense_category_id}"
            )
            raise PersistenceError(ERROR_MESSAGES["missing_reference"])

    def list_transactions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[EnrichedTransaction]:
        joined = []
        for transaction in self._transactions.values():
            if start is not None and transaction.transaction_date < start:
                continue
            if end is not None and transaction.transaction_date > end:
                continue
            enriched = self._join(transaction)
            if enriched:
                joined.append(enriched)

        joined.sort(key=EnrichedTransaction.sort_key, reverse=True)
        return joined

    def get_transaction(self, transaction_id: str) -> Optional[EnrichedTransaction]:
        transaction = self._transactions.get(transaction_id)
        return self._join(transaction) if transaction else None

    def insert_transaction(self, transaction: Transaction) -> Transaction:
        if transaction.id in self._transactions:
            raise PersistenceError(f"Transaction {transaction.id} already exists")
        self._check_references(transaction)
        self._transactions[transaction.id] = replace(transaction)
        return replace(transaction)

    def update_transaction(
        self, transaction_id: str, fields: dict[str, Any]
    ) -> Optional[Transaction]:
        existing = self._transactions.get(transaction_id)
        if not existing:
            return None
        updated = replace(existing, **self._pick(fields, TRANSACTION_COLUMNS))
        if "bank_account_id" in fields or "expense_category_id" in fields:
            self._check_references(updated)
        self._transactions[transaction_id] = updated
        return replace(updated)

    def delete_transaction(self, transaction_id: str) -> bool:
        return self._transactions.pop(transaction_id, None) is not None

    # =========================================================================
    # Aggregations
    # =========================================================================

    def category_totals(self) -> list[RollupRow]:
        return group_totals(
            self.list_transactions(),
            lambda txn: txn.expense_category.category,
            "category",
        )

    def monthly_totals(self) -> list[RollupRow]:
        rows = group_totals(
            self.list_transactions(),
            lambda txn: (txn.transaction_date.year, txn.transaction_date.month),
            "month",
        )
        rows.sort(key=lambda row: row.key)
        for row in rows:
            row.key = format_month(*row.key)
        return rows

    def bank_totals(self) -> list[RollupRow]:
        return group_totals(
            self.list_transactions(),
            lambda txn: txn.bank_account.account_name,
            "bank_account",
        )

    @staticmethod
    def _pick(fields: dict[str, Any], columns: tuple) -> dict[str, Any]:
        return {key: value for key, value in fields.items() if key in columns}
