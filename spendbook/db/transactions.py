"""
Transactions repository module for transaction CRUD operations.

Handles all transaction-related operations including:
- Creating transactions (amount/date normalization, reference checks)
- Reading joined transactions (account + category resolved on every read)
- Updating transactions (partial, id/created_at immutable)
- Deleting transactions
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional

from spendbook.config import DEFAULT_RECENT_LIMIT, MAX_DESCRIPTION_LENGTH
from spendbook.errors import PersistenceError, ValidationError
from spendbook.models import EnrichedTransaction, Transaction
from spendbook.models.account import utc_now
from spendbook.services.parsing import (
    AmountParser,
    DateParser,
    clean_text,
    normalize_fields,
)

from .base import TRANSACTION_COLUMNS, BaseStore

logger = logging.getLogger(__name__)

# camelCase keys as sent by the JSON router
TRANSACTION_ALIASES = {
    "bankAccountId": "bank_account_id",
    "expenseCategoryId": "expense_category_id",
    "transactionDate": "transaction_date",
}


class TransactionRepository:
    """
    Repository for managing transactions.

    Every read returns EnrichedTransaction. A transaction whose account or
    category has been deleted is invisible: omitted from list() and None
    from get().
    """

    def __init__(self, store: BaseStore):
        """
        Initialize the transaction repository.

        Args:
            store: Persistence provider holding the transactions
        """
        self.store = store

    def _clean(self, fields: dict[str, Any], partial: bool) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}

        for column in ("bank_account_id", "expense_category_id"):
            if not partial or column in fields:
                cleaned[column] = clean_text(fields.get(column), column)

        if not partial or "amount" in fields:
            cleaned["amount"] = AmountParser.parse(fields.get("amount"))

        if not partial or "transaction_date" in fields:
            cleaned["transaction_date"] = DateParser.parse(
                fields.get("transaction_date")
            )

        if not partial or "description" in fields:
            cleaned["description"] = clean_text(
                fields.get("description"),
                "description",
                required=False,
                max_length=MAX_DESCRIPTION_LENGTH,
            )

        return cleaned

    # =========================================================================
    # Read Operations
    # =========================================================================

    def list(self) -> list[EnrichedTransaction]:
        """Get all joinable transactions, most recent transaction_date first."""
        transactions = self.store.list_transactions()
        logger.debug(f"Listed {len(transactions)} transactions")
        return transactions

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[EnrichedTransaction]:
        """Get the most recent transactions."""
        if limit < 0:
            raise ValidationError(f"limit must not be negative, got {limit}", "limit")
        return self.list()[:limit]

    def get(self, transaction_id: str) -> Optional[EnrichedTransaction]:
        """Get a joinable transaction by ID, or None."""
        if not transaction_id or not isinstance(transaction_id, str):
            return None
        return self.store.get_transaction(transaction_id)

    # =========================================================================
    # Create Operations
    # =========================================================================

    def create(self, fields: Mapping[str, Any]) -> EnrichedTransaction:
        """
        Create a new transaction.

        Args:
            fields: bank_account_id, expense_category_id, amount (string or
                Decimal) and transaction_date (ISO string) are required;
                description is optional

        Returns:
            The created transaction joined with its account and category

        Raises:
            ValidationError: If validation fails
            PersistenceError: If a referenced account or category does not
                exist, or the store rejects the write
        """
        cleaned = self._clean(
            normalize_fields(fields, TRANSACTION_COLUMNS, TRANSACTION_ALIASES),
            partial=False,
        )
        transaction = Transaction(
            id=str(uuid.uuid4()), created_at=utc_now(), **cleaned
        )

        try:
            self.store.insert_transaction(transaction)
            enriched = self.store.get_transaction(transaction.id)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Error creating transaction: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create transaction: {e}") from e

        if enriched is None:
            # References vanished between insert and read-back
            raise PersistenceError(
                f"Transaction {transaction.id} was stored but cannot be resolved"
            )

        logger.info(
            f"Created transaction {transaction.id}: {transaction.amount} "
            f"on {transaction.transaction_date.date().isoformat()}"
        )
        return enriched

    # =========================================================================
    # Update Operations
    # =========================================================================

    def update(
        self, transaction_id: str, fields: Optional[Mapping[str, Any]] = None
    ) -> Optional[EnrichedTransaction]:
        """
        Update an existing transaction with the supplied fields only.

        Returns:
            Updated transaction, or None if it does not exist or is no longer
            joinable

        Raises:
            ValidationError: If a supplied field is invalid
            PersistenceError: If a new reference does not exist
        """
        cleaned = self._clean(
            normalize_fields(fields, TRANSACTION_COLUMNS, TRANSACTION_ALIASES),
            partial=True,
        )
        if not transaction_id or not isinstance(transaction_id, str):
            return None

        if not cleaned:
            return self.get(transaction_id)

        # Dangling transactions are invisible, so they are not updatable either
        if self.get(transaction_id) is None:
            return None

        try:
            updated = self.store.update_transaction(transaction_id, cleaned)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(
                f"Error updating transaction {transaction_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to update transaction: {e}") from e

        if updated is None:
            return None

        logger.info(f"Updated transaction {transaction_id}: {sorted(cleaned)}")
        return self.store.get_transaction(transaction_id)

    # =========================================================================
    # Delete Operations
    # =========================================================================

    def delete(self, transaction_id: str) -> bool:
        """
        Delete a transaction.

        Returns:
            True if deleted, False if not found or no longer joinable
        """
        if self.get(transaction_id) is None:
            return False

        deleted = self.store.delete_transaction(transaction_id)
        if deleted:
            logger.info(f"Deleted transaction {transaction_id}")
        return deleted
