"""
Accounts repository module for bank account CRUD operations.

Validates caller input before handing records to the store, assigns IDs and
creation timestamps, and keeps id/created_at immutable on update.
"""

import logging
import uuid
from typing import Any, Mapping, Optional

from spendbook.config import MAX_ACCOUNT_NAME_LENGTH, MAX_DESCRIPTION_LENGTH
from spendbook.errors import PersistenceError
from spendbook.models import BankAccount
from spendbook.models.account import utc_now
from spendbook.services.parsing import clean_text, normalize_fields

from .base import ACCOUNT_COLUMNS, BaseStore

logger = logging.getLogger(__name__)

# camelCase keys as sent by the JSON router
ACCOUNT_ALIASES = {"accountName": "account_name"}


class AccountRepository:
    """Repository for managing bank accounts."""

    def __init__(self, store: BaseStore):
        """
        Initialize the account repository.

        Args:
            store: Persistence provider holding the accounts
        """
        self.store = store

    def _clean(self, fields: dict[str, Any], partial: bool) -> dict[str, Any]:
        """Validate supplied fields; on create every required field must be present."""
        cleaned: dict[str, Any] = {}

        if not partial or "account_name" in fields:
            cleaned["account_name"] = clean_text(
                fields.get("account_name"),
                "account_name",
                max_length=MAX_ACCOUNT_NAME_LENGTH,
            )
        if not partial or "group" in fields:
            cleaned["group"] = clean_text(fields.get("group"), "group")
        if not partial or "description" in fields:
            cleaned["description"] = clean_text(
                fields.get("description"),
                "description",
                required=False,
                max_length=MAX_DESCRIPTION_LENGTH,
            )

        return cleaned

    def list(self) -> list[BankAccount]:
        """Get all bank accounts."""
        accounts = self.store.list_accounts()
        logger.debug(f"Listed {len(accounts)} bank accounts")
        return accounts

    def get(self, account_id: str) -> Optional[BankAccount]:
        """Get a bank account by ID, or None if it does not exist."""
        if not account_id or not isinstance(account_id, str):
            return None
        return self.store.get_account(account_id)

    def create(self, fields: Mapping[str, Any]) -> BankAccount:
        """
        Create a new bank account.

        Args:
            fields: account_name and group (required), description (optional)

        Returns:
            The created BankAccount with its generated id and created_at

        Raises:
            ValidationError: If a required field is missing or blank
            PersistenceError: If the store rejects the write
        """
        cleaned = self._clean(
            normalize_fields(fields, ACCOUNT_COLUMNS, ACCOUNT_ALIASES), partial=False
        )
        account = BankAccount(id=str(uuid.uuid4()), created_at=utc_now(), **cleaned)

        try:
            account = self.store.insert_account(account)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Error creating bank account: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create bank account: {e}") from e

        logger.info(f"Created bank account {account.id} ({account.account_name})")
        return account

    def update(
        self, account_id: str, fields: Optional[Mapping[str, Any]] = None
    ) -> Optional[BankAccount]:
        """
        Update an existing bank account with the supplied fields only.

        Returns:
            Updated BankAccount, or None if it does not exist
        """
        cleaned = self._clean(
            normalize_fields(fields, ACCOUNT_COLUMNS, ACCOUNT_ALIASES), partial=True
        )
        if not account_id or not isinstance(account_id, str):
            return None

        try:
            account = self.store.update_account(account_id, cleaned)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Error updating bank account {account_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update bank account: {e}") from e

        if account and cleaned:
            logger.info(f"Updated bank account {account_id}: {sorted(cleaned)}")
        return account

    def delete(self, account_id: str) -> bool:
        """
        Delete a bank account.

        Transactions that reference it stay stored but drop out of every read.

        Returns:
            True if deleted, False if not found
        """
        if not account_id or not isinstance(account_id, str):
            return False

        deleted = self.store.delete_account(account_id)
        if deleted:
            logger.info(f"Deleted bank account {account_id}")
        return deleted
