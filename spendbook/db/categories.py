"""
Categories repository module for expense category CRUD operations.
"""

import logging
import uuid
from typing import Any, Mapping, Optional

from spendbook.config import MAX_ACCOUNT_NAME_LENGTH
from spendbook.errors import PersistenceError
from spendbook.models import ExpenseCategory
from spendbook.models.account import utc_now
from spendbook.services.parsing import clean_text, normalize_fields

from .base import CATEGORY_COLUMNS, BaseStore

logger = logging.getLogger(__name__)


class CategoryRepository:
    """Repository for managing expense categories."""

    def __init__(self, store: BaseStore):
        self.store = store

    def _clean(self, fields: dict[str, Any], partial: bool) -> dict[str, Any]:
        """All three classification fields are required, non-blank text."""
        return {
            column: clean_text(
                fields.get(column), column, max_length=MAX_ACCOUNT_NAME_LENGTH
            )
            for column in CATEGORY_COLUMNS
            if not partial or column in fields
        }

    def list(self) -> list[ExpenseCategory]:
        """Get all expense categories."""
        categories = self.store.list_categories()
        logger.debug(f"Listed {len(categories)} expense categories")
        return categories

    def get(self, category_id: str) -> Optional[ExpenseCategory]:
        """Get an expense category by ID, or None if it does not exist."""
        if not category_id or not isinstance(category_id, str):
            return None
        return self.store.get_category(category_id)

    def create(self, fields: Mapping[str, Any]) -> ExpenseCategory:
        """
        Create a new expense category.

        Args:
            fields: name, group and category (all required)

        Raises:
            ValidationError: If a field is missing or blank
            PersistenceError: If the store rejects the write
        """
        cleaned = self._clean(normalize_fields(fields, CATEGORY_COLUMNS), partial=False)
        category = ExpenseCategory(
            id=str(uuid.uuid4()), created_at=utc_now(), **cleaned
        )

        try:
            category = self.store.insert_category(category)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Error creating expense category: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create expense category: {e}") from e

        logger.info(f"Created expense category {category.id} ({category.name})")
        return category

    def update(
        self, category_id: str, fields: Optional[Mapping[str, Any]] = None
    ) -> Optional[ExpenseCategory]:
        """Update supplied fields of an expense category; None if it does not exist."""
        cleaned = self._clean(normalize_fields(fields, CATEGORY_COLUMNS), partial=True)
        if not category_id or not isinstance(category_id, str):
            return None

        try:
            category = self.store.update_category(category_id, cleaned)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(
                f"Error updating expense category {category_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to update expense category: {e}") from e

        if category and cleaned:
            logger.info(f"Updated expense category {category_id}: {sorted(cleaned)}")
        return category

    def delete(self, category_id: str) -> bool:
        """Delete an expense category; False if it does not exist."""
        if not category_id or not isinstance(category_id, str):
            return False

        deleted = self.store.delete_category(category_id)
        if deleted:
            logger.info(f"Deleted expense category {category_id}")
        return deleted
