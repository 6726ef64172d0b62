"""
Queries repository module for date-range filtering and analytics.

Handles all read-only reporting operations including:
- Date range queries (inclusive on both ends)
- Category, monthly and bank-wise rollups
- Month totals and the dashboard summary
"""

import calendar
import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional

from spendbook.errors import ValidationError
from spendbook.models import EnrichedTransaction, RollupRow, quantize_amount
from spendbook.services.parsing import DateInput, DateParser

from .base import BaseStore

logger = logging.getLogger(__name__)


class QueryRepository:
    """
    Repository for reporting queries over joinable transactions.

    Nothing is cached: every call re-reads the store.
    """

    def __init__(self, store: BaseStore):
        """
        Initialize the query repository.

        Args:
            store: Persistence provider to query
        """
        self.store = store

    # =========================================================================
    # Date Range Queries
    # =========================================================================

    def filter_by_date_range(
        self, start: DateInput, end: DateInput
    ) -> list[EnrichedTransaction]:
        """
        Get transactions dated within [start, end], most recent first.

        Args:
            start: Start date or datetime (inclusive), ISO-8601 string accepted
            end: End date or datetime (inclusive). A date-only end covers the
                whole day

        Returns:
            List of EnrichedTransaction; empty when start is after end

        Raises:
            ValidationError: If either bound cannot be parsed
        """
        start_at, end_at = DateParser.parse_range(start, end)

        if start_at > end_at:
            logger.debug(f"Inverted date range {start_at} > {end_at}, returning none")
            return []

        transactions = self.store.list_transactions(start=start_at, end=end_at)
        logger.debug(
            f"Found {len(transactions)} transactions between {start_at} and {end_at}"
        )
        return transactions

    # =========================================================================
    # Analytics Queries
    # =========================================================================

    def category_rollup(self) -> list[RollupRow]:
        """Total and count per expense category tag (expense_category.category)."""
        return self.store.category_totals()

    def monthly_rollup(self, last: Optional[int] = None) -> list[RollupRow]:
        """
        Total and count per calendar month, oldest month first.

        Args:
            last: If given, keep only the trailing `last` months
        """
        rows = self.store.monthly_totals()
        if last is not None:
            if last < 0:
                raise ValidationError(f"last must not be negative, got {last}", "last")
            rows = rows[-last:] if last else []
        return rows

    def bank_rollup(self) -> list[RollupRow]:
        """Total and count per bank account name."""
        return self.store.bank_totals()

    def month_total(self, year: int, month: int) -> Decimal:
        """Get the total spent in one calendar month."""
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid month: {month}", "month")

        last_day = calendar.monthrange(year, month)[1]
        start = datetime(year, month, 1)
        end = datetime.combine(date(year, month, last_day), time.max)

        transactions = self.store.list_transactions(start=start, end=end)
        return quantize_amount(sum((t.amount for t in transactions), Decimal("0")))

    def current_month_total(self, today: Optional[date] = None) -> Decimal:
        """Get the total spent so far in the current month."""
        today = today or date.today()
        return self.month_total(today.year, today.month)

    def summary(self) -> dict[str, Any]:
        """
        Get an overview of all joinable transactions.

        Returns:
            Dictionary with the overall total and count plus all three rollups
        """
        categories = self.category_rollup()
        total = quantize_amount(sum((row.total for row in categories), Decimal("0")))
        count = sum(row.count for row in categories)

        return {
            "total": float(total),
            "count": count,
            "categories": [row.to_dict() for row in categories],
            "months": [row.to_dict() for row in self.monthly_rollup()],
            "banks": [row.to_dict() for row in self.bank_rollup()],
        }
