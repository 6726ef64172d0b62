from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .account import BankAccount, ExpenseCategory, format_timestamp, parse_timestamp

CENT = Decimal("0.01")


def quantize_amount(amount: Decimal) -> Decimal:
    """Round an amount to exactly two decimal places."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def amount_to_cents(amount: Decimal) -> int:
    """Convert a Decimal amount to integer minor units."""
    return int(quantize_amount(amount) * 100)


def cents_to_amount(cents: int) -> Decimal:
    """Convert integer minor units back to a two-place Decimal."""
    return quantize_amount(Decimal(cents) / 100)


@dataclass
class Transaction:
    """A single expense paid from a bank account into an expense category."""

    id: str
    bank_account_id: str
    expense_category_id: str
    amount: Decimal
    transaction_date: datetime
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "bank_account_id": self.bank_account_id,
            "expense_category_id": self.expense_category_id,
            "description": self.description,
            "amount": f"{self.amount:.2f}",
            "transaction_date": format_timestamp(self.transaction_date),
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_row(cls, row: tuple) -> "Transaction":
        """Create a Transaction from a database row (amount in minor units)."""
        return cls(
            id=row[0],
            bank_account_id=row[1],
            expense_category_id=row[2],
            description=row[3],
            amount=cents_to_amount(row[4]),
            transaction_date=datetime.fromisoformat(row[5]),
            created_at=parse_timestamp(row[6]),
        )


@dataclass
class EnrichedTransaction:
    """
    A Transaction joined with its BankAccount and ExpenseCategory.

    Never stored; built on every read. Only transactions whose references
    both resolve are ever represented this way.
    """

    transaction: Transaction
    bank_account: BankAccount
    expense_category: ExpenseCategory

    @property
    def id(self) -> str:
        return self.transaction.id

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount

    @property
    def transaction_date(self) -> datetime:
        return self.transaction.transaction_date

    @property
    def description(self) -> Optional[str]:
        return self.transaction.description

    @property
    def created_at(self) -> Optional[datetime]:
        return self.transaction.created_at

    def sort_key(self) -> tuple:
        """Key for the default most-recent-first ordering (use with reverse=True)."""
        return (
            self.transaction.transaction_date,
            self.transaction.created_at or datetime.min,
            self.transaction.id,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            **self.transaction.to_dict(),
            "bank_account": self.bank_account.to_dict(),
            "expense_category": self.expense_category.to_dict(),
        }


@dataclass
class RollupRow:
    """One summary row of a grouped aggregation."""

    key: str
    total: Decimal
    count: int
    key_name: str = "key"

    def to_dict(self) -> dict:
        """Convert to dictionary representation, total rounded for display."""
        return {
            self.key_name: self.key,
            "total": float(quantize_amount(self.total)),
            "count": self.count,
        }


def group_totals(transactions, key_func, key_name: str = "key") -> list[RollupRow]:
    """
    Group transactions by key_func and sum their amounts exactly.

    Keys keep first-seen order; keys with no transactions never appear.
    """
    totals: dict = {}
    counts: dict = {}

    for txn in transactions:
        key = key_func(txn)
        totals[key] = totals.get(key, Decimal("0")) + txn.amount
        counts[key] = counts.get(key, 0) + 1

    return [
        RollupRow(key=key, total=totals[key], count=counts[key], key_name=key_name)
        for key in totals
    ]
