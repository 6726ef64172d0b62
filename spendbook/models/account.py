"""
Account and category models.

Defines the BankAccount that money is spent from and the ExpenseCategory
it is spent on. Both are plain records identified by an opaque string ID.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a naive timestamp with a fixed width so text ordering matches time ordering."""
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp written by format_timestamp."""
    return datetime.fromisoformat(value) if value else None


@dataclass
class BankAccount:
    """
    Represents a bank or cash account that transactions are paid from.

    Attributes:
        id: Opaque unique identifier (uuid4 string)
        account_name: Display name, e.g. "HDFC"
        group: Free-text tag such as "savings", "cash" or "credit"
        description: Optional description
        created_at: When the account was created
    """

    id: str
    account_name: str
    group: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "account_name": self.account_name,
            "group": self.group,
            "description": self.description,
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_row(cls, row: tuple) -> "BankAccount":
        """Create a BankAccount from a database row."""
        return cls(
            id=row[0],
            account_name=row[1],
            group=row[2],
            description=row[3],
            created_at=parse_timestamp(row[4]),
        )


@dataclass
class ExpenseCategory:
    """
    Represents an expense label with two broader classification tags.

    The three text fields are independent, user-supplied axes. For example
    name="Groceries", category="food", group="necessity".

    Attributes:
        id: Opaque unique identifier (uuid4 string)
        name: The specific expense label
        group: Broad tag, e.g. "necessity" or "lifestyle"
        category: Mid-level tag, e.g. "food" or "transport"
        created_at: When the category was created
    """

    id: str
    name: str
    group: str
    category: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "group": self.group,
            "category": self.category,
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_row(cls, row: tuple) -> "ExpenseCategory":
        """Create an ExpenseCategory from a database row."""
        return cls(
            id=row[0],
            name=row[1],
            group=row[2],
            category=row[3],
            created_at=parse_timestamp(row[4]),
        )


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching stored timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
