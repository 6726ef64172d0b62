"""
SQLite store with connection management and schema initialization.

Amounts are stored as integer minor units so SUM() in grouped queries is exact.
Timestamps are naive ISO-8601 text with a fixed width, so text comparison in
range filters and ORDER BY matches chronological order.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from spendbook.config import DB_TIMEOUT, ERROR_MESSAGES, MAX_AMOUNT_CENTS, get_db_path
from spendbook.errors import PersistenceError
from spendbook.models import (
    BankAccount,
    EnrichedTransaction,
    ExpenseCategory,
    RollupRow,
    Transaction,
    amount_to_cents,
    cents_to_amount,
)
from spendbook.models.account import format_timestamp

from .base import (
    ACCOUNT_COLUMNS,
    CATEGORY_COLUMNS,
    TRANSACTION_COLUMNS,
    BaseStore,
    format_month,
)

logger = logging.getLogger(__name__)

ENRICHED_SELECT = """
    SELECT
        t.id, t.bank_account_id, t.expense_category_id, t.description,
        t.amount_cents, t.transaction_date, t.created_at,
        a.id, a.account_name, a."group", a.description, a.created_at,
        c.id, c.name, c."group", c.category, c.created_at
    FROM transactions t
    JOIN bank_accounts a ON a.id = t.bank_account_id
    JOIN expense_categories c ON c.id = t.expense_category_id
"""

DEFAULT_ORDER = " ORDER BY t.transaction_date DESC, t.created_at DESC, t.id DESC"


class SQLiteStore(BaseStore):
    """
    Store backed by a SQLite database file.

    Opens one connection per operation; each call commits or rolls back on
    its own and no connection is held between calls.
    """

    name = "sqlite"

    def __init__(self, db_path: Optional[Path] = None, init_schema: bool = True):
        """
        Initialize the SQLite store.

        Args:
            db_path: Path to the SQLite database file. Defaults to the configured path
            init_schema: Whether to initialize the schema on startup
        """
        self.db_path = Path(db_path) if db_path else get_db_path()
        self._ensure_db_directory()
        if init_schema:
            self._init_schema()

    def _ensure_db_directory(self):
        """Ensure the database directory exists."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Database directory ensured: {self.db_path.parent}")
        except OSError as e:
            logger.error(f"Failed to create database directory: {e}", exc_info=True)
            raise PersistenceError(ERROR_MESSAGES["database_error"]) from e

    @contextmanager
    def _get_connection(self):
        """Context manager for database connections with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=DB_TIMEOUT)
            conn.row_factory = sqlite3.Row
            # Foreign keys stay unenforced: deleting a referenced account or
            # category is allowed and the INNER JOINs hide dangling rows.
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}", exc_info=True)
            if conn:
                conn.rollback()
            raise PersistenceError(ERROR_MESSAGES["database_error"]) from e
        except Exception:
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                conn.close()

    def _init_schema(self):
        """Initialize the database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS bank_accounts (
                    id TEXT PRIMARY KEY,
                    account_name TEXT NOT NULL CHECK(length(account_name) > 0),
                    "group" TEXT NOT NULL CHECK(length("group") > 0),
                    description TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS expense_categories (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL CHECK(length(name) > 0),
                    "group" TEXT NOT NULL CHECK(length("group") > 0),
                    category TEXT NOT NULL CHECK(length(category) > 0),
                    created_at TEXT NOT NULL
                )
            """)

            # amount_cents covers decimal(10, 2)
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS transactions (
                    id TEXT PRIMARY KEY,
                    bank_account_id TEXT NOT NULL REFERENCES bank_accounts(id),
                    expense_category_id TEXT NOT NULL
                        REFERENCES expense_categories(id),
                    description TEXT,
                    amount_cents INTEGER NOT NULL CHECK(
                        amount_cents > 0 AND amount_cents <= {MAX_AMOUNT_CENTS}
                    ),
                    transaction_date TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            self._create_indexes(conn)

            logger.debug(f"Schema initialized at {self.db_path}")

    def _create_indexes(self, conn):
        """Create database indexes for query performance."""
        indexes = [
            ("idx_transactions_date", "transactions", "transaction_date DESC"),
            ("idx_transactions_account", "transactions", "bank_account_id"),
            ("idx_transactions_category", "transactions", "expense_category_id"),
        ]

        for index_name, table, columns in indexes:
            conn.execute(f"""
                CREATE INDEX IF NOT EXISTS {index_name}
                ON {table}({columns})
            """)

    @staticmethod
    def _set_clause(fields: dict[str, Any]) -> tuple[str, list]:
        """Build an UPDATE SET clause from already-whitelisted column values."""
        assignments = ", ".join(f'"{column}" = ?' for column in fields)
        return assignments, list(fields.values())

    # =========================================================================
    # Bank Accounts
    # =========================================================================

    def list_accounts(self) -> list[BankAccount]:
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT id, account_name, "group", description, created_at
                FROM bank_accounts
                ORDER BY created_at, rowid
                """
            )
            return [BankAccount.from_row(tuple(row)) for row in cursor.fetchall()]

    def get_account(self, account_id: str) -> Optional[BankAccount]:
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT id, account_name, "group", description, created_at
                FROM bank_accounts WHERE id = ?
                """,
                (account_id,),
            )
            row = cursor.fetchone()
            return BankAccount.from_row(tuple(row)) if row else None

    def insert_account(self, account: BankAccount) -> BankAccount:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO bank_accounts (
                    id, account_name, "group", description, created_at
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    account.id,
                    account.account_name,
                    account.group,
                    account.description,
                    format_timestamp(account.created_at),
                ),
            )
        return account

    def update_account(
        self, account_id: str, fields: dict[str, Any]
    ) -> Optional[BankAccount]:
        values = {k: v for k, v in fields.items() if k in ACCOUNT_COLUMNS}
        if values:
            assignments, params = self._set_clause(values)
            with self._get_connection() as conn:
                conn.execute(
                    f"UPDATE bank_accounts SET {assignments} WHERE id = ?",
                    (*params, account_id),
                )
        return self.get_account(account_id)

    def delete_account(self, account_id: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM bank_accounts WHERE id = ?", (account_id,)
            )
            return cursor.rowcount > 0

    # =========================================================================
    # Expense Categories
    # =========================================================================

    def list_categories(self) -> list[ExpenseCategory]:
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT id, name, "group", category, created_at
                FROM expense_categories
                ORDER BY created_at, rowid
                """
            )
            return [ExpenseCategory.from_row(tuple(row)) for row in cursor.fetchall()]

    def get_category(self, category_id: str) -> Optional[ExpenseCategory]:
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT id, name, "group", category, created_at
                FROM expense_categories WHERE id = ?
                """,
                (category_id,),
            )
            row = cursor.fetchone()
            return ExpenseCategory.from_row(tuple(row)) if row else None

    def insert_category(self, category: ExpenseCategory) -> ExpenseCategory:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO expense_categories (
                    id, name, "group", category, created_at
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    category.id,
                    category.name,
                    category.group,
                    category.category,
                    format_timestamp(category.created_at),
                ),
            )
        return category

    def update_category(
        self, category_id: str, fields: dict[str, Any]
    ) -> Optional[ExpenseCategory]:
        values = {k: v for k, v in fields.items() if k in CATEGORY_COLUMNS}
        if values:
            assignments, params = self._set_clause(values)
            with self._get_connection() as conn:
                conn.execute(
                    f"UPDATE expense_categories SET {assignments} WHERE id = ?",
                    (*params, category_id),
                )
        return self.get_category(category_id)

    def delete_category(self, category_id: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM expense_categories WHERE id = ?", (category_id,)
            )
            return cursor.rowcount > 0

    # =========================================================================
    # Transactions
    # =========================================================================

    @staticmethod
    def _enriched_from_row(row) -> EnrichedTransaction:
        values = tuple(row)
        return EnrichedTransaction(
            transaction=Transaction.from_row(values[0:7]),
            bank_account=BankAccount.from_row(values[7:12]),
            expense_category=ExpenseCategory.from_row(values[12:17]),
        )

    @staticmethod
    def _check_references(conn, bank_account_id: str, expense_category_id: str):
        """Reject writes pointing at accounts or categories that do not exist."""
        cursor = conn.execute(
            """
            SELECT
                EXISTS(SELECT 1 FROM bank_accounts WHERE id = ?),
                EXISTS(SELECT 1 FROM expense_categories WHERE id = ?)
            """,
            (bank_account_id, expense_category_id),
        )
        has_account, has_category = cursor.fetchone()
        if not (has_account and has_category):
            logger.warning(
                f"Rejected transaction write: account={bank_account_id} "
                f"category={expense_category_id}"
            )
            raise PersistenceError(ERROR_MESSAGES["missing_reference"])

    def list_transactions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[EnrichedTransaction]:
        query = ENRICHED_SELECT + " WHERE 1 = 1"
        params: list = []

        if start is not None:
            query += " AND t.transaction_date >= ?"
            params.append(format_timestamp(start))

        if end is not None:
            query += " AND t.transaction_date <= ?"
            params.append(format_timestamp(end))

        query += DEFAULT_ORDER

        with self._get_connection() as conn:
            cursor = conn.execute(query, params)
            return [self._enriched_from_row(row) for row in cursor.fetchall()]

    def get_transaction(self, transaction_id: str) -> Optional[EnrichedTransaction]:
        with self._get_connection() as conn:
            cursor = conn.execute(ENRICHED_SELECT + " WHERE t.id = ?", (transaction_id,))
            row = cursor.fetchone()
            return self._enriched_from_row(row) if row else None

    def _get_raw_transaction(self, conn, transaction_id: str) -> Optional[Transaction]:
        cursor = conn.execute(
            """
            SELECT id, bank_account_id, expense_category_id, description,
                   amount_cents, transaction_date, created_at
            FROM transactions WHERE id = ?
            """,
            (transaction_id,),
        )
        row = cursor.fetchone()
        return Transaction.from_row(tuple(row)) if row else None

    def insert_transaction(self, transaction: Transaction) -> Transaction:
        with self._get_connection() as conn:
            self._check_references(
                conn, transaction.bank_account_id, transaction.expense_category_id
            )
            conn.execute(
                """
                INSERT INTO transactions (
                    id, bank_account_id, expense_category_id, description,
                    amount_cents, transaction_date, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    transaction.id,
                    transaction.bank_account_id,
                    transaction.expense_category_id,
                    transaction.description,
                    amount_to_cents(transaction.amount),
                    format_timestamp(transaction.transaction_date),
                    format_timestamp(transaction.created_at),
                ),
            )
        return transaction

    def update_transaction(
        self, transaction_id: str, fields: dict[str, Any]
    ) -> Optional[Transaction]:
        values: dict[str, Any] = {}
        for key, value in fields.items():
            if key not in TRANSACTION_COLUMNS:
                continue
            if key == "amount":
                values["amount_cents"] = amount_to_cents(value)
            elif key == "transaction_date":
                values["transaction_date"] = format_timestamp(value)
            else:
                values[key] = value

        with self._get_connection() as conn:
            existing = self._get_raw_transaction(conn, transaction_id)
            if not existing:
                return None

            if "bank_account_id" in values or "expense_category_id" in values:
                self._check_references(
                    conn,
                    values.get("bank_account_id", existing.bank_account_id),
                    values.get("expense_category_id", existing.expense_category_id),
                )

            if values:
                assignments, params = self._set_clause(values)
                conn.execute(
                    f"UPDATE transactions SET {assignments} WHERE id = ?",
                    (*params, transaction_id),
                )

            return self._get_raw_transaction(conn, transaction_id)

    def delete_transaction(self, transaction_id: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ?", (transaction_id,)
            )
            return cursor.rowcount > 0

    # =========================================================================
    # Aggregations
    # =========================================================================

    def _grouped(self, key_expr: str, order_expr: str) -> list[tuple[str, int, int]]:
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT {key_expr} AS key,
                       SUM(t.amount_cents) AS total_cents,
                       COUNT(*) AS count
                FROM transactions t
                JOIN bank_accounts a ON a.id = t.bank_account_id
                JOIN expense_categories c ON c.id = t.expense_category_id
                GROUP BY {key_expr}
                ORDER BY {order_expr}
                """
            )
            return [
                (row["key"], row["total_cents"], row["count"])
                for row in cursor.fetchall()
            ]

    def category_totals(self) -> list[RollupRow]:
        return [
            RollupRow(key=key, total=cents_to_amount(cents), count=count, key_name="category")
            for key, cents, count in self._grouped("c.category", "c.category")
        ]

    def monthly_totals(self) -> list[RollupRow]:
        # Fixed-width timestamps make the first 7 characters "YYYY-MM"
        rows = self._grouped("substr(t.transaction_date, 1, 7)", "key")
        return [
            RollupRow(
                key=format_month(int(key[0:4]), int(key[5:7])),
                total=cents_to_amount(cents),
                count=count,
                key_name="month",
            )
            for key, cents, count in rows
        ]

    def bank_totals(self) -> list[RollupRow]:
        return [
            RollupRow(
                key=key,
                total=cents_to_amount(cents),
                count=count,
                key_name="bank_account",
            )
            for key, cents, count in self._grouped("a.account_name", "a.account_name")
        ]
