from .account import BankAccount, ExpenseCategory
from .transaction import (
    EnrichedTransaction,
    RollupRow,
    Transaction,
    amount_to_cents,
    cents_to_amount,
    group_totals,
    quantize_amount,
)

__all__ = [
    "BankAccount",
    "EnrichedTransaction",
    "ExpenseCategory",
    "RollupRow",
    "Transaction",
    "amount_to_cents",
    "cents_to_amount",
    "group_totals",
    "quantize_amount",
]
