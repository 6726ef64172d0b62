"""
Exception types raised by the Spendbook repository layer.

"Not found" is never an exception: lookups return None and deletes return False.
"""

from typing import Optional


class SpendbookError(Exception):
    """Base class for all Spendbook errors."""


class ValidationError(SpendbookError, ValueError):
    """Input failed validation (missing field, non-positive amount, bad date)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class PersistenceError(SpendbookError):
    """The storage provider is unreachable or rejected a write."""
