"""
Input parsing and normalization for repository writes.

Amounts are parsed straight into Decimal (never through float) and dates into
naive datetimes, so storage and monthly grouping agree on a single clock.
"""

import re
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional, Union

from spendbook.config import MAX_AMOUNT_CENTS
from spendbook.errors import ValidationError
from spendbook.models.transaction import quantize_amount

# Keys that are assigned by the store and never accepted from callers
IMMUTABLE_FIELDS = frozenset({"id", "created_at", "createdAt"})

DateInput = Union[str, date, datetime]


class AmountParser:
    """
    Parser for positive money amounts with at most two decimal places.

    Supports:
    - Decimal and int values
    - Plain numeric strings: "150.50", "20"
    - Western thousand separators: "1,234.56"
    """

    # Matches: 150, 150.5, 150.50, 1,234.56
    AMOUNT_PATTERN = re.compile(
        r"""
        ^
        (?P<number>
            \d{1,3}(?:,\d{3})+(?:\.\d+)?   # Numbers with thousand separators
            |
            \d+(?:\.\d+)?                  # Simple numbers with optional decimal
            |
            \.\d+                          # Leading decimal point
        )
        $
        """,
        re.VERBOSE,
    )

    MAX_AMOUNT = Decimal(MAX_AMOUNT_CENTS) / 100

    @classmethod
    def parse(cls, value: Any, field: str = "amount") -> Decimal:
        """
        Parse an amount and return it as a two-place Decimal.

        Args:
            value: Amount as a string, int or Decimal
            field: Field name used in error messages

        Returns:
            The amount quantized to two decimal places

        Raises:
            ValidationError: If the amount is missing, malformed, not positive,
                has more than two decimal places, or exceeds decimal(10, 2)
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{field} is required", field=field)

        # bool is an int subclass and float would reintroduce binary rounding
        if isinstance(value, (bool, float)):
            raise ValidationError(
                f"{field} must be a string or Decimal, got {type(value).__name__}",
                field=field,
            )

        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, int):
            amount = Decimal(value)
        elif isinstance(value, str):
            amount = cls._parse_number(value.strip(), field)
        else:
            raise ValidationError(
                f"Invalid {field}: {value!r}", field=field
            )

        if not amount.is_finite():
            raise ValidationError(f"Invalid {field}: {value!r}", field=field)

        if amount <= 0:
            raise ValidationError(
                f"{field} must be a positive number, got {value!r}", field=field
            )

        if amount > cls.MAX_AMOUNT:
            raise ValidationError(
                f"{field} exceeds the maximum of {cls.MAX_AMOUNT}", field=field
            )

        if quantize_amount(amount) != amount:
            raise ValidationError(
                f"{field} must have at most two decimal places, got {value!r}",
                field=field,
            )

        return quantize_amount(amount)

    @classmethod
    def _parse_number(cls, number_str: str, field: str) -> Decimal:
        """Parse a numeric string, dropping thousand separators."""
        match = cls.AMOUNT_PATTERN.match(number_str)
        if not match:
            raise ValidationError(f"Invalid {field}: {number_str!r}", field=field)

        try:
            return Decimal(match.group("number").replace(",", ""))
        except InvalidOperation:
            raise ValidationError(
                f"Invalid {field}: {number_str!r}", field=field
            ) from None


class DateParser:
    """Parser for ISO-8601 dates and datetimes into naive datetimes."""

    DATE_ONLY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
    # Extended calendar date, optionally followed by a time part
    EXTENDED_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[T ]|$)")

    @classmethod
    def parse(cls, value: Any, field: str = "transaction_date") -> datetime:
        """
        Parse a date or datetime value.

        Date-only values become midnight. Aware datetimes are converted to UTC
        and stored without tzinfo.
        Strings must use the extended form (YYYY-MM-DD, optionally followed by
        a time); basic forms such as 20240115 are rejected.

        Raises:
            ValidationError: If the value is missing or not ISO-8601 parseable
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{field} is required", field=field)

        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime.combine(value, time.min)
        elif isinstance(value, str):
            text = value.strip()
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            if not cls.EXTENDED_DATE_PATTERN.match(text):
                raise ValidationError(
                    f"Invalid date format for {field}: {value!r}", field=field
                )
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError:
                raise ValidationError(
                    f"Invalid date format for {field}: {value!r}", field=field
                ) from None
        else:
            raise ValidationError(
                f"Invalid date format for {field}: {value!r}", field=field
            )

        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)

        return parsed

    @classmethod
    def is_date_only(cls, value: Any) -> bool:
        """Check whether a value carries a calendar date without a time of day."""
        if isinstance(value, datetime):
            return False
        if isinstance(value, date):
            return True
        return isinstance(value, str) and bool(
            cls.DATE_ONLY_PATTERN.match(value.strip())
        )

    @classmethod
    def parse_range(
        cls, start: DateInput, end: DateInput
    ) -> tuple[datetime, datetime]:
        """
        Parse an inclusive date range.

        A date-only end bound covers the whole day.
        """
        start_at = cls.parse(start, field="start_date")
        end_at = cls.parse(end, field="end_date")

        if cls.is_date_only(end):
            end_at = datetime.combine(end_at.date(), time.max)

        return start_at, end_at


def clean_text(
    value: Any,
    field: str,
    required: bool = True,
    max_length: Optional[int] = None,
) -> Optional[str]:
    """
    Validate a free-text field.

    Required fields must be non-blank strings. Optional blank values become None.
    """
    if value is None:
        if required:
            raise ValidationError(f"{field} is required", field=field)
        return None

    if not isinstance(value, str):
        raise ValidationError(
            f"{field} must be text, got {type(value).__name__}", field=field
        )

    text = value.strip()
    if not text:
        if required:
            raise ValidationError(f"{field} must not be empty", field=field)
        return None

    if max_length is not None and len(text) > max_length:
        raise ValidationError(
            f"{field} is longer than {max_length} characters", field=field
        )

    return text


def normalize_fields(
    fields: Optional[Mapping[str, Any]],
    allowed: Iterable[str],
    aliases: Optional[Mapping[str, str]] = None,
) -> dict[str, Any]:
    """
    Map caller-supplied keys (snake_case or camelCase) onto model field names.

    Store-assigned keys (id, created_at) are silently dropped; any other
    unknown key is rejected.
    """
    if fields is None:
        return {}

    if not isinstance(fields, Mapping):
        raise ValidationError(
            f"Expected a mapping of fields, got {type(fields).__name__}"
        )

    allowed = set(allowed)
    aliases = aliases or {}
    normalized: dict[str, Any] = {}

    for key, value in fields.items():
        if key in IMMUTABLE_FIELDS:
            continue
        name = aliases.get(key, key)
        if name not in allowed:
            raise ValidationError(f"Unknown field: {key}", field=key)
        normalized[name] = value

    return normalized
