from datetime import date, datetime
from decimal import Decimal

import pytest

from spendbook.errors import ValidationError
from spendbook.services.parsing import (
    AmountParser,
    DateParser,
    clean_text,
    normalize_fields,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("150.50", Decimal("150.50")),
        ("20", Decimal("20.00")),
        ("1,234.56", Decimal("1234.56")),
        (" 7.5 ", Decimal("7.50")),
        (".99", Decimal("0.99")),
        (42, Decimal("42.00")),
        (Decimal("0.01"), Decimal("0.01")),
        ("99999999.99", Decimal("99999999.99")),
    ],
)
def test_parse_amount(value, expected):
    assert AmountParser.parse(value) == expected


@pytest.mark.parametrize(
    "value",
    ["0", "0.00", "-1", "1.001", "1e3", "12abc", "1,23", "100000000.00", "NaN", 1.5],
)
def test_parse_amount_rejects(value):
    with pytest.raises(ValidationError):
        AmountParser.parse(value)


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        AmountParser.parse("-1")


def test_parse_date_only():
    assert DateParser.parse("2024-01-15") == datetime(2024, 1, 15)
    assert DateParser.parse(date(2024, 1, 15)) == datetime(2024, 1, 15)


def test_parse_zulu_timestamp():
    parsed = DateParser.parse("2024-01-15T10:00:00Z")

    assert parsed == datetime(2024, 1, 15, 10, 0)
    assert parsed.tzinfo is None


def test_parse_range_extends_date_only_end():
    start, end = DateParser.parse_range("2024-01-01", "2024-01-31")

    assert start == datetime(2024, 1, 1)
    assert end == datetime(2024, 1, 31, 23, 59, 59, 999999)


def test_is_date_only():
    assert DateParser.is_date_only("2024-01-01")
    assert DateParser.is_date_only(date(2024, 1, 1))
    assert not DateParser.is_date_only("2024-01-01T00:00:00")
    assert not DateParser.is_date_only(datetime(2024, 1, 1))


def test_clean_text():
    assert clean_text("  HDFC ", "account_name") == "HDFC"
    assert clean_text("  ", "description", required=False) is None
    assert clean_text(None, "description", required=False) is None

    with pytest.raises(ValidationError):
        clean_text(None, "account_name")
    with pytest.raises(ValidationError):
        clean_text(123, "account_name")
    with pytest.raises(ValidationError):
        clean_text("abcdef", "account_name", max_length=3)


def test_normalize_fields_maps_aliases_and_drops_immutable_keys():
    normalized = normalize_fields(
        {"accountName": "HDFC", "group": "savings", "id": "x", "createdAt": "y"},
        ["account_name", "group"],
        {"accountName": "account_name"},
    )

    assert normalized == {"account_name": "HDFC", "group": "savings"}


def test_normalize_fields_rejects_non_mapping():
    with pytest.raises(ValidationError):
        normalize_fields(["account_name"], ["account_name"])


@pytest.mark.parametrize("value", ["20240115", "20240115T100000", "2024-1-15"])
def test_parse_date_requires_extended_form(value):
    with pytest.raises(ValidationError):
        DateParser.parse(value)


def test_parse_date_with_space_separator():
    assert DateParser.parse("2024-01-15 10:30:00") == datetime(2024, 1, 15, 10, 30)
