from datetime import date, datetime
from decimal import Decimal

import pytest

from spendbook.errors import ValidationError


@pytest.fixture
def fuel(repo):
    return repo.categories.create(
        {"name": "Fuel", "group": "necessity", "category": "transport"}
    )


@pytest.fixture
def cash(repo):
    return repo.accounts.create({"account_name": "Cash", "group": "cash"})


def _as_dict(rows):
    return {row.key: (row.total, row.count) for row in rows}


def test_category_rollup(repo, add_transaction, fuel):
    add_transaction("100.10", "2024-01-02")
    add_transaction("50.20", "2024-01-03")
    add_transaction("40", "2024-01-04", expense_category_id=fuel.id)

    rollup = _as_dict(repo.category_rollup())

    assert rollup == {
        "food": (Decimal("150.30"), 2),
        "transport": (Decimal("40.00"), 1),
    }


def test_bank_rollup(repo, add_transaction, cash):
    add_transaction("10", "2024-01-02")
    add_transaction("5.55", "2024-01-03", bank_account_id=cash.id)
    add_transaction("4.45", "2024-01-04", bank_account_id=cash.id)

    rollup = _as_dict(repo.bank_rollup())

    assert rollup == {"HDFC": (Decimal("10.00"), 1), "Cash": (Decimal("10.00"), 2)}


def test_rollup_totals_match_transaction_sum(repo, add_transaction, fuel, cash):
    add_transaction("0.10", "2024-01-02")
    add_transaction("0.20", "2024-02-03", bank_account_id=cash.id)
    add_transaction("19.99", "2024-03-04", expense_category_id=fuel.id)

    expected = sum((t.amount for t in repo.transactions.list()), Decimal("0"))

    for rows in (repo.category_rollup(), repo.monthly_rollup(), repo.bank_rollup()):
        assert sum((row.total for row in rows), Decimal("0")) == expected
        assert sum(row.count for row in rows) == 3


def test_empty_rollups(repo):
    assert repo.category_rollup() == []
    assert repo.monthly_rollup() == []
    assert repo.bank_rollup() == []


def test_monthly_rollup_is_chronological_across_years(repo, add_transaction):
    add_transaction("30", "2024-01-15")
    add_transaction("10", "2023-11-02")
    add_transaction("20", "2023-12-31T23:59:59")
    add_transaction("5", "2024-01-01")

    rows = repo.monthly_rollup()

    assert [row.key for row in rows] == ["Nov 2023", "Dec 2023", "Jan 2024"]
    assert rows[2].total == Decimal("35.00")
    assert rows[2].count == 2


def test_monthly_rollup_trailing_months(repo, add_transaction):
    for month in range(1, 5):
        add_transaction("10", f"2024-{month:02d}-10")

    assert [row.key for row in repo.monthly_rollup(last=2)] == ["Mar 2024", "Apr 2024"]
    assert repo.monthly_rollup(last=0) == []
    assert len(repo.monthly_rollup(last=12)) == 4

    with pytest.raises(ValidationError):
        repo.monthly_rollup(last=-1)


def test_date_range_is_inclusive(repo, add_transaction):
    first = add_transaction("10", "2024-01-01")
    last = add_transaction("20", "2024-01-31T23:59:59")
    add_transaction("30", "2024-02-01")
    add_transaction("40", "2023-12-31T23:59:59")

    found = repo.filter_by_date_range("2024-01-01", "2024-01-31")

    assert [t.id for t in found] == [last.id, first.id]


def test_date_range_accepts_date_objects(repo, add_transaction):
    txn = add_transaction("10", "2024-01-15T18:30:00")

    found = repo.filter_by_date_range(date(2024, 1, 15), date(2024, 1, 15))

    assert [t.id for t in found] == [txn.id]


def test_date_range_with_datetime_end_is_exact(repo, add_transaction):
    add_transaction("10", "2024-01-15T18:30:00")

    found = repo.filter_by_date_range("2024-01-15", datetime(2024, 1, 15, 12, 0))

    assert found == []


def test_inverted_date_range_returns_empty(repo, add_transaction):
    add_transaction("10", "2024-01-15")

    assert repo.filter_by_date_range("2024-02-01", "2024-01-01") == []


def test_date_range_rejects_bad_bound(repo):
    with pytest.raises(ValidationError) as excinfo:
        repo.filter_by_date_range("not-a-date", "2024-01-01")

    assert excinfo.value.field == "start_date"


def test_month_total(repo, add_transaction):
    add_transaction("10.25", "2024-02-01")
    add_transaction("5.25", "2024-02-29T23:00:00")
    add_transaction("99", "2024-03-01")

    assert repo.queries.month_total(2024, 2) == Decimal("15.50")
    assert repo.queries.month_total(2024, 4) == Decimal("0.00")

    with pytest.raises(ValidationError):
        repo.queries.month_total(2024, 13)


def test_current_month_total(repo, add_transaction):
    add_transaction("12", "2024-05-03")

    assert repo.queries.current_month_total(today=date(2024, 5, 20)) == Decimal("12.00")


def test_summary(repo, add_transaction, fuel):
    add_transaction("10.50", "2024-01-02")
    add_transaction("4.50", "2024-02-03", expense_category_id=fuel.id)

    summary = repo.queries.summary()

    assert summary["total"] == 15.0
    assert summary["count"] == 2
    assert {row["category"] for row in summary["categories"]} == {"food", "transport"}
    assert [row["month"] for row in summary["months"]] == ["Jan 2024", "Feb 2024"]
    assert summary["banks"] == [{"bank_account": "HDFC", "total": 15.0, "count": 2}]


def test_date_range_rejects_basic_iso_dates(repo, add_transaction):
    add_transaction("10", "2024-01-15T10:00:00")

    with pytest.raises(ValidationError) as excinfo:
        repo.filter_by_date_range("20240115", "20240115")

    assert excinfo.value.field == "start_date"
    assert len(repo.filter_by_date_range("2024-01-15", "2024-01-15")) == 1
