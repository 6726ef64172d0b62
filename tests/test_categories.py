import pytest

from spendbook.errors import ValidationError


def test_create_category(repo):
    category = repo.categories.create(
        {"name": "Fuel", "group": "necessity", "category": "transport"}
    )

    assert category.id
    assert category.created_at is not None
    assert repo.categories.get(category.id) == category


@pytest.mark.parametrize("missing", ["name", "group", "category"])
def test_create_category_requires_all_fields(repo, missing):
    fields = {"name": "Fuel", "group": "necessity", "category": "transport"}
    del fields[missing]

    with pytest.raises(ValidationError) as excinfo:
        repo.categories.create(fields)

    assert excinfo.value.field == missing


def test_update_category(repo, category):
    updated = repo.categories.update(category.id, {"category": "household"})

    assert updated.category == "household"
    assert updated.name == "Groceries"
    assert updated.group == "necessity"


def test_update_category_with_no_fields_returns_it_unchanged(repo, category):
    assert repo.categories.update(category.id, {}) == category


def test_update_missing_category_returns_none(repo):
    assert repo.categories.update("missing", {"name": "x"}) is None


def test_delete_category(repo, category):
    assert repo.categories.delete(category.id) is True
    assert repo.categories.list() == []
    assert repo.categories.delete(category.id) is False
