import pytest

from spendbook.errors import ValidationError


def test_create_account_assigns_id_and_timestamp(repo):
    account = repo.accounts.create(
        {"account_name": "HDFC", "group": "savings", "description": "Salary account"}
    )

    assert account.id
    assert account.created_at is not None
    assert account.account_name == "HDFC"
    assert account.group == "savings"
    assert account.description == "Salary account"


def test_created_account_is_readable(repo, account):
    fetched = repo.accounts.get(account.id)

    assert fetched == account
    assert [a.id for a in repo.accounts.list()] == [account.id]


def test_account_ids_are_unique(repo):
    first = repo.accounts.create({"account_name": "HDFC", "group": "savings"})
    second = repo.accounts.create({"account_name": "HDFC", "group": "savings"})

    assert first.id != second.id
    assert len(repo.accounts.list()) == 2


def test_create_account_accepts_camel_case(repo):
    account = repo.accounts.create({"accountName": "Cash", "group": "cash"})

    assert account.account_name == "Cash"


@pytest.mark.parametrize(
    "fields",
    [
        {"group": "savings"},
        {"account_name": "HDFC"},
        {"account_name": "   ", "group": "savings"},
        {"account_name": "HDFC", "group": ""},
    ],
)
def test_create_account_requires_name_and_group(repo, fields):
    with pytest.raises(ValidationError):
        repo.accounts.create(fields)

    assert repo.accounts.list() == []


def test_create_account_rejects_unknown_field(repo):
    with pytest.raises(ValidationError) as excinfo:
        repo.accounts.create({"account_name": "HDFC", "group": "savings", "iban": "x"})

    assert excinfo.value.field == "iban"


def test_update_account_changes_only_supplied_fields(repo, account):
    updated = repo.accounts.update(account.id, {"group": "salary"})

    assert updated.group == "salary"
    assert updated.account_name == account.account_name
    assert updated.created_at == account.created_at


def test_update_account_ignores_immutable_fields(repo, account):
    updated = repo.accounts.update(
        account.id, {"id": "other", "created_at": "2000-01-01", "account_name": "ICICI"}
    )

    assert updated.id == account.id
    assert updated.created_at == account.created_at
    assert updated.account_name == "ICICI"


def test_update_missing_account_returns_none(repo):
    assert repo.accounts.update("missing", {"group": "cash"}) is None


def test_update_account_rejects_blank_name(repo, account):
    with pytest.raises(ValidationError):
        repo.accounts.update(account.id, {"account_name": " "})

    assert repo.accounts.get(account.id).account_name == "HDFC"


def test_delete_account(repo, account):
    assert repo.accounts.delete(account.id) is True
    assert repo.accounts.get(account.id) is None
    assert repo.accounts.delete(account.id) is False


def test_get_missing_account_returns_none(repo):
    assert repo.accounts.get("missing") is None
    assert repo.accounts.get("") is None


def test_update_account_with_no_fields_returns_it_unchanged(repo, account):
    assert repo.accounts.update(account.id, {}) == account
    assert repo.accounts.update(account.id) == account
