import pytest

from spendbook.db import MemoryStore, SQLiteStore, create_repository


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        store = MemoryStore()
    else:
        store = SQLiteStore(tmp_path / "spendbook.db")
    yield store
    store.close()


@pytest.fixture
def repo(store):
    return create_repository(store=store)


@pytest.fixture
def account(repo):
    return repo.accounts.create({"account_name": "HDFC", "group": "savings"})


@pytest.fixture
def category(repo):
    return repo.categories.create(
        {"name": "Groceries", "group": "necessity", "category": "food"}
    )


@pytest.fixture
def add_transaction(repo, account, category):
    """Create a transaction against the default account and category."""

    def _add(amount, transaction_date, **overrides):
        fields = {
            "bank_account_id": account.id,
            "expense_category_id": category.id,
            "amount": amount,
            "transaction_date": transaction_date,
        }
        fields.update(overrides)
        return repo.transactions.create(fields)

    return _add
