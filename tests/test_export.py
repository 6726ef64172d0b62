import io
from datetime import date

from openpyxl import load_workbook

from spendbook.services import ExportFormat

HEADER = "Date,Bank Account,Expense Name,Category,Group,Description,Amount"


def test_export_csv_empty_has_header_only(repo):
    assert repo.export_csv() == HEADER + "\n"


def test_export_csv_rows(repo, add_transaction):
    add_transaction("150.5", "2024-01-15T10:00:00", description="milk, eggs")
    add_transaction("20", "2024-01-16")

    lines = repo.export_csv().splitlines()

    assert lines[0] == HEADER
    assert lines[1] == '"2024-01-16","HDFC","Groceries","food","necessity","","20.00"'
    assert lines[2] == (
        '"2024-01-15","HDFC","Groceries","food","necessity","milk, eggs","150.50"'
    )


def test_export_csv_escapes_quotes(repo, add_transaction):
    add_transaction("5", "2024-01-15", description='the "big" shop')

    assert '"the ""big"" shop"' in repo.export_csv()


def test_export_csv_with_range(repo, add_transaction):
    add_transaction("10", "2024-01-15")
    add_transaction("20", "2024-02-15")

    lines = repo.export_csv("2024-02-01", "2024-02-29").splitlines()

    assert len(lines) == 2
    assert lines[1].startswith('"2024-02-15"')


def test_export_csv_with_single_bound_exports_everything(repo, add_transaction):
    add_transaction("10", "2024-01-15")
    add_transaction("20", "2024-02-15")

    assert len(repo.export_csv("2024-02-01", None).splitlines()) == 3


def test_export_to_csv_returns_utf8_bytes(repo, add_transaction):
    add_transaction("10", "2024-01-15", description="Café")

    buffer = repo.exports.export_to_csv()

    assert buffer.getvalue().decode("utf-8").splitlines()[1].endswith('"Café","10.00"')


def test_export_to_xlsx(repo, add_transaction):
    add_transaction("150.50", "2024-01-15", description="Weekly shop")
    add_transaction("20", "2024-01-16")

    buffer = repo.exports.export_to_xlsx()
    workbook = load_workbook(io.BytesIO(buffer.getvalue()))

    assert workbook.sheetnames == ["Transactions", "Summary"]
    sheet = workbook["Transactions"]
    assert sheet.max_row == 3
    assert [cell.value for cell in sheet[1]] == HEADER.split(",")
    assert sheet.cell(row=2, column=2).value == "HDFC"
    assert sheet.cell(row=3, column=6).value == "Weekly shop"
    assert float(sheet.cell(row=3, column=7).value) == 150.5


def test_get_filename(repo):
    name = repo.exports.get_filename(ExportFormat.CSV)
    ranged = repo.exports.get_filename(
        ExportFormat.XLSX, date(2024, 1, 1), date(2024, 1, 31)
    )

    assert name.startswith("expenses_") and name.endswith(".csv")
    assert ranged.endswith("_20240101-20240131.xlsx")


def test_export_to_xlsx_keeps_formula_like_names_as_text(repo, account):
    category = repo.categories.create(
        {"name": "=SUM(A1)", "group": "necessity", "category": "=1+1"}
    )
    repo.transactions.create(
        {
            "bank_account_id": account.id,
            "expense_category_id": category.id,
            "amount": "10",
            "transaction_date": "2024-01-15",
        }
    )

    buffer = repo.exports.export_to_xlsx()
    workbook = load_workbook(io.BytesIO(buffer.getvalue()))

    transactions = workbook["Transactions"]
    assert transactions["C2"].value == "=SUM(A1)"
    assert transactions["C2"].data_type == "s"
    assert transactions["D2"].value == "=1+1"
    assert transactions["D2"].data_type == "s"

    summary = workbook["Summary"]
    assert summary["A4"].value == "Category"
    assert summary["A5"].value == "=1+1"
    assert summary["A5"].data_type == "s"
