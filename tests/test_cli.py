import pytest

from spendbook.cli import main


def test_summary_on_empty_store(capsys):
    assert main(["--store", "memory", "--no-log-file", "summary"]) == 0

    out = capsys.readouterr().out
    assert "Total spent: 0.00 across 0 transactions" in out
    assert "By category" in out


def test_transactions_on_sqlite_store(tmp_path, capsys):
    db_path = tmp_path / "cli.db"

    assert main(["--db", str(db_path), "--no-log-file", "transactions"]) == 0

    assert "0 transaction(s)" in capsys.readouterr().out
    assert db_path.exists()


def test_export_writes_file(tmp_path):
    output = tmp_path / "out.csv"

    code = main(
        ["--store", "memory", "--no-log-file", "export", "--output", str(output)]
    )

    assert code == 0
    assert output.read_text(encoding="utf-8").startswith("Date,Bank Account")


def test_invalid_date_returns_error(capsys):
    code = main(
        [
            "--store",
            "memory",
            "--no-log-file",
            "transactions",
            "--start",
            "bad",
            "--end",
            "2024-01-01",
        ]
    )

    assert code == 1
    assert "Error:" in capsys.readouterr().err


@pytest.mark.parametrize("command", ["transactions", "export"])
@pytest.mark.parametrize("bound", ["--start", "--end"])
def test_single_date_bound_is_rejected(command, bound, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--store", "memory", "--no-log-file", command, bound, "2024-01-01"])

    assert excinfo.value.code == 2
    assert "--start and --end must be given together" in capsys.readouterr().err
