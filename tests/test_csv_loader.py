"""Tests for CSV imports."""

from datetime import date

import pytest

from account_recon.config import ReconConfig
from account_recon.models.ledger import TransactionType
from account_recon.parsers.csv_loader import CsvLoader
from account_recon.utils.exceptions import ImportFileError


@pytest.fixture
def loader():
    return CsvLoader(ReconConfig())


class TestLoadTransactions:
    """Tests for CsvLoader.load_transactions()."""

    def test_rows(self, tmp_path, loader):
        path = tmp_path / "transactions.csv"
        path.write_text(
            "ID,Account,Date,Amount,Type,Description,Cleared\n"
            "t1,checking,2024-02-03,20.00,expense,Coffee,yes\n"
            "t2,checking,2024-02-10,-15.00,,Books,\n"
            "t3,checking,2024-02-20,42.50,income,Refund,no\n"
        )

        transactions = loader.load_transactions(path)

        assert [t.id for t in transactions] == ["t1", "t2", "t3"]
        assert transactions[0].amount_cents == -2000
        assert transactions[0].type is TransactionType.EXPENSE
        assert transactions[0].is_cleared
        assert transactions[1].amount_cents == -1500
        assert transactions[1].type is TransactionType.EXPENSE
        assert transactions[2].amount_cents == 4250
        assert transactions[2].date == date(2024, 2, 20)
        assert not transactions[2].is_cleared

    def test_bad_rows_are_skipped(self, tmp_path, loader):
        path = tmp_path / "transactions.csv"
        path.write_text(
            "ID,Account,Date,Amount,Type\n"
            "ok,checking,2024-02-03,1.00,income\n"
            "bad-date,checking,someday,1.00,income\n"
            "bad-amount,checking,2024-02-03,lots,income\n"
            "bad-type,checking,2024-02-03,1.00,gift\n"
        )

        assert [t.id for t in loader.load_transactions(path)] == ["ok"]

    def test_default_account_and_generated_ids(self, tmp_path, loader):
        path = tmp_path / "transactions.csv"
        path.write_text("Date,Amount\n2024-02-03,-1.00\n2024-02-04,2.00\n")

        transactions = loader.load_transactions(path, default_account_id="checking")

        assert [t.id for t in transactions] == ["checking-1", "checking-2"]
        assert all(t.account_id == "checking" for t in transactions)
        assert transactions[1].type is TransactionType.INCOME

    def test_unreadable_file(self, tmp_path, loader):
        with pytest.raises(ImportFileError):
            loader.load_transactions(tmp_path / "missing.csv")


class TestLoadStatements:
    """Tests for CsvLoader.load_statements()."""

    def test_rows(self, tmp_path, loader):
        path = tmp_path / "statements.csv"
        path.write_text(
            "ID,Account,Period_Start,Period_End,Starting_Balance,Ending_Balance,Statement_Date,Notes\n"
            "feb,checking,2024-02-01,2024-02-29,500.00,465.00,2024-03-01,February\n"
            "mar,checking,2024-03-01,2024-03-31,465.00,\"1,000.10\",,\n"
        )

        feb, mar = loader.load_statements(path)

        assert feb.period_start == date(2024, 2, 1)
        assert feb.starting_balance_cents == 50000
        assert feb.ending_balance_cents == 46500
        assert feb.notes == "February"
        assert mar.ending_balance_cents == 100010
        assert mar.statement_date == date(2024, 3, 31)
        assert mar.notes is None

    def test_custom_date_format(self, tmp_path):
        config = ReconConfig()
        config.input.statements.date_format = "%m/%d/%Y"
        path = tmp_path / "statements.csv"
        path.write_text(
            "ID,Account,Period_Start,Period_End,Starting_Balance,Ending_Balance\n"
            "feb,checking,02/01/2024,02/29/2024,0,0\n"
        )

        (statement,) = CsvLoader(config).load_statements(path)

        assert statement.period_end == date(2024, 2, 29)
