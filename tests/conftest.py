"""Shared fixtures for the reconciliation tests."""

from datetime import date, datetime, timedelta

import pytest

from account_recon.models.ledger import Account, Statement, Transaction, TransactionType
from account_recon.service import ReconciliationService


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 5, 9, 30))


@pytest.fixture
def checking():
    return Account(id="checking", name="Everyday Checking", balance_cents=50000)


@pytest.fixture
def march_statement():
    return Statement(
        id="stmt-2024-02",
        account_id="checking",
        period_start=date(2024, 2, 1),
        period_end=date(2024, 2, 29),
        starting_balance_cents=50000,
        ending_balance_cents=46500,
        statement_date=date(2024, 3, 1),
    )


@pytest.fixture
def transactions():
    return [
        Transaction(
            id="t-coffee",
            account_id="checking",
            date=date(2024, 2, 3),
            amount_cents=-2000,
            type=TransactionType.EXPENSE,
            description="Coffee beans",
        ),
        Transaction(
            id="t-books",
            account_id="checking",
            date=date(2024, 2, 10),
            amount_cents=-1500,
            type=TransactionType.EXPENSE,
            description="Used books",
        ),
        Transaction(
            id="t-refund",
            account_id="checking",
            date=date(2024, 2, 20),
            amount_cents=4250,
            type=TransactionType.INCOME,
            description="Refund",
        ),
        Transaction(
            id="t-march",
            account_id="checking",
            date=date(2024, 3, 2),
            amount_cents=-999,
            type=TransactionType.EXPENSE,
            description="After the statement period",
        ),
    ]


@pytest.fixture
def service(clock, checking, march_statement, transactions):
    """Service with one account, its transactions and one statement."""
    svc = ReconciliationService(clock=clock)
    svc.add_account(checking)
    for txn in transactions:
        svc.record_transaction(txn)
    svc.add_statement(march_statement)

    savings = Account(id="savings", name="Savings", balance_cents=100000)
    svc.add_account(savings)
    svc.record_transaction(
        Transaction(
            id="s-interest",
            account_id="savings",
            date=date(2024, 2, 28),
            amount_cents=125,
            type=TransactionType.INCOME,
        )
    )
    return svc
