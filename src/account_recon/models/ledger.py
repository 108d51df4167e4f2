"""Data models for accounts, transactions and bank statements."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class TransactionType(Enum):
    """Transaction type as recorded by the user."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


@dataclass
class Account:
    """
    A ledger account owned by the application state.

    Accounts are never deleted, only archived. The balance moves through
    transaction posting or explicit edits, never through reconciliation.
    """

    id: str
    name: str = ""
    currency: str = "USD"

    # Current balance in cents
    balance_cents: int = 0

    is_archived: bool = False

    # Set when a session completes
    last_reconciled: Optional[datetime] = None


@dataclass
class Transaction:
    """A recorded transaction. ``amount_cents`` is signed: money in is positive."""

    id: str
    account_id: str
    date: date
    amount_cents: int
    type: TransactionType = TransactionType.EXPENSE
    description: str = ""

    # Matched to a statement entry during a session
    is_cleared: bool = False

    # Confirmed by a completed session, never unset afterwards
    is_reconciled: bool = False


@dataclass(frozen=True)
class Statement:
    """
    An external bank statement for one account and period.

    Statements are ground truth and immutable once created.
    """

    id: str
    account_id: str
    period_start: date
    period_end: date
    starting_balance_cents: int
    ending_balance_cents: int
    statement_date: Optional[date] = None
    notes: Optional[str] = None

    def covers(self, day: date) -> bool:
        """Check whether a date falls inside the statement period (inclusive)."""
        return self.period_start <= day <= self.period_end
