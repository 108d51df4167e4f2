"""Data models for reconciliation sessions, outcomes and summaries."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SessionStatus(Enum):
    """Lifecycle status of a reconciliation session."""

    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.IN_PROGRESS


class Staleness(Enum):
    """How overdue an account is for reconciliation."""

    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class ReconciliationCheckpoint:
    """Saved progress of an in-progress session."""

    id: str
    timestamp: datetime
    cleared_transaction_ids: list[str] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass
class ReconciliationSession:
    """
    One attempt to reconcile an account against a statement.

    Balances are cents. ``computed_balance_cents`` is always
    ``starting_balance_cents`` plus the signed sum of the cleared transactions.
    ``difference_cents`` is only set once the session is completed.
    """

    id: str
    account_id: str
    statement_id: str
    start_date: datetime

    # Snapshot of the account balance when the session started
    starting_balance_cents: int

    # Target ending balance from the statement
    ending_balance_cents: int

    status: SessionStatus = SessionStatus.IN_PROGRESS
    computed_balance_cents: int = 0
    actual_ending_balance_cents: Optional[int] = None
    difference_cents: Optional[int] = None

    # Insertion ordered; a list so the state file stays readable
    cleared_transaction_ids: list[str] = field(default_factory=list)
    checkpoints: list[ReconciliationCheckpoint] = field(default_factory=list)

    end_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    adjustment_transaction_id: Optional[str] = None

    @property
    def is_in_progress(self) -> bool:
        return self.status is SessionStatus.IN_PROGRESS

    @property
    def is_balanced(self) -> Optional[bool]:
        """True for a clean completion, None until the session completes."""
        if self.difference_cents is None:
            return None
        return self.difference_cents == 0

    @property
    def sort_date(self) -> datetime:
        """Date used to order history, newest first."""
        return self.completed_date or self.start_date


@dataclass(frozen=True)
class Resolution:
    """Outcome of comparing the computed balance with the actual one."""

    computed_balance_cents: int
    actual_balance_cents: int
    difference_cents: int
    is_balanced: bool

    @property
    def adjustment_cents(self) -> int:
        """Amount of an adjustment transaction that would force the records to match."""
        return self.difference_cents


@dataclass
class ReconciliationSummary:
    """Derived reconciliation status of one account. Never persisted."""

    account_id: str
    staleness: Staleness
    unreconciled_transaction_count: int
    uncleared_transaction_count: int
    last_reconciled: Optional[datetime] = None
    days_since_last_reconciliation: Optional[int] = None
    has_session_in_progress: bool = False

    @property
    def never_reconciled(self) -> bool:
        return self.last_reconciled is None
