"""
Per-account reconciliation summaries.

Summaries are derived on every call from the account's transactions and its
sessions; nothing here is cached or stored.
"""

from datetime import datetime
from typing import Iterable, Optional

from ..config import StalenessConfig
from ..models.ledger import Account, Transaction
from ..models.reconciliation import (
    ReconciliationSession,
    ReconciliationSummary,
    SessionStatus,
    Staleness,
)


def classify_staleness(
    days_since_last_reconciliation: Optional[int],
    thresholds: Optional[StalenessConfig] = None,
) -> Staleness:
    """
    Classify how overdue an account is.

    With the default thresholds: up to 30 days is good, 31 to 60 is a
    warning, anything older or never reconciled is critical.
    """
    thresholds = thresholds or StalenessConfig()

    if days_since_last_reconciliation is None:
        return Staleness.CRITICAL
    if days_since_last_reconciliation <= thresholds.good_max_days:
        return Staleness.GOOD
    if days_since_last_reconciliation <= thresholds.warning_max_days:
        return Staleness.WARNING
    return Staleness.CRITICAL


def summarize(
    account: Account,
    transactions: Iterable[Transaction],
    sessions: Iterable[ReconciliationSession],
    now: Optional[datetime] = None,
    thresholds: Optional[StalenessConfig] = None,
) -> ReconciliationSummary:
    """
    Build the reconciliation summary for one account.

    Args:
        account: Account to summarize
        transactions: All transactions (filtered to the account here)
        sessions: All sessions, in any state (filtered here)
        now: Reference time, defaults to the current time
        thresholds: Staleness thresholds, defaults to 30/60 days

    Returns:
        ReconciliationSummary for the account
    """
    now = now or datetime.now()

    account_sessions = [s for s in sessions if s.account_id == account.id]
    completed_dates = [
        s.completed_date
        for s in account_sessions
        if s.status is SessionStatus.COMPLETED and s.completed_date is not None
    ]
    last_reconciled = max(completed_dates) if completed_dates else None

    days_since: Optional[int] = None
    if last_reconciled is not None:
        # timedelta.days floors, and a clock skewed into the future counts as today
        days_since = max((now - last_reconciled).days, 0)

    account_transactions = [t for t in transactions if t.account_id == account.id]

    return ReconciliationSummary(
        account_id=account.id,
        staleness=classify_staleness(days_since, thresholds),
        unreconciled_transaction_count=sum(
            1 for t in account_transactions if not t.is_reconciled
        ),
        uncleared_transaction_count=sum(1 for t in account_transactions if not t.is_cleared),
        last_reconciled=last_reconciled,
        days_since_last_reconciliation=days_since,
        has_session_in_progress=any(s.is_in_progress for s in account_sessions),
    )


def summarize_accounts(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    sessions: Iterable[ReconciliationSession],
    now: Optional[datetime] = None,
    thresholds: Optional[StalenessConfig] = None,
) -> list[ReconciliationSummary]:
    """Summaries for every non-archived account, in the order given."""
    transactions = list(transactions)
    sessions = list(sessions)
    now = now or datetime.now()

    return [
        summarize(account, transactions, sessions, now=now, thresholds=thresholds)
        for account in accounts
        if not account.is_archived
    ]
