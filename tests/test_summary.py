"""Tests for staleness classification and account summaries."""

from datetime import date, datetime, timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from account_recon.config import StalenessConfig
from account_recon.models.ledger import Account, Transaction
from account_recon.models.reconciliation import (
    ReconciliationSession,
    SessionStatus,
    Staleness,
)
from account_recon.reconciliation.summary import (
    classify_staleness,
    summarize,
    summarize_accounts,
)

NOW = datetime(2024, 6, 30, 12, 0)


def _session(session_id, status, completed_days_ago=None, account_id="checking"):
    completed = NOW - timedelta(days=completed_days_ago) if completed_days_ago is not None else None
    return ReconciliationSession(
        id=session_id,
        account_id=account_id,
        statement_id="stmt",
        start_date=NOW - timedelta(days=400),
        starting_balance_cents=0,
        ending_balance_cents=0,
        status=status,
        completed_date=completed,
        difference_cents=0 if status is SessionStatus.COMPLETED else None,
    )


class TestClassifyStaleness:
    """Tests for the staleness boundaries."""

    @pytest.mark.parametrize(
        "days, expected",
        [
            (0, Staleness.GOOD),
            (30, Staleness.GOOD),
            (31, Staleness.WARNING),
            (60, Staleness.WARNING),
            (61, Staleness.CRITICAL),
            (365, Staleness.CRITICAL),
            (None, Staleness.CRITICAL),
        ],
    )
    def test_default_boundaries(self, days, expected):
        assert classify_staleness(days) is expected

    def test_custom_thresholds(self):
        thresholds = StalenessConfig(good_max_days=7, warning_max_days=14)

        assert classify_staleness(7, thresholds) is Staleness.GOOD
        assert classify_staleness(8, thresholds) is Staleness.WARNING
        assert classify_staleness(15, thresholds) is Staleness.CRITICAL

    def test_thresholds_must_be_ordered(self):
        with pytest.raises(PydanticValidationError):
            StalenessConfig(good_max_days=60, warning_max_days=30)


class TestSummarize:
    """Tests for summarize()."""

    def test_never_reconciled(self):
        account = Account(id="checking")
        transactions = [
            Transaction(id="a", account_id="checking", date=date(2024, 6, 1), amount_cents=-100),
            Transaction(id="b", account_id="other", date=date(2024, 6, 1), amount_cents=-100),
        ]

        summary = summarize(account, transactions, [], now=NOW)

        assert summary.last_reconciled is None
        assert summary.never_reconciled
        assert summary.days_since_last_reconciliation is None
        assert summary.staleness is Staleness.CRITICAL
        assert summary.unreconciled_transaction_count == 1
        assert summary.uncleared_transaction_count == 1

    def test_latest_completed_session_wins(self):
        account = Account(id="checking")
        sessions = [
            _session("old", SessionStatus.COMPLETED, completed_days_ago=90),
            _session("recent", SessionStatus.COMPLETED, completed_days_ago=12),
            _session("other", SessionStatus.COMPLETED, completed_days_ago=1, account_id="savings"),
        ]

        summary = summarize(account, [], sessions, now=NOW)

        assert summary.last_reconciled == NOW - timedelta(days=12)
        assert summary.days_since_last_reconciliation == 12
        assert summary.staleness is Staleness.GOOD

    def test_abandoned_and_in_progress_sessions_ignored(self):
        account = Account(id="checking")
        sessions = [
            _session("done", SessionStatus.COMPLETED, completed_days_ago=45),
            _session("gave-up", SessionStatus.ABANDONED),
            _session("open", SessionStatus.IN_PROGRESS),
        ]

        summary = summarize(account, [], sessions, now=NOW)

        assert summary.days_since_last_reconciliation == 45
        assert summary.staleness is Staleness.WARNING
        assert summary.has_session_in_progress

    def test_days_are_floored(self):
        account = Account(id="checking")
        session = _session("s", SessionStatus.COMPLETED, completed_days_ago=30)
        session.completed_date -= timedelta(hours=23)

        summary = summarize(account, [], [session], now=NOW)

        assert summary.days_since_last_reconciliation == 30
        assert summary.staleness is Staleness.GOOD

    def test_counts(self):
        account = Account(id="checking")
        transactions = [
            Transaction(
                id="r",
                account_id="checking",
                date=date(2024, 6, 1),
                amount_cents=1,
                is_cleared=True,
                is_reconciled=True,
            ),
            Transaction(
                id="c", account_id="checking", date=date(2024, 6, 2), amount_cents=1, is_cleared=True
            ),
            Transaction(id="u", account_id="checking", date=date(2024, 6, 3), amount_cents=1),
        ]

        summary = summarize(account, transactions, [], now=NOW)

        assert summary.unreconciled_transaction_count == 2
        assert summary.uncleared_transaction_count == 1

    def test_summarize_accounts_skips_archived(self):
        accounts = [Account(id="checking"), Account(id="old", is_archived=True)]

        summaries = summarize_accounts(accounts, [], [], now=NOW)

        assert [s.account_id for s in summaries] == ["checking"]


class TestServiceSummary:
    """Summary after a session completes through the service."""

    def test_staleness_moves_with_the_clock(self, service, clock):
        assert service.summarize("checking").staleness is Staleness.CRITICAL

        session = service.start_session("checking", "stmt-2024-02")
        service.toggle_cleared(session.id, "t-coffee")
        service.set_actual_ending_balance(session.id, 48000)
        service.complete(session.id)

        summary = service.summarize("checking")
        assert summary.staleness is Staleness.GOOD
        assert summary.days_since_last_reconciliation == 0
        assert summary.unreconciled_transaction_count == 3

        clock.advance(days=31)
        assert service.summarize("checking").staleness is Staleness.WARNING

        clock.advance(days=30)
        assert service.summarize("checking").staleness is Staleness.CRITICAL
