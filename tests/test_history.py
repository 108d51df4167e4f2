"""Tests for the history index."""

from datetime import datetime

import pytest

from account_recon.models.reconciliation import ReconciliationSession, SessionStatus
from account_recon.reconciliation.history import HistoryIndex
from account_recon.utils.exceptions import ConflictError, InvalidStateError, NotFoundError


def _session(session_id, status, start, completed=None, account_id="checking"):
    return ReconciliationSession(
        id=session_id,
        account_id=account_id,
        statement_id="stmt",
        start_date=start,
        starting_balance_cents=0,
        ending_balance_cents=0,
        status=status,
        completed_date=completed,
    )


class TestHistoryIndex:
    """Tests for HistoryIndex."""

    def test_in_progress_rejected(self):
        history = HistoryIndex()

        with pytest.raises(InvalidStateError):
            history.record(_session("s", SessionStatus.IN_PROGRESS, datetime(2024, 1, 1)))
        assert len(history) == 0

    def test_query_newest_first(self):
        """Completed sessions sort by completion date, abandoned ones by start date."""
        history = HistoryIndex()
        history.record(
            _session(
                "jan", SessionStatus.COMPLETED, datetime(2024, 1, 1), datetime(2024, 2, 15)
            )
        )
        history.record(_session("abandoned", SessionStatus.ABANDONED, datetime(2024, 3, 1)))
        history.record(
            _session(
                "late-finish",
                SessionStatus.COMPLETED,
                datetime(2023, 12, 1),
                datetime(2024, 3, 10),
            )
        )
        history.record(
            _session("other", SessionStatus.ABANDONED, datetime(2024, 5, 1), account_id="savings")
        )

        assert [s.id for s in history.query("checking")] == ["late-finish", "abandoned", "jan"]
        assert [s.id for s in history.query("savings")] == ["other"]
        assert history.query("nobody") == []

    def test_records_cannot_be_rewritten(self):
        history = HistoryIndex()
        session = _session("s", SessionStatus.ABANDONED, datetime(2024, 1, 1))
        history.record(session)

        with pytest.raises(ConflictError):
            history.record(session)

        session.statement_id = "changed"
        fetched = history.get("s")
        fetched.cleared_transaction_ids.append("t")

        assert history.get("s").statement_id == "stmt"
        assert history.get("s").cleared_transaction_ids == []

    def test_get_missing(self):
        with pytest.raises(NotFoundError):
            HistoryIndex().get("missing")
