"""Tests for the statement store."""

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from account_recon.models.ledger import Statement
from account_recon.reconciliation.statements import StatementStore
from account_recon.utils.exceptions import ConflictError, NotFoundError, ValidationError


def _statement(statement_id, start, end, account_id="checking"):
    return Statement(
        id=statement_id,
        account_id=account_id,
        period_start=start,
        period_end=end,
        starting_balance_cents=0,
        ending_balance_cents=0,
    )


class TestStatementStore:
    """Tests for StatementStore."""

    def test_get(self):
        store = StatementStore()
        statement = store.add(_statement("jan", date(2024, 1, 1), date(2024, 1, 31)))

        assert store.get("jan") is statement
        assert "jan" in store
        assert len(store) == 1

    def test_get_missing(self):
        with pytest.raises(NotFoundError):
            StatementStore().get("missing")

    def test_list_ordered_by_period_start(self):
        store = StatementStore(
            [
                _statement("mar", date(2024, 3, 1), date(2024, 3, 31)),
                _statement("jan", date(2024, 1, 1), date(2024, 1, 31)),
                _statement("sav", date(2024, 2, 1), date(2024, 2, 29), account_id="savings"),
                _statement("feb", date(2024, 2, 1), date(2024, 2, 29)),
            ]
        )

        assert [s.id for s in store.list_statements("checking")] == ["jan", "feb", "mar"]
        assert [s.id for s in store.list_statements("savings")] == ["sav"]
        assert store.list_statements("nobody") == []

    def test_duplicate_id_rejected(self):
        store = StatementStore([_statement("jan", date(2024, 1, 1), date(2024, 1, 31))])

        with pytest.raises(ConflictError):
            store.add(_statement("jan", date(2024, 1, 1), date(2024, 1, 30)))
        assert store.get("jan").period_end == date(2024, 1, 31)

    def test_inverted_period_rejected(self):
        with pytest.raises(ValidationError):
            StatementStore().add(_statement("bad", date(2024, 2, 1), date(2024, 1, 1)))

    def test_statements_are_immutable(self):
        statement = _statement("jan", date(2024, 1, 1), date(2024, 1, 31))

        with pytest.raises(FrozenInstanceError):
            statement.ending_balance_cents = 1

    def test_covers_is_inclusive(self):
        statement = _statement("jan", date(2024, 1, 1), date(2024, 1, 31))

        assert statement.covers(date(2024, 1, 1))
        assert statement.covers(date(2024, 1, 31))
        assert not statement.covers(date(2024, 2, 1))
