"""Append-only store of external bank statements."""

from typing import Iterable, Optional
import logging

from ..models.ledger import Statement
from ..utils.exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class StatementStore:
    """
    Holds immutable statement records keyed by id.

    Statements are added once and never updated or deleted, so any session
    that references a statement can always resolve it.
    """

    def __init__(self, statements: Optional[Iterable[Statement]] = None):
        self._statements: dict[str, Statement] = {}
        for statement in statements or []:
            self.add(statement)

    def __len__(self) -> int:
        return len(self._statements)

    def __contains__(self, statement_id: object) -> bool:
        return statement_id in self._statements

    def add(self, statement: Statement) -> Statement:
        """
        Add a new statement.

        Raises:
            ConflictError: If a statement with the same id already exists
            ValidationError: If the period ends before it starts
        """
        if statement.id in self._statements:
            raise ConflictError(f"Statement {statement.id} already exists")
        if statement.period_start > statement.period_end:
            raise ValidationError(
                f"Statement {statement.id}: period start {statement.period_start} "
                f"is after period end {statement.period_end}"
            )

        self._statements[statement.id] = statement
        logger.debug(
            f"Added statement {statement.id} for account {statement.account_id} "
            f"({statement.period_start} to {statement.period_end})"
        )
        return statement

    def get(self, statement_id: str) -> Statement:
        """
        Look up a statement by id.

        Raises:
            NotFoundError: If no statement has this id
        """
        try:
            return self._statements[statement_id]
        except KeyError:
            raise NotFoundError(f"Statement {statement_id} not found") from None

    def list_statements(self, account_id: str) -> list[Statement]:
        """Statements for an account, ordered by period start."""
        return sorted(
            (s for s in self._statements.values() if s.account_id == account_id),
            key=lambda s: (s.period_start, s.period_end, s.id),
        )

    def all(self) -> list[Statement]:
        return list(self._statements.values())
