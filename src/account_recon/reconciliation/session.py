"""
Reconciliation session state machine.

A session starts ``in-progress``, collects cleared transactions while the user
compares their records with a statement, and ends exactly once as either
``completed`` or ``abandoned``. Finished sessions move from the active set
into the history index.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional
from uuid import uuid4
import logging

from ..models.ledger import Account, Statement, Transaction, TransactionType
from ..models.reconciliation import (
    ReconciliationCheckpoint,
    ReconciliationSession,
    Resolution,
    SessionStatus,
)
from ..utils.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PreconditionError,
)
from .resolver import resolve

if TYPE_CHECKING:
    from ..storage.state import AppState

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid4())


class SessionStateMachine:
    """
    Drives session transitions against the application state.

    Every operation validates before it mutates, so a raised error leaves the
    session, its transactions and the account exactly as they were.
    """

    def __init__(self, state: "AppState", clock: Callable[[], datetime] = datetime.now):
        """
        Initialize the state machine.

        Args:
            state: Application state holding accounts, transactions and sessions
            clock: Source of the current time
        """
        self.state = state
        self.clock = clock

    def start_session(self, account: Account, statement: Statement) -> ReconciliationSession:
        """
        Open a session for an account against one of its statements.

        The starting balance is the account balance right now; it is not
        re-derived later even if the account balance moves.

        Raises:
            NotFoundError: If the statement belongs to a different account
            InvalidStateError: If the account is archived
            ConflictError: If the account already has an in-progress session
        """
        if statement.account_id != account.id:
            raise NotFoundError(
                f"Statement {statement.id} does not belong to account {account.id}"
            )
        if account.is_archived:
            raise InvalidStateError(f"Account {account.id} is archived")

        existing = self.state.in_progress_session(account.id)
        if existing is not None:
            raise ConflictError(
                f"Account {account.id} already has session {existing.id} in progress"
            )

        starting = self.state.accounts.balance_snapshot(account.id)
        session = ReconciliationSession(
            id=_new_id(),
            account_id=account.id,
            statement_id=statement.id,
            start_date=self.clock(),
            starting_balance_cents=starting,
            ending_balance_cents=statement.ending_balance_cents,
            computed_balance_cents=starting,
        )
        self.state.active_sessions[session.id] = session

        logger.info(
            f"Started session {session.id} for account {account.id} "
            f"against statement {statement.id}"
        )
        return session

    def toggle_cleared(
        self, session: ReconciliationSession, transaction_id: str
    ) -> ReconciliationSession:
        """
        Add a transaction to the cleared set, or remove it if already there.

        The transaction's cleared flag follows the set, and the computed
        balance is recomputed from scratch.

        Raises:
            InvalidStateError: If the session is not in progress
            NotFoundError: If the transaction is unknown, belongs to another
                account, or is already reconciled by a completed session
        """
        self._require_in_progress(session, "toggle a transaction on")
        transaction = self._owned_transaction(session, transaction_id)

        if transaction_id in session.cleared_transaction_ids:
            session.cleared_transaction_ids.remove(transaction_id)
            transaction.is_cleared = False
        else:
            session.cleared_transaction_ids.append(transaction_id)
            transaction.is_cleared = True

        self._recompute(session)
        logger.debug(
            f"Session {session.id}: {transaction_id} "
            f"{'cleared' if transaction.is_cleared else 'uncleared'}, "
            f"computed balance {session.computed_balance_cents}"
        )
        return session

    def set_actual_ending_balance(
        self, session: ReconciliationSession, amount_cents: int
    ) -> ReconciliationSession:
        """
        Store the ending balance the user confirmed, without completing.

        Raises:
            InvalidStateError: If the session is not in progress
        """
        self._require_in_progress(session, "set the ending balance of")
        session.actual_ending_balance_cents = amount_cents
        logger.debug(f"Session {session.id}: actual ending balance {amount_cents}")
        return session

    def save_checkpoint(
        self, session: ReconciliationSession, notes: Optional[str] = None
    ) -> ReconciliationCheckpoint:
        """
        Snapshot the cleared set so progress can be reviewed later.

        Raises:
            InvalidStateError: If the session is not in progress
        """
        self._require_in_progress(session, "checkpoint")
        checkpoint = ReconciliationCheckpoint(
            id=_new_id(),
            timestamp=self.clock(),
            cleared_transaction_ids=list(session.cleared_transaction_ids),
            notes=notes,
        )
        session.checkpoints.append(checkpoint)
        logger.info(
            f"Session {session.id}: checkpoint {checkpoint.id} with "
            f"{len(checkpoint.cleared_transaction_ids)} cleared transactions"
        )
        return checkpoint

    def preview(self, session: ReconciliationSession) -> Resolution:
        """
        Live difference for an in-progress session.

        Compares against the confirmed actual balance when set, otherwise
        against the statement's ending balance.
        """
        target = session.actual_ending_balance_cents
        if target is None:
            target = session.ending_balance_cents
        return resolve(session.computed_balance_cents, target)

    def complete(
        self, session: ReconciliationSession, post_adjustment: bool = False
    ) -> ReconciliationSession:
        """
        Finish a session and reconcile its cleared transactions.

        A nonzero difference is a valid outcome. With ``post_adjustment`` a
        cleared adjustment transaction for the difference is posted to the
        account. It is left unreconciled, since no completed session holds it,
        and becomes a candidate for the next session.

        Raises:
            InvalidStateError: If the session is not in progress
            PreconditionError: If the actual ending balance was never set
            NotFoundError: If a cleared transaction was reconciled elsewhere
        """
        self._require_in_progress(session, "complete")
        if session.actual_ending_balance_cents is None:
            raise PreconditionError(
                f"Session {session.id} has no actual ending balance; set it before completing"
            )

        self._recompute(session)
        resolution = resolve(session.computed_balance_cents, session.actual_ending_balance_cents)

        # All-or-none: raises before touching anything if one id is bad
        self.state.transactions.mark_reconciled(session.cleared_transaction_ids)

        now = self.clock()
        if post_adjustment and not resolution.is_balanced:
            adjustment = self._post_adjustment(session, resolution, now)
            session.adjustment_transaction_id = adjustment.id

        session.difference_cents = resolution.difference_cents
        session.status = SessionStatus.COMPLETED
        session.completed_date = now
        session.end_date = now
        self.state.accounts.get(session.account_id).last_reconciled = now

        self._finish(session)
        logger.info(
            f"Completed session {session.id}: {len(session.cleared_transaction_ids)} "
            f"transactions reconciled, difference {resolution.difference_cents}"
        )
        return session

    def abandon(self, session: ReconciliationSession) -> ReconciliationSession:
        """
        Give up on a session.

        Transactions keep their cleared flag but none becomes reconciled.

        Raises:
            InvalidStateError: If the session is not in progress
        """
        self._require_in_progress(session, "abandon")

        session.status = SessionStatus.ABANDONED
        session.end_date = self.clock()

        self._finish(session)
        logger.info(f"Abandoned session {session.id} for account {session.account_id}")
        return session

    def candidate_transactions(self, session: ReconciliationSession) -> list[Transaction]:
        """Unreconciled transactions of the account inside the statement period."""
        statement = self.state.statements.get(session.statement_id)
        return [
            t
            for t in self.state.transactions.list_by_account(session.account_id)
            if not t.is_reconciled and statement.covers(t.date)
        ]

    def _require_in_progress(self, session: ReconciliationSession, action: str) -> None:
        if session.status is not SessionStatus.IN_PROGRESS:
            raise InvalidStateError(
                f"Cannot {action} session {session.id}: it is {session.status.value}"
            )

    def _owned_transaction(
        self, session: ReconciliationSession, transaction_id: str
    ) -> Transaction:
        transaction = self.state.transactions.get(transaction_id)
        if transaction.account_id != session.account_id:
            raise NotFoundError(
                f"Transaction {transaction_id} does not belong to account {session.account_id}"
            )
        if transaction.is_reconciled:
            raise NotFoundError(
                f"Transaction {transaction_id} is already reconciled by a completed session"
            )
        return transaction

    def _recompute(self, session: ReconciliationSession) -> None:
        cleared_total = sum(
            self.state.transactions.get(tid).amount_cents
            for tid in session.cleared_transaction_ids
        )
        session.computed_balance_cents = session.starting_balance_cents + cleared_total

    def _post_adjustment(
        self, session: ReconciliationSession, resolution: Resolution, now: datetime
    ) -> Transaction:
        amount = resolution.adjustment_cents
        adjustment = Transaction(
            id=_new_id(),
            account_id=session.account_id,
            date=now.date(),
            amount_cents=amount,
            type=TransactionType.INCOME if amount > 0 else TransactionType.EXPENSE,
            description=f"Reconciliation adjustment ({session.id})",
            is_cleared=True,
        )
        self.state.post_transaction(adjustment)
        logger.info(f"Session {session.id}: posted adjustment {adjustment.id} of {amount}")
        return adjustment

    def _finish(self, session: ReconciliationSession) -> None:
        self.state.active_sessions.pop(session.id, None)
        self.state.history.record(session)
