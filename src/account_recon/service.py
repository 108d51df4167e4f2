"""
Reconciliation service: the single mutation entry point over the application state.

All changes go through ``dispatch``, one command at a time, which gives the
at-most-one-in-progress rule and the all-or-none reconcile step a single place
to be enforced. When a store is attached, state is saved after every command
that succeeds.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional
import logging

from .commands import (
    AbandonSession,
    AddAccount,
    AddStatement,
    ArchiveAccount,
    CompleteSession,
    RecordTransaction,
    SaveCheckpoint,
    SetActualEndingBalance,
    StartSession,
    ToggleCleared,
)
from .config import ReconConfig
from .models.ledger import Account, Statement, Transaction
from .models.reconciliation import (
    ReconciliationCheckpoint,
    ReconciliationSession,
    ReconciliationSummary,
    Resolution,
)
from .reconciliation.session import SessionStateMachine
from .reconciliation.summary import summarize, summarize_accounts
from .storage.json_store import JsonFileStore
from .storage.state import AppState
from .utils.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Owns the application state and applies commands to it."""

    def __init__(
        self,
        state: Optional[AppState] = None,
        config: Optional[ReconConfig] = None,
        store: Optional[JsonFileStore] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the service.

        Args:
            state: Existing application state, empty if omitted
            config: Application configuration
            store: Key-value store to save into after each command
            clock: Source of the current time
        """
        self.state = state if state is not None else AppState()
        self.config = config if config is not None else ReconConfig()
        self.store = store
        self.clock = clock
        self.sessions = SessionStateMachine(self.state, clock=clock)

        self._handlers: dict[type, Callable[[Any], Any]] = {
            AddAccount: self._add_account,
            ArchiveAccount: self._archive_account,
            RecordTransaction: self._record_transaction,
            AddStatement: self._add_statement,
            StartSession: self._start_session,
            ToggleCleared: self._toggle_cleared,
            SetActualEndingBalance: self._set_actual_ending_balance,
            SaveCheckpoint: self._save_checkpoint,
            CompleteSession: self._complete,
            AbandonSession: self._abandon,
        }

    @classmethod
    def open(
        cls,
        path: Path,
        config: Optional[ReconConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "ReconciliationService":
        """Load state from a JSON state file (created on first save)."""
        store = JsonFileStore(path)
        state = AppState.from_records(store.as_dict())
        logger.info(f"Opened state file: {path}")
        return cls(state=state, config=config, store=store, clock=clock)

    def dispatch(self, command: Any) -> Any:
        """
        Apply one command to the state.

        If the state cannot be saved afterwards, the command is rolled back
        and the state reloaded from the last saved records.

        Returns:
            Whatever the command's handler produces (usually the changed record)

        Raises:
            ReconciliationError: Subclass describing why the command was rejected
            StorageError: If the changed state could not be saved
        """
        handler = self._handlers.get(type(command))
        if handler is None:
            raise ValidationError(f"Unknown command: {type(command).__name__}")

        logger.debug(f"Dispatching {command!r}")
        saved = self.state.to_records() if self.store is not None else None
        result = handler(command)
        try:
            self.save()
        except StorageError:
            logger.error(f"Could not save after {type(command).__name__}, rolling back")
            self.store.update(saved)
            self._load(AppState.from_records(saved))
            raise
        return result

    def _load(self, state: AppState) -> None:
        self.state = state
        self.sessions = SessionStateMachine(state, clock=self.clock)

    def save(self) -> None:
        if self.store is None:
            return
        self.store.update(self.state.to_records())
        self.store.flush()

    # Command shortcuts

    def add_account(self, account: Account) -> Account:
        return self.dispatch(AddAccount(account))

    def record_transaction(self, transaction: Transaction, post: bool = False) -> Transaction:
        return self.dispatch(RecordTransaction(transaction, post=post))

    def add_statement(self, statement: Statement) -> Statement:
        return self.dispatch(AddStatement(statement))

    def start_session(self, account_id: str, statement_id: str) -> ReconciliationSession:
        return self.dispatch(StartSession(account_id, statement_id))

    def toggle_cleared(self, session_id: str, transaction_id: str) -> ReconciliationSession:
        return self.dispatch(ToggleCleared(session_id, transaction_id))

    def set_actual_ending_balance(
        self, session_id: str, amount_cents: int
    ) -> ReconciliationSession:
        return self.dispatch(SetActualEndingBalance(session_id, amount_cents))

    def save_checkpoint(
        self, session_id: str, notes: Optional[str] = None
    ) -> ReconciliationCheckpoint:
        return self.dispatch(SaveCheckpoint(session_id, notes))

    def complete(self, session_id: str, post_adjustment: bool = False) -> ReconciliationSession:
        return self.dispatch(CompleteSession(session_id, post_adjustment))

    def abandon(self, session_id: str) -> ReconciliationSession:
        return self.dispatch(AbandonSession(session_id))

    # Queries

    def get_session(self, session_id: str) -> ReconciliationSession:
        return self.state.find_session(session_id)

    def active_session(self, account_id: str) -> Optional[ReconciliationSession]:
        return self.state.in_progress_session(account_id)

    def preview(self, session_id: str) -> Resolution:
        return self.sessions.preview(self.state.find_session(session_id))

    def candidate_transactions(self, session_id: str) -> list[Transaction]:
        return self.sessions.candidate_transactions(self.state.find_session(session_id))

    def history(self, account_id: str) -> list[ReconciliationSession]:
        return self.state.history.query(account_id)

    def summarize(self, account_id: str) -> ReconciliationSummary:
        return summarize(
            self.state.accounts.get(account_id),
            self.state.transactions.list_all(),
            self.state.all_sessions(),
            now=self.clock(),
            thresholds=self.config.staleness,
        )

    def summarize_accounts(self) -> list[ReconciliationSummary]:
        return summarize_accounts(
            self.state.accounts.list_all(),
            self.state.transactions.list_all(),
            self.state.all_sessions(),
            now=self.clock(),
            thresholds=self.config.staleness,
        )

    # Handlers

    def _add_account(self, command: AddAccount) -> Account:
        account = self.state.accounts.add(command.account)
        logger.info(f"Added account {account.id}")
        return account

    def _archive_account(self, command: ArchiveAccount) -> Account:
        account = self.state.accounts.get(command.account_id)
        account.is_archived = True
        logger.info(f"Archived account {account.id}")
        return account

    def _record_transaction(self, command: RecordTransaction) -> Transaction:
        transaction = command.transaction
        # Fails with NotFoundError before anything is stored
        self.state.accounts.get(transaction.account_id)
        if command.post:
            return self.state.post_transaction(transaction)
        return self.state.transactions.add(transaction)

    def _add_statement(self, command: AddStatement) -> Statement:
        self.state.accounts.get(command.statement.account_id)
        statement = self.state.statements.add(command.statement)
        logger.info(f"Added statement {statement.id} for account {statement.account_id}")
        return statement

    def _start_session(self, command: StartSession) -> ReconciliationSession:
        account = self.state.accounts.get(command.account_id)
        statement = self.state.statements.get(command.statement_id)
        return self.sessions.start_session(account, statement)

    def _toggle_cleared(self, command: ToggleCleared) -> ReconciliationSession:
        session = self.state.find_session(command.session_id)
        return self.sessions.toggle_cleared(session, command.transaction_id)

    def _set_actual_ending_balance(
        self, command: SetActualEndingBalance
    ) -> ReconciliationSession:
        session = self.state.find_session(command.session_id)
        return self.sessions.set_actual_ending_balance(session, command.amount_cents)

    def _save_checkpoint(self, command: SaveCheckpoint) -> ReconciliationCheckpoint:
        session = self.state.find_session(command.session_id)
        return self.sessions.save_checkpoint(session, command.notes)

    def _complete(self, command: CompleteSession) -> ReconciliationSession:
        session = self.state.find_session(command.session_id)
        return self.sessions.complete(session, post_adjustment=command.post_adjustment)

    def _abandon(self, command: AbandonSession) -> ReconciliationSession:
        session = self.state.find_session(command.session_id)
        return self.sessions.abandon(session)
