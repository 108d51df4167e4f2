"""
In-memory application state: accounts, transactions, statements and sessions.

``AppState`` is owned by ``ReconciliationService``; nothing else mutates it.
"""

from typing import Any, Iterable, Optional
import logging

from pydantic import TypeAdapter

from ..models.ledger import Account, Statement, Transaction
from ..models.reconciliation import ReconciliationSession
from ..reconciliation.history import HistoryIndex
from ..reconciliation.statements import StatementStore
from ..utils.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

# Storage keys for the key-value store
ACCOUNTS_KEY = "accounts"
TRANSACTIONS_KEY = "transactions"
SESSIONS_KEY = "reconciliation_sessions"
STATEMENTS_KEY = "reconciliation_statements"

_accounts_adapter = TypeAdapter(list[Account])
_transactions_adapter = TypeAdapter(list[Transaction])
_sessions_adapter = TypeAdapter(list[ReconciliationSession])
_statements_adapter = TypeAdapter(list[Statement])


class AccountRepository:
    """Accounts keyed by id. Accounts are archived, never removed."""

    def __init__(self, accounts: Optional[Iterable[Account]] = None):
        self._accounts: dict[str, Account] = {}
        for account in accounts or []:
            self.add(account)

    def __len__(self) -> int:
        return len(self._accounts)

    def add(self, account: Account) -> Account:
        if account.id in self._accounts:
            raise ConflictError(f"Account {account.id} already exists")
        self._accounts[account.id] = account
        return account

    def get(self, account_id: str) -> Account:
        try:
            return self._accounts[account_id]
        except KeyError:
            raise NotFoundError(f"Account {account_id} not found") from None

    def balance_snapshot(self, account_id: str) -> int:
        """Current balance of an account in cents."""
        return self.get(account_id).balance_cents

    def list_all(self, include_archived: bool = True) -> list[Account]:
        return [a for a in self._accounts.values() if include_archived or not a.is_archived]


class TransactionRepository:
    """Transactions keyed by id, with per-account listing."""

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None):
        self._transactions: dict[str, Transaction] = {}
        for transaction in transactions or []:
            self.add(transaction)

    def __len__(self) -> int:
        return len(self._transactions)

    def add(self, transaction: Transaction) -> Transaction:
        if transaction.id in self._transactions:
            raise ConflictError(f"Transaction {transaction.id} already exists")
        self._transactions[transaction.id] = transaction
        return transaction

    def get(self, transaction_id: str) -> Transaction:
        try:
            return self._transactions[transaction_id]
        except KeyError:
            raise NotFoundError(f"Transaction {transaction_id} not found") from None

    def list_by_account(self, account_id: str) -> list[Transaction]:
        """Transactions of one account, ordered by date."""
        return sorted(
            (t for t in self._transactions.values() if t.account_id == account_id),
            key=lambda t: (t.date, t.id),
        )

    def list_all(self) -> list[Transaction]:
        return list(self._transactions.values())

    def mark_reconciled(self, transaction_ids: Iterable[str]) -> list[Transaction]:
        """
        Mark a group of transactions reconciled, all or none.

        Every id is checked before any transaction is touched.

        Raises:
            NotFoundError: If an id is unknown or its transaction is already reconciled
        """
        transactions = [self.get(tid) for tid in transaction_ids]
        already = [t.id for t in transactions if t.is_reconciled]
        if already:
            raise NotFoundError(
                f"Transactions already reconciled by another session: {', '.join(already)}"
            )

        for transaction in transactions:
            transaction.is_reconciled = True
            transaction.is_cleared = True

        return transactions


class AppState:
    """Everything the reconciliation core reads and writes."""

    def __init__(
        self,
        accounts: Optional[AccountRepository] = None,
        transactions: Optional[TransactionRepository] = None,
        statements: Optional[StatementStore] = None,
        history: Optional[HistoryIndex] = None,
        active_sessions: Optional[dict[str, ReconciliationSession]] = None,
    ):
        self.accounts = accounts if accounts is not None else AccountRepository()
        self.transactions = (
            transactions if transactions is not None else TransactionRepository()
        )
        self.statements = statements if statements is not None else StatementStore()
        self.history = history if history is not None else HistoryIndex()
        # In-progress sessions keyed by session id
        self.active_sessions: dict[str, ReconciliationSession] = (
            active_sessions if active_sessions is not None else {}
        )

    def in_progress_session(self, account_id: str) -> Optional[ReconciliationSession]:
        """The account's in-progress session, if any."""
        return next(
            (s for s in self.active_sessions.values() if s.account_id == account_id),
            None,
        )

    def find_session(self, session_id: str) -> ReconciliationSession:
        """
        Look up a session whether it is active or already in the history.

        Raises:
            NotFoundError: If no session has this id
        """
        if session_id in self.active_sessions:
            return self.active_sessions[session_id]
        return self.history.get(session_id)

    def all_sessions(self) -> list[ReconciliationSession]:
        return list(self.active_sessions.values()) + self.history.all()

    def post_transaction(self, transaction: Transaction) -> Transaction:
        """Add a transaction and apply its amount to the account balance."""
        account = self.accounts.get(transaction.account_id)
        self.transactions.add(transaction)
        account.balance_cents += transaction.amount_cents
        return transaction

    def to_records(self) -> dict[str, Any]:
        """JSON-ready records for each storage key."""
        return {
            ACCOUNTS_KEY: _accounts_adapter.dump_python(self.accounts.list_all(), mode="json"),
            TRANSACTIONS_KEY: _transactions_adapter.dump_python(
                self.transactions.list_all(), mode="json"
            ),
            SESSIONS_KEY: _sessions_adapter.dump_python(self.all_sessions(), mode="json"),
            STATEMENTS_KEY: _statements_adapter.dump_python(self.statements.all(), mode="json"),
        }

    @classmethod
    def from_records(cls, records: dict[str, Any]) -> "AppState":
        """Rebuild state from records written by ``to_records``."""
        accounts = _accounts_adapter.validate_python(records.get(ACCOUNTS_KEY) or [])
        transactions = _transactions_adapter.validate_python(
            records.get(TRANSACTIONS_KEY) or []
        )
        sessions = _sessions_adapter.validate_python(records.get(SESSIONS_KEY) or [])
        statements = _statements_adapter.validate_python(records.get(STATEMENTS_KEY) or [])

        active = {s.id: s for s in sessions if s.is_in_progress}
        finished = [s for s in sessions if not s.is_in_progress]

        logger.debug(
            f"Loaded {len(accounts)} accounts, {len(transactions)} transactions, "
            f"{len(statements)} statements, {len(active)} active and "
            f"{len(finished)} finished sessions"
        )

        return cls(
            accounts=AccountRepository(accounts),
            transactions=TransactionRepository(transactions),
            statements=StatementStore(statements),
            history=HistoryIndex(finished),
            active_sessions=active,
        )
