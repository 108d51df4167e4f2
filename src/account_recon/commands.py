"""Commands accepted by ``ReconciliationService.dispatch``."""

from dataclasses import dataclass
from typing import Optional

from .models.ledger import Account, Statement, Transaction


@dataclass(frozen=True)
class AddAccount:
    account: Account


@dataclass(frozen=True)
class ArchiveAccount:
    account_id: str


@dataclass(frozen=True)
class RecordTransaction:
    """Record a transaction; ``post`` also applies its amount to the account balance."""

    transaction: Transaction
    post: bool = False


@dataclass(frozen=True)
class AddStatement:
    statement: Statement


@dataclass(frozen=True)
class StartSession:
    account_id: str
    statement_id: str


@dataclass(frozen=True)
class ToggleCleared:
    session_id: str
    transaction_id: str


@dataclass(frozen=True)
class SetActualEndingBalance:
    session_id: str
    amount_cents: int


@dataclass(frozen=True)
class SaveCheckpoint:
    session_id: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class CompleteSession:
    session_id: str
    post_adjustment: bool = False


@dataclass(frozen=True)
class AbandonSession:
    session_id: str
