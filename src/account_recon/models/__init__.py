"""Data models for reconciliation."""

from .ledger import Account, Transaction, TransactionType, Statement
from .reconciliation import (
    SessionStatus,
    Staleness,
    ReconciliationCheckpoint,
    ReconciliationSession,
    Resolution,
    ReconciliationSummary,
)

__all__ = [
    "Account",
    "Transaction",
    "TransactionType",
    "Statement",
    "SessionStatus",
    "Staleness",
    "ReconciliationCheckpoint",
    "ReconciliationSession",
    "Resolution",
    "ReconciliationSummary",
]
