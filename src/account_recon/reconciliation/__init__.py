"""Reconciliation core: statements, sessions, differences, summaries and history."""

from .history import HistoryIndex
from .resolver import resolve
from .session import SessionStateMachine
from .statements import StatementStore
from .summary import classify_staleness, summarize, summarize_accounts

__all__ = [
    "HistoryIndex",
    "SessionStateMachine",
    "StatementStore",
    "classify_staleness",
    "resolve",
    "summarize",
    "summarize_accounts",
]
