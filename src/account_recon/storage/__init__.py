"""Application state and its key-value persistence."""

from .json_store import JsonFileStore
from .state import AccountRepository, AppState, TransactionRepository

__all__ = [
    "AccountRepository",
    "AppState",
    "JsonFileStore",
    "TransactionRepository",
]
