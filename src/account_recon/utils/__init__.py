"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PreconditionError,
    ValidationError,
    ConfigurationError,
    ImportFileError,
    StorageError,
    ReportGenerationError,
)
from .logging_config import setup_logging
from .money import to_cents, from_cents, format_cents

__all__ = [
    "ReconciliationError",
    "ConflictError",
    "InvalidStateError",
    "NotFoundError",
    "PreconditionError",
    "ValidationError",
    "ConfigurationError",
    "ImportFileError",
    "StorageError",
    "ReportGenerationError",
    "setup_logging",
    "to_cents",
    "from_cents",
    "format_cents",
]
