"""Custom exceptions for the reconciliation application."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class ConflictError(ReconciliationError):
    """An account already has an in-progress session, or a record id is taken."""

    pass


class InvalidStateError(ReconciliationError):
    """Operation attempted against a session in the wrong state."""

    pass


class NotFoundError(ReconciliationError):
    """Referenced id does not exist or does not belong to the expected account."""

    pass


class PreconditionError(ReconciliationError):
    """Operation attempted before its inputs were provided."""

    pass


class ValidationError(ReconciliationError):
    """Data validation error."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ImportFileError(ReconciliationError):
    """Error reading an import file."""

    pass


class StorageError(ReconciliationError):
    """Error reading or writing the state file."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
