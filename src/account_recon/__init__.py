"""Account reconciliation against external bank statements."""

__version__ = "0.1.0"

from .service import ReconciliationService

__all__ = ["ReconciliationService", "__version__"]
