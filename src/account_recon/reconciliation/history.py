"""Append-only history of finished reconciliation sessions."""

from copy import deepcopy
from typing import Iterable, Optional
import logging

from ..models.reconciliation import ReconciliationSession
from ..utils.exceptions import ConflictError, InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)


class HistoryIndex:
    """
    Audit trail of completed and abandoned sessions.

    Sessions are copied on the way in and on the way out, so a recorded
    entry can never be rewritten through a reference held by a caller.
    """

    def __init__(self, sessions: Optional[Iterable[ReconciliationSession]] = None):
        self._sessions: dict[str, ReconciliationSession] = {}
        self._by_account: dict[str, list[str]] = {}
        for session in sessions or []:
            self.record(session)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def record(self, session: ReconciliationSession) -> None:
        """
        Append a terminal session.

        Raises:
            InvalidStateError: If the session is still in progress
            ConflictError: If the session was already recorded
        """
        if not session.status.is_terminal:
            raise InvalidStateError(
                f"Session {session.id} is {session.status.value}; only finished sessions "
                "can be recorded"
            )
        if session.id in self._sessions:
            raise ConflictError(f"Session {session.id} is already recorded")

        self._sessions[session.id] = deepcopy(session)
        self._by_account.setdefault(session.account_id, []).append(session.id)
        logger.debug(f"Recorded {session.status.value} session {session.id}")

    def query(self, account_id: str) -> list[ReconciliationSession]:
        """Sessions for an account, newest first by completion (or start) date."""
        sessions = [self._sessions[sid] for sid in self._by_account.get(account_id, [])]
        sessions.sort(key=lambda s: s.sort_date, reverse=True)
        return deepcopy(sessions)

    def get(self, session_id: str) -> ReconciliationSession:
        """
        Look up a recorded session.

        Raises:
            NotFoundError: If the session is not in the history
        """
        try:
            return deepcopy(self._sessions[session_id])
        except KeyError:
            raise NotFoundError(f"Session {session_id} not found in history") from None

    def all(self) -> list[ReconciliationSession]:
        """Every recorded session, newest first."""
        return deepcopy(sorted(self._sessions.values(), key=lambda s: s.sort_date, reverse=True))
