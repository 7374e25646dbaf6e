"""Session state for signed-in visitors.

The backend issues a bearer token at login. It is kept here with the user
record and handed back on every admin call. There is no expiry or refresh:
the backend decides when a token stops working, and a 401 from it clears the
session through the invalidation hooks.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from academy_web.schemas.auth import SessionUser

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """A signed-in visitor."""

    session_id: str
    token: str
    user: SessionUser


InvalidationHook = Callable[[Session], None]


class SessionProvider:
    """In-memory session store."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._hooks: List[InvalidationHook] = []

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        """Get a session by ID."""
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def set(self, token: str, user: SessionUser) -> Session:
        """
        Store a new session.

        Args:
            token: Bearer token issued by the backend
            user: Signed-in user

        Returns:
            The new session
        """
        session = Session(session_id=uuid.uuid4().hex, token=token, user=user)
        self._sessions[session.session_id] = session
        return session

    def clear(self, session_id: Optional[str]) -> bool:
        """
        Drop a session and run the invalidation hooks.

        Returns:
            True if the session existed
        """
        session = self._sessions.pop(session_id, None) if session_id else None
        if session is None:
            return False

        for hook in self._hooks:
            try:
                hook(session)
            except Exception as e:
                logger.error(f"Session invalidation hook failed: {e}", exc_info=True)
        return True

    def clear_token(self, token: str) -> int:
        """Drop every session holding a token the backend rejected."""
        stale = [s.session_id for s in self._sessions.values() if s.token == token]
        for session_id in stale:
            self.clear(session_id)
        return len(stale)

    def add_invalidation_hook(self, hook: InvalidationHook):
        """Register a callback run whenever a session is cleared."""
        self._hooks.append(hook)


def _log_invalidation(session: Session):
    logger.info(f"Session cleared for {session.user.email or session.user.username or 'unknown user'}")


# Singleton instance
session_provider = SessionProvider()
session_provider.add_invalidation_hook(_log_invalidation)
