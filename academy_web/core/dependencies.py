"""FastAPI dependencies for injection into route handlers."""
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from academy_web.core.config import settings
from academy_web.core.session import Session, SessionProvider, session_provider
from academy_web.services.backend_client import BackendClient, backend_client
from academy_web.services.confirmation import ConfirmationTracker, confirmation_tracker

bearer_scheme = HTTPBearer(auto_error=False)


def get_backend_client() -> BackendClient:
    """Backend API client."""
    return backend_client


def get_session_provider() -> SessionProvider:
    """Session store."""
    return session_provider


def get_confirmation_tracker() -> ConfirmationTracker:
    """Background confirmation lookups."""
    return confirmation_tracker


def get_session(
    session_id: Optional[str] = Cookie(default=None, alias=settings.SESSION_COOKIE_NAME),
    sessions: SessionProvider = Depends(get_session_provider),
) -> Optional[Session]:
    """The session named by the session cookie, if any."""
    return sessions.get(session_id)


def get_optional_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Optional[Session] = Depends(get_session),
) -> Optional[str]:
    """Bearer token from the Authorization header, else from the session."""
    if credentials is not None:
        return credentials.credentials
    if session is not None:
        return session.token
    return None


def require_token(token: Optional[str] = Depends(get_optional_token)) -> str:
    """Require a bearer token for admin and account calls."""
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return token
