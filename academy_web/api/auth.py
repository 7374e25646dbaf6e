"""Sign-in endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response

from academy_web.api.errors import backend_message, backend_status, raise_for_action
from academy_web.core.config import settings
from academy_web.core.dependencies import (
    get_backend_client,
    get_session_provider,
    require_token,
)
from academy_web.core.session import SessionProvider
from academy_web.schemas.auth import LoginRequest, LoginResponse, SessionUser
from academy_web.services.backend_client import BackendClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# Landing page per backend role
ROLE_HOME = {
    "ADMIN": "/dashboard",
    "VISITOR_REGISTERED": "/my-account",
}


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    response: Response,
    client: BackendClient = Depends(get_backend_client),
    sessions: SessionProvider = Depends(get_session_provider),
):
    """
    Sign in and open a session.

    The token is returned to the browser and also kept in a server-side
    session named by a cookie.

    Args:
        credentials: Username or email and password

    Returns:
        Token, user and the page to land on for the user's role
    """
    try:
        data = await client.login(credentials.username_or_email, credentials.password)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except Exception as e:
        status = backend_status(e)
        if status in (400, 401, 403):
            raise HTTPException(
                status_code=401,
                detail=backend_message(e, "Invalid credentials or server error."),
            )
        raise_for_action(e, "Invalid credentials or server error.")

    data = data or {}
    token = data.get("token")
    user_data = data.get("user") or data
    if not token or not isinstance(user_data, dict):
        raise HTTPException(
            status_code=502,
            detail="Login successful, but no token or user data received.",
        )

    user = SessionUser.model_validate(user_data)
    redirect_to = ROLE_HOME.get(user.role_name)
    if redirect_to is None:
        raise HTTPException(status_code=403, detail="Unauthorized user role.")

    session = sessions.set(token, user)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session.session_id,
        httponly=True,
        samesite="lax",
        secure=not settings.DEBUG,
    )
    logger.info(f"User {user.email or user.username} signed in as {user.role_name}")
    return LoginResponse(token=token, user=user, redirect_to=redirect_to)


@router.post("/logout", status_code=204)
async def logout(
    response: Response,
    session_id: Optional[str] = Cookie(default=None, alias=settings.SESSION_COOKIE_NAME),
    sessions: SessionProvider = Depends(get_session_provider),
):
    """Close the current session."""
    sessions.clear(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    response.status_code = 204
    return response


@router.get("/me", response_model=SessionUser)
async def me(
    token: str = Depends(require_token),
    client: BackendClient = Depends(get_backend_client),
    sessions: SessionProvider = Depends(get_session_provider),
):
    """Get the signed-in user, as the backend sees the token."""
    try:
        data = await client.get_current_user(token)
    except Exception as e:
        raise_for_action(e, "Failed to load your account", sessions, token)
    return SessionUser.model_validate(data)
