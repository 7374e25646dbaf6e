"""Translation of backend failures into HTTP responses."""
import logging
from typing import Optional

import httpx
from fastapi import HTTPException

from academy_web.core.session import SessionProvider

logger = logging.getLogger(__name__)


def backend_status(error: Exception) -> Optional[int]:
    """Status code of a backend error response, None for other failures."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


def backend_message(error: Exception, default: str) -> str:
    """The backend's own error message when it sent one."""
    if isinstance(error, httpx.HTTPStatusError):
        try:
            body = error.response.json()
        except ValueError:
            return default
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    return default


def raise_for_detail(error: Exception, what: str):
    """
    Raise the HTTP error matching a failed detail lookup.

    A backend 404 becomes a 404 so the not-found view is rendered, anything
    else a 502.

    Raises:
        HTTPException: Always
    """
    if backend_status(error) == 404:
        raise HTTPException(status_code=404, detail=f"{what} not found")

    logger.error(f"Failed to load {what.lower()}: {error}")
    raise HTTPException(status_code=502, detail=f"Failed to load {what.lower()}")


def raise_for_action(
    error: Exception,
    default: str,
    sessions: Optional[SessionProvider] = None,
    token: Optional[str] = None,
):
    """
    Raise the HTTP error matching a failed form or admin action.

    A backend 401 clears the sessions holding the rejected token. Client
    errors keep their status and message, everything else becomes a 502.

    Raises:
        HTTPException: Always
    """
    status = backend_status(error)
    message = backend_message(error, default)

    if status == 401:
        if sessions is not None and token:
            sessions.clear_token(token)
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")
    if status is not None and 400 <= status < 500:
        raise HTTPException(status_code=status, detail=message)

    logger.error(f"{default}: {error}")
    raise HTTPException(status_code=502, detail=message)
