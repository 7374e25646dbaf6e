"""Authentication schemas."""
from pydantic import Field
from typing import Optional

from academy_web.schemas.catalog import BackendModel


class LoginRequest(BackendModel):
    """Schema for a login attempt."""

    username_or_email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SessionUser(BackendModel):
    """The signed-in user as stored in the session."""

    id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role_name: Optional[str] = None


class LoginResponse(BackendModel):
    """Schema returned to the browser after signing in."""

    token: str
    user: SessionUser
    redirect_to: str = "/"
