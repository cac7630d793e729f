"""Auth request and response models."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from src.models.session import CamelModel, Session, SessionInfo
from src.models.user import User, UserSummary


class RegisterRequest(BaseModel):
    """Registration payload.

    Fields are optional at the schema level so that missing values are
    reported with the service's own validation messages.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Login credentials."""

    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    """Successful registration or login.

    Attributes:
        id: User identifier
        name: Display name
        email: Email address
        token: Bearer token to send on protected requests
        message: Human-readable confirmation
    """

    id: UUID
    name: str
    email: str
    token: str
    message: str

    @classmethod
    def for_user(cls, user: UserSummary, token: str, message: str) -> "AuthResponse":
        return cls(id=user.id, name=user.name, email=user.email, token=token, message=message)


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class ProfileResponse(BaseModel):
    """Authenticated user's profile with session metadata."""

    user: User
    session: SessionInfo


class CheckSessionResponse(BaseModel):
    """Result of a session-validity check.

    Callers branch only on ``valid``; ``user`` and ``session`` are present
    only when it is true, ``message`` only when it is false.
    """

    valid: bool
    user: Optional[UserSummary] = None
    session: Optional[SessionInfo] = None
    message: Optional[str] = None


class SessionListResponse(CamelModel):
    """Every live session entry."""

    active_sessions: list[Session]
    total_sessions: int
