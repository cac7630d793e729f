"""Models package exports."""

from src.models.auth import (
    AuthResponse,
    CheckSessionResponse,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    RegisterRequest,
    SessionListResponse,
)
from src.models.session import Session, SessionInfo
from src.models.user import User, UserSummary

__all__ = [
    "AuthResponse",
    "CheckSessionResponse",
    "LoginRequest",
    "MessageResponse",
    "ProfileResponse",
    "RegisterRequest",
    "Session",
    "SessionInfo",
    "SessionListResponse",
    "User",
    "UserSummary",
]
