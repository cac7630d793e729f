"""Services package exports."""

from src.services.auth_service import AuthService
from src.services.logging_service import configure_logging, get_logger
from src.services.session_store import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
    get_session_store,
)
from src.services.token_service import TokenService
from src.services.user_service import UserService

__all__ = [
    "AuthService",
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "TokenService",
    "UserService",
    "configure_logging",
    "get_logger",
    "get_session_store",
]
