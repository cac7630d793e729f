"""Authentication service: registration, login, logout and session checks.

A request is authorized only when its bearer token verifies *and* the
session store holds an entry for the token's user. A verified token with no
entry is treated as an expired session.
"""

from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import UUID

import structlog

from src.config import get_settings
from src.models.auth import (
    AuthResponse,
    CheckSessionResponse,
    MessageResponse,
    ProfileResponse,
    SessionListResponse,
)
from src.models.session import Session, SessionInfo
from src.models.user import User, UserSummary
from src.services.errors import (
    AuthenticationError,
    ConflictError,
    InternalError,
    SessionExpiredError,
    ValidationError,
)
from src.services.password_service import (
    MAX_PASSWORD_BYTES,
    dummy_hash,
    password_too_long,
    verify_password,
)
from src.services.session_store import SessionStore, get_session_store
from src.services.token_service import TokenService, TokenVerificationError
from src.services.user_service import UserService

logger = structlog.get_logger(__name__)

# Column widths of users.name and users.email
MAX_NAME_LENGTH = 255
MAX_EMAIL_LENGTH = 255


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class AuthService:
    """Orchestrates the credential store, token issuer and session registry."""

    def __init__(
        self,
        user_service: Optional[UserService] = None,
        token_service: Optional[TokenService] = None,
        session_store: Optional[SessionStore] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.user_service = user_service or UserService()
        self.token_service = token_service or TokenService()
        self.session_store = session_store if session_store is not None else get_session_store()
        self.clock = clock
        self.min_password_length = get_settings().min_password_length

    async def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> AuthResponse:
        """Create an account and log it in.

        Args:
            name: Display name
            email: Email address, unique across users
            password: Plain-text password

        Returns:
            AuthResponse with the new user's summary and a fresh token

        Raises:
            ValidationError: If a field is missing or too long, or the password
                is too short
            ConflictError: If the email is already registered
        """
        if _is_blank(name) or _is_blank(email) or _is_blank(password):
            raise ValidationError("All fields are required")

        if len(password) < self.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.min_password_length} characters"
            )
        if password_too_long(password):
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"Name must be at most {MAX_NAME_LENGTH} characters")

        if len(email) > MAX_EMAIL_LENGTH:
            raise ValidationError(f"Email must be at most {MAX_EMAIL_LENGTH} characters")

        # The unique constraint on users.email also rejects duplicates that
        # race past this check.
        if await self.user_service.get_by_email(email) is not None:
            logger.info("registration_rejected_duplicate_email")
            raise ConflictError("User already exists with this email")

        user = await self.user_service.create_user(name=name, email=email, password=password)
        token = await self._open_session(user)

        logger.info("user_registered", user_id=str(user.id))
        return AuthResponse.for_user(
            _summary(user), token, "Registration successful!"
        )

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResponse:
        """Verify credentials, issue a new token and replace any prior session.

        Unknown email and wrong password raise the same error.

        Raises:
            ValidationError: If email or password is missing
            AuthenticationError: If the credentials do not match
        """
        if _is_blank(email) or _is_blank(password):
            raise ValidationError("Email and password are required")

        result = await self.user_service.get_by_email(email)
        # Unknown emails still pay one bcrypt check so timing matches
        password_hash = result[1] if result is not None else dummy_hash()
        if not verify_password(password, password_hash) or result is None:
            logger.info("login_failed", user_found=result is not None)
            raise AuthenticationError("Invalid email or password")

        user, _ = result
        token = await self._open_session(user)

        logger.info("user_logged_in", user_id=str(user.id))
        return AuthResponse.for_user(_summary(user), token, "Login successful!")

    async def logout(self, token: Optional[str]) -> MessageResponse:
        """End the session of the token's user.

        Idempotent: succeeds whether or not a session entry existed.

        Raises:
            ValidationError: If no token is supplied
            AuthenticationError: If the token fails verification
        """
        if _is_blank(token):
            raise ValidationError("No token provided")

        user_id = self._verify(token, "Invalid or expired token")
        removed = await self.session_store.delete(user_id)

        logger.info("session_removed", user_id=user_id, existed=removed)
        return MessageResponse(message="Logout successful")

    async def get_profile(self, token: Optional[str]) -> ProfileResponse:
        """Return the stored user record with session metadata.

        Raises:
            AuthenticationError: If the token is missing or invalid, or the
                user no longer exists
            SessionExpiredError: If the token is valid but has no session
        """
        user_id, session = await self._require_session(token)

        user = await self._load_user(user_id)
        return ProfileResponse(user=user, session=self._session_info(session))

    async def check_session(self, token: Optional[str]) -> CheckSessionResponse:
        """Report whether the token belongs to a live session.

        Never raises: token problems and session store outages both come
        back as ``valid=False``. The user summary comes from the session
        cache, not the credential store.
        """
        if _is_blank(token):
            return CheckSessionResponse(valid=False, message="No token")

        try:
            user_id = self.token_service.verify_token(token)
        except TokenVerificationError as e:
            logger.debug("token_rejected", reason=e.reason, operation="check_session")
            return CheckSessionResponse(valid=False, message="Invalid token")

        try:
            session = await self.session_store.get(user_id)
        except InternalError as e:
            logger.error("session_check_failed", error=e.message, user_id=user_id)
            return CheckSessionResponse(valid=False, message="Session check unavailable")

        if session is None:
            return CheckSessionResponse(valid=False, message="Session expired")

        try:
            summary = UserSummary(id=UUID(session.user_id), name=session.name, email=session.email)
        except ValueError:
            return CheckSessionResponse(valid=False, message="Invalid token")

        return CheckSessionResponse(
            valid=True,
            user=summary,
            session=self._session_info(session),
        )

    async def list_sessions(self, token: Optional[str]) -> SessionListResponse:
        """List every live session.

        Guarded like ``get_profile``: the caller needs a live session.
        """
        await self._require_session(token)

        sessions = await self.session_store.list()
        return SessionListResponse(active_sessions=sessions, total_sessions=len(sessions))

    # ── internals ──────────────────────────────────────────────────────

    async def _open_session(self, user: User) -> str:
        token = self.token_service.create_token(str(user.id))
        await self.session_store.set(
            Session(
                user_id=str(user.id),
                email=user.email,
                name=user.name,
                login_time=self.clock(),
            )
        )
        logger.info("session_created", user_id=str(user.id))
        return token

    def _verify(self, token: str, failure_message: str) -> str:
        try:
            return self.token_service.verify_token(token)
        except TokenVerificationError as e:
            logger.info("token_rejected", reason=e.reason)
            raise AuthenticationError(failure_message)

    async def _require_session(self, token: Optional[str]) -> tuple[str, Session]:
        if _is_blank(token):
            raise AuthenticationError("Not authorized, no token")

        user_id = self._verify(token, "Not authorized, token failed")

        session = await self.session_store.get(user_id)
        if session is None:
            logger.info("session_missing", user_id=user_id)
            raise SessionExpiredError("Session expired")
        return user_id, session

    async def _load_user(self, user_id: str) -> User:
        try:
            uid = UUID(user_id)
        except ValueError:
            raise AuthenticationError("Not authorized, token failed")

        user = await self.user_service.get_by_id(uid)
        if user is None:
            logger.warning("session_user_missing", user_id=user_id)
            raise AuthenticationError("Not authorized, user not found")
        return user

    def _session_info(self, session: Session) -> SessionInfo:
        elapsed = self.clock() - session.login_time
        return SessionInfo(
            login_time=session.login_time,
            session_duration=max(0, int(elapsed.total_seconds() * 1000)),
        )


def _summary(user: User) -> UserSummary:
    """Convert a User model to a UserSummary."""
    return UserSummary(id=user.id, name=user.name, email=user.email)
