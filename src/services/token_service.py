"""JWT issuance and verification for bearer tokens."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog

from src.config import get_settings

logger = structlog.get_logger(__name__)

JWT_ALGORITHM = "HS256"


class TokenVerificationError(ValueError):
    """Raised when a token fails verification.

    Attributes:
        reason: ``"expired"`` or ``"invalid"``; for logging only, callers
            must treat both the same way.
    """

    def __init__(self, reason: str, detail: str = ""):
        super().__init__(detail or reason)
        self.reason = reason


class TokenService:
    """Mints and verifies signed, time-limited identity tokens."""

    def __init__(self, secret: Optional[str] = None, expire_days: Optional[int] = None):
        settings = get_settings()
        self.secret = secret if secret is not None else settings.jwt_secret
        self.expire_days = (
            expire_days if expire_days is not None else settings.token_expire_days
        )

    def create_token(self, user_id: str) -> str:
        """Create a signed JWT bound to a user.

        Args:
            user_id: User UUID as string (placed in 'sub' claim)

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "iat": now,
            "exp": now + timedelta(days=self.expire_days),
        }
        token = jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)
        logger.debug("token_created", user_id=user_id, expires_days=self.expire_days)
        return token

    def verify_token(self, token: str) -> str:
        """Decode and validate a JWT.

        Args:
            token: Encoded JWT string

        Returns:
            The user id from the 'sub' claim

        Raises:
            TokenVerificationError: If the token is expired, tampered or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenVerificationError("expired", str(e))
        except jwt.InvalidTokenError as e:
            raise TokenVerificationError("invalid", str(e))

        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise TokenVerificationError("invalid", "Token has no subject")
        return user_id
