"""Credential store: user records in PostgreSQL."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional
from uuid import UUID, uuid4

import asyncpg
import structlog

from src.database import get_pool
from src.models.user import User
from src.services.errors import ConflictError, CredentialStoreError
from src.services.password_service import hash_password

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def _connection() -> AsyncIterator[asyncpg.Connection]:
    """Acquire a pooled connection, mapping driver failures to CredentialStoreError."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            yield conn
    except (asyncpg.PostgresError, OSError, RuntimeError) as e:
        logger.error("credential_store_failed", error=str(e))
        raise CredentialStoreError("Credential store unavailable") from e


def _row_to_user(row) -> User:
    return User(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        created_at=row["created_at"],
    )


class UserService:
    """Service for creating and looking up users."""

    async def create_user(self, name: str, email: str, password: str) -> User:
        """Create a new user with a hashed password.

        Args:
            name: Display name
            email: Email address, unique across users
            password: Plain-text password (will be hashed)

        Returns:
            Created User model

        Raises:
            ConflictError: If the email is already registered
            CredentialStoreError: If the database insert fails
        """
        user_id = uuid4()
        now = datetime.now(timezone.utc)
        password_hash = hash_password(password)

        async with _connection() as conn:
            try:
                await conn.execute(
                    """
                    INSERT INTO users (id, name, email, password_hash, created_at)
                    VALUES ($1, $2, $3, $4, $5)
                    """,
                    user_id,
                    name,
                    email,
                    password_hash,
                    now,
                )
            except asyncpg.UniqueViolationError:
                logger.warning("user_create_duplicate_email")
                raise ConflictError("User already exists with this email")

        logger.info("user_created", user_id=str(user_id))

        return User(id=user_id, name=name, email=email, created_at=now)

    async def get_by_email(self, email: str) -> Optional[tuple[User, str]]:
        """Get a user by exact (case-sensitive) email.

        Args:
            email: Email to look up

        Returns:
            Tuple of (User, password_hash) or None if not found
        """
        async with _connection() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, name, email, password_hash, created_at
                FROM users
                WHERE email = $1
                """,
                email,
            )

        if row is None:
            return None

        return _row_to_user(row), row["password_hash"]

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by UUID.

        Args:
            user_id: User UUID

        Returns:
            User model or None if not found
        """
        async with _connection() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, name, email, created_at
                FROM users
                WHERE id = $1
                """,
                user_id,
            )

        if row is None:
            return None

        return _row_to_user(row)
