"""Session registry: who is currently logged in.

One entry per user id. Writers overwrite (login) or remove (logout); reads
never mutate. There is no TTL and no capacity bound.
"""

from datetime import datetime
from typing import Optional, Protocol

import redis.asyncio as redis
import structlog

from src.config import get_settings
from src.models.session import Session
from src.services.errors import SessionStoreUnavailableError

logger = structlog.get_logger(__name__)

SESSION_KEY_PREFIX = "auth_session:"


class SessionStore(Protocol):
    """Storage interface for session entries keyed by user id."""

    async def get(self, user_id: str) -> Optional[Session]: ...

    async def set(self, session: Session) -> None: ...

    async def delete(self, user_id: str) -> bool: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...

    async def list(self) -> list[Session]: ...


class InMemorySessionStore:
    """Process-local session store. Entries are lost on restart."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    async def get(self, user_id: str) -> Optional[Session]:
        return self._sessions.get(user_id)

    async def set(self, session: Session) -> None:
        self._sessions[session.user_id] = session

    async def delete(self, user_id: str) -> bool:
        return self._sessions.pop(user_id, None) is not None

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass

    async def list(self) -> list[Session]:
        return list(self._sessions.values())


class RedisSessionStore:
    """Session store backed by one Redis hash per user.

    Keys never expire, matching the in-memory store; entries survive API
    restarts as long as Redis does. Every Redis failure surfaces as
    SessionStoreUnavailableError.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        client: Optional[redis.Redis] = None,
        key_prefix: str = SESSION_KEY_PREFIX,
    ):
        self.url = url or get_settings().redis_url
        self.key_prefix = key_prefix
        self._redis = client

    def _key(self, user_id: str) -> str:
        return f"{self.key_prefix}{user_id}"

    @property
    def client(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(self.url, encoding="utf-8", decode_responses=True)
            logger.info("redis_client_created", url=self.url.split("@")[-1])
        return self._redis

    @staticmethod
    def _encode(session: Session) -> dict[str, str]:
        return {
            "user_id": session.user_id,
            "email": session.email,
            "name": session.name,
            "login_time": session.login_time.isoformat(),
        }

    @staticmethod
    def _decode(data: dict) -> Optional[Session]:
        if not data:
            return None
        return Session(
            user_id=data["user_id"],
            email=data["email"],
            name=data["name"],
            login_time=datetime.fromisoformat(data["login_time"]),
        )

    async def get(self, user_id: str) -> Optional[Session]:
        try:
            data = await self.client.hgetall(self._key(user_id))
        except redis.RedisError as e:
            logger.error("redis_get_session_failed", error=str(e), user_id=user_id)
            raise SessionStoreUnavailableError("Session store unavailable") from e
        return self._decode(data)

    async def set(self, session: Session) -> None:
        key = self._key(session.user_id)
        try:
            # Replace rather than merge so no field of an older login survives
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.delete(key)
                pipe.hset(key, mapping=self._encode(session))
                await pipe.execute()
        except redis.RedisError as e:
            logger.error("redis_set_session_failed", error=str(e), user_id=session.user_id)
            raise SessionStoreUnavailableError("Session store unavailable") from e

    async def delete(self, user_id: str) -> bool:
        try:
            removed = await self.client.delete(self._key(user_id))
        except redis.RedisError as e:
            logger.error("redis_delete_session_failed", error=str(e), user_id=user_id)
            raise SessionStoreUnavailableError("Session store unavailable") from e
        return removed > 0

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except redis.RedisError as e:
            logger.warning("redis_ping_failed", error=str(e))
            return False

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("redis_connection_closed")

    async def list(self) -> list[Session]:
        sessions = []
        try:
            async for key in self.client.scan_iter(match=f"{self.key_prefix}*"):
                session = self._decode(await self.client.hgetall(key))
                if session is not None:
                    sessions.append(session)
        except redis.RedisError as e:
            logger.error("redis_list_sessions_failed", error=str(e))
            raise SessionStoreUnavailableError("Session store unavailable") from e
        return sessions


# Global session store
_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create the process-wide session store.

    The backend is chosen by the ``SESSION_BACKEND`` setting.
    """
    global _session_store

    if _session_store is None:
        backend = get_settings().session_backend
        if backend == "redis":
            _session_store = RedisSessionStore()
        else:
            _session_store = InMemorySessionStore()
        logger.info("session_store_created", backend=backend)
    return _session_store


def reset_session_store() -> None:
    """Drop the process-wide store so the next call rebuilds it."""
    global _session_store
    _session_store = None
