"""PostgreSQL pool and schema migrations for the credential store."""

from pathlib import Path
from typing import Optional

import asyncpg
import structlog

from src.config import get_settings

logger = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"

# Global connection pool
_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    """Return the initialized pool.

    Raises:
        RuntimeError: If init_database() has not run or failed
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_database() first.")
    return _pool


async def init_database() -> asyncpg.Pool:
    """Create the connection pool once per process."""
    global _pool

    if _pool is not None:
        return _pool

    settings = get_settings()
    try:
        _pool = await asyncpg.create_pool(
            settings.postgres_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=30,
        )
    except (asyncpg.PostgresError, OSError) as e:
        logger.error("database_pool_creation_failed", error=str(e))
        raise

    logger.info(
        "database_pool_created",
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )
    return _pool


async def close_database() -> None:
    """Close the connection pool if one is open."""
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("database_pool_closed")


async def run_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """Apply pending ``*.sql`` files in name order.

    Applied file names are recorded in ``schema_migrations``; each file runs
    in its own transaction together with its ledger row.

    Returns:
        Names of the files applied by this call
    """
    pool = await get_pool()

    migration_files = sorted(migrations_dir.glob("*.sql")) if migrations_dir.exists() else []
    if not migration_files:
        logger.warning("no_migrations_found", path=str(migrations_dir))
        return []

    applied_now = []
    async with pool.acquire() as conn:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name TEXT PRIMARY KEY,
                applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
            """
        )
        rows = await conn.fetch("SELECT name FROM schema_migrations")
        already_applied = {row["name"] for row in rows}

        for migration_file in migration_files:
            if migration_file.name in already_applied:
                continue
            async with conn.transaction():
                await conn.execute(migration_file.read_text())
                await conn.execute(
                    "INSERT INTO schema_migrations (name) VALUES ($1)",
                    migration_file.name,
                )
            applied_now.append(migration_file.name)
            logger.info("migration_applied", file=migration_file.name)

    return applied_now


async def health_check() -> bool:
    """True if a trivial query succeeds."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            return await conn.fetchval("SELECT 1") == 1
    except (asyncpg.PostgresError, OSError, RuntimeError) as e:
        logger.error("database_health_check_failed", error=str(e))
        return False
