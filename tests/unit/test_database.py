"""Unit tests for the database pool helpers and migration runner."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src import database


class _AsyncContext:
    def __init__(self, value=None):
        self._value = value

    async def __aenter__(self):
        return self._value

    async def __aexit__(self, *args):
        return False


@pytest.fixture
def conn():
    connection = MagicMock()
    connection.execute = AsyncMock()
    connection.fetch = AsyncMock(return_value=[])
    connection.fetchval = AsyncMock(return_value=1)
    connection.transaction = MagicMock(side_effect=lambda: _AsyncContext())
    return connection


@pytest.fixture
def pool(conn):
    mock_pool = MagicMock()
    mock_pool.acquire = MagicMock(side_effect=lambda: _AsyncContext(conn))
    with patch("src.database._pool", mock_pool):
        yield mock_pool


@pytest.fixture
def migrations_dir(tmp_path):
    (tmp_path / "001_first.sql").write_text("CREATE TABLE a (id INT);")
    (tmp_path / "002_second.sql").write_text("CREATE TABLE b (id INT);")
    return tmp_path


class TestGetPool:
    async def test_raises_before_init(self):
        with patch("src.database._pool", None):
            with pytest.raises(RuntimeError, match="not initialized"):
                await database.get_pool()


class TestRunMigrations:
    """Tests for run_migrations."""

    async def test_applies_files_in_name_order(self, pool, conn, migrations_dir):
        applied = await database.run_migrations(migrations_dir)

        assert applied == ["001_first.sql", "002_second.sql"]
        executed = [call.args[0] for call in conn.execute.await_args_list]
        assert executed.index("CREATE TABLE a (id INT);") < executed.index(
            "CREATE TABLE b (id INT);"
        )
        assert conn.transaction.call_count == 2

    async def test_skips_files_already_in_ledger(self, pool, conn, migrations_dir):
        conn.fetch.return_value = [{"name": "001_first.sql"}]

        applied = await database.run_migrations(migrations_dir)

        assert applied == ["002_second.sql"]
        executed = [call.args[0] for call in conn.execute.await_args_list]
        assert "CREATE TABLE a (id INT);" not in executed

    async def test_records_each_file_in_ledger(self, pool, conn, migrations_dir):
        await database.run_migrations(migrations_dir)

        ledger_inserts = [
            call.args[1]
            for call in conn.execute.await_args_list
            if call.args[0].startswith("INSERT INTO schema_migrations")
        ]
        assert ledger_inserts == ["001_first.sql", "002_second.sql"]

    async def test_empty_directory_applies_nothing(self, pool, conn, tmp_path):
        assert await database.run_migrations(tmp_path) == []
        conn.execute.assert_not_awaited()

    async def test_bundled_migration_creates_users_table(self, pool, conn):
        applied = await database.run_migrations()

        assert "001_create_users.sql" in applied
        users_ddl = next(
            call.args[0]
            for call in conn.execute.await_args_list
            if "CREATE TABLE IF NOT EXISTS users" in call.args[0]
        )
        assert "UNIQUE (email)" in users_ddl


class TestHealthCheck:
    """Tests for health_check."""

    async def test_healthy(self, pool, conn):
        assert await database.health_check() is True

    async def test_uninitialized_pool_is_unhealthy(self):
        with patch("src.database._pool", None):
            assert await database.health_check() is False

    async def test_query_failure_is_unhealthy(self, pool, conn):
        conn.fetchval.side_effect = OSError("connection reset")
        assert await database.health_check() is False
