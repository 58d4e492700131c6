"""Contract tests for adapter and executor protocol compliance."""

from __future__ import annotations

import pytest

from row_map.adapters.postgresql import PostgresqlSyncAdapter, _build_conninfo
from row_map.adapters.protocol import SyncAdapter
from row_map.adapters.sqlite import SqliteSyncAdapter
from row_map.core.connection import ConnectionConfig, ConnectionManager
from row_map.core.enums import DatabaseBackend, Dialect
from row_map.core.exceptions import AdapterError, ExecutionError, PoolError
from row_map.core.executor import ConnectionExecutor, Executor


class TestSqliteSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        assert isinstance(SqliteSyncAdapter(), SyncAdapter)

    def test_dialect(self) -> None:
        assert SqliteSyncAdapter().dialect is Dialect.QMARK

    def test_lifecycle(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        pool = adapter.create_pool(sqlite_config)
        assert len(pool) == 1

        conn = adapter.acquire_connection(pool)
        assert conn is not None

        cursor = adapter.execute(conn, "SELECT ? AS val", (1,))
        assert cursor.fetchone() == (1,)

        adapter.release_connection(conn, pool)
        assert len(pool) == 1

        adapter.close_pool(pool)
        assert len(pool) == 0

    def test_empty_pool(self) -> None:
        with pytest.raises(PoolError):
            SqliteSyncAdapter().acquire_connection([])


class TestPostgresqlSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        assert isinstance(PostgresqlSyncAdapter(), SyncAdapter)

    def test_dialect(self) -> None:
        assert PostgresqlSyncAdapter().dialect is Dialect.NUMBERED

    def test_conninfo(self) -> None:
        config = ConnectionConfig(
            driver="postgresql", host="db", port=5432, user="app", database="blog"
        )
        assert _build_conninfo(config) == "host=db port=5432 user=app dbname=blog"


class TestConnectionManager:
    def test_loads_adapter_by_driver(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        assert isinstance(manager.adapter, SqliteSyncAdapter)
        assert manager.dialect is Dialect.QMARK

    def test_driver_is_case_insensitive(self) -> None:
        manager = ConnectionManager(ConnectionConfig(driver="SQLite", database=":memory:"))
        assert isinstance(manager.adapter, SqliteSyncAdapter)

    def test_unsupported_driver(self) -> None:
        with pytest.raises(AdapterError, match="Unsupported database driver"):
            ConnectionManager(ConnectionConfig(driver="mssql", database="x"))

    def test_pool_is_lazy_and_closable(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        assert manager._pool is None
        with manager.get_connection() as conn:
            assert conn is not None
        assert manager._pool is not None
        manager.close_pool()
        assert manager._pool is None

    def test_backend_dialects(self) -> None:
        assert DatabaseBackend.SQLITE.dialect is Dialect.QMARK
        assert DatabaseBackend.POSTGRESQL.dialect is Dialect.NUMBERED


class TestConnectionExecutor:
    def test_implements_executor_protocol(self, sqlite_config: ConnectionConfig) -> None:
        assert isinstance(ConnectionExecutor.from_config(sqlite_config), Executor)

    def test_execute_and_query(self, sqlite_config: ConnectionConfig) -> None:
        executor = ConnectionExecutor.from_config(sqlite_config)
        executor.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
        assert executor.execute("INSERT INTO t (id, name) VALUES (?, ?)", (1, "a")) == 1

        with executor.query("SELECT id, name FROM t WHERE id = ?", (1,)) as cursor:
            assert [d[0] for d in cursor.description] == ["id", "name"]
            assert list(cursor) == [(1, "a")]
        executor.close()

    def test_execute_error_is_wrapped(self, sqlite_config: ConnectionConfig) -> None:
        executor = ConnectionExecutor.from_config(sqlite_config)
        with pytest.raises(ExecutionError, match="no such table") as exc_info:
            executor.execute("INSERT INTO missing (id) VALUES (?)", (1,))
        assert exc_info.value.sql == "INSERT INTO missing (id) VALUES (?)"
        assert exc_info.value.__cause__ is not None

    def test_query_error_is_wrapped(self, sqlite_config: ConnectionConfig) -> None:
        executor = ConnectionExecutor.from_config(sqlite_config)
        with pytest.raises(ExecutionError):
            with executor.query("SELECT * FROM missing"):
                pass

    def test_connection_returned_after_error(self, sqlite_config: ConnectionConfig) -> None:
        executor = ConnectionExecutor.from_config(sqlite_config)
        with pytest.raises(ExecutionError):
            executor.execute("SELECT * FROM missing")
        assert len(executor.connection_manager._pool) == 1
