"""Statement executors.

The mapping layer only needs two calls from the database: run a write and
report the affected row count, and run a read and hand back a cursor. Each
call is a single independent statement; no transaction spans calls.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Any, Protocol, runtime_checkable

from row_map.core.connection import ConnectionConfig, ConnectionManager
from row_map.core.enums import Dialect
from row_map.core.exceptions import ExecutionError


@runtime_checkable
class Executor(Protocol):
    """Opaque SQL executor consumed by ``Mapping``."""

    @property
    def dialect(self) -> Dialect:
        """Placeholder family the executor expects."""
        ...

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        """Run a write statement and return the affected row count."""
        ...

    def query(self, sql: str, params: tuple[Any, ...] = ()) -> AbstractContextManager[Any]:
        """Run a read statement.

        The context manager yields a DB-API style cursor exposing
        ``description`` and row iteration, and releases it on exit.
        """
        ...


class ConnectionExecutor:
    """Executor running each statement on a pooled connection."""

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self._connection_manager = connection_manager

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> ConnectionExecutor:
        """Create an executor from a ConnectionConfig."""
        return cls(ConnectionManager(config))

    @property
    def dialect(self) -> Dialect:
        return self._connection_manager.dialect

    @property
    def connection_manager(self) -> ConnectionManager:
        return self._connection_manager

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        adapter = self._connection_manager.adapter
        with self._connection_manager.get_connection() as conn:
            try:
                cursor = adapter.execute(conn, sql, tuple(params))
                conn.commit()
            except Exception as e:
                conn.rollback()
                raise ExecutionError(str(e), sql) from e
            return int(cursor.rowcount)

    @contextmanager
    def query(self, sql: str, params: tuple[Any, ...] = ()) -> Iterator[Any]:
        adapter = self._connection_manager.adapter
        with self._connection_manager.get_connection() as conn:
            try:
                cursor = adapter.execute(conn, sql, tuple(params))
            except Exception as e:
                conn.rollback()
                raise ExecutionError(str(e), sql) from e
            try:
                yield cursor
            finally:
                cursor.close()
                conn.rollback()

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._connection_manager.close_pool()
