"""Shared test fixtures."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import pytest

from row_map.core.connection import ConnectionConfig
from row_map.core.enums import Dialect


class FakeCursor:
    """Minimal DB-API cursor over canned rows."""

    def __init__(self, columns: list[str], rows: list[tuple[Any, ...]]) -> None:
        self.description = [(name, None, None, None, None, None, None) for name in columns]
        self._rows = rows
        self.closed = False

    def __iter__(self):
        return iter(self._rows)

    def close(self) -> None:
        self.closed = True


@dataclass
class RecordingExecutor:
    """Executor double recording every statement it is given."""

    dialect: Dialect = Dialect.QMARK
    columns: list[str] = field(default_factory=list)
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    rowcount: int = 1
    statements: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)
    cursors: list[FakeCursor] = field(default_factory=list)

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        self.statements.append((sql, params))
        return self.rowcount

    @contextmanager
    def query(self, sql: str, params: tuple[Any, ...] = ()):
        self.statements.append((sql, params))
        cursor = FakeCursor(self.columns, self.rows)
        self.cursors.append(cursor)
        try:
            yield cursor
        finally:
            cursor.close()

    @property
    def last(self) -> tuple[str, tuple[Any, ...]]:
        return self.statements[-1]


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)
