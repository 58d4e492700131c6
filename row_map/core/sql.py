"""SQL statement synthesis.

Pure string builders for INSERT, UPDATE and SELECT text. Placeholders are
rendered per dialect: ``?`` repeated, or ``$1..$n`` numbered from 1 for
every statement.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from row_map.core.enums import Dialect

# A condition fragment that already ends in a comparison operator
_TRAILING_OPERATOR = re.compile(
    r"(?:<=|>=|<>|!=|=|<|>|\bNOT\s+LIKE|\bI?LIKE|\bIS(?:\s+NOT)?)\s*$",
    re.IGNORECASE,
)


def placeholder(dialect: Dialect, position: int) -> str:
    """Return the placeholder token for the 1-based *position*."""
    if dialect is Dialect.NUMBERED:
        return f"${position}"
    return "?"


def placeholders(dialect: Dialect, count: int, start: int = 1) -> str:
    """Render *count* comma-separated placeholders.

    >>> placeholders(Dialect.QMARK, 3)
    '?, ?, ?'
    >>> placeholders(Dialect.NUMBERED, 3)
    '$1, $2, $3'
    """
    return ", ".join(placeholder(dialect, start + i) for i in range(count))


def insert_sql(table: str, columns: Sequence[str], dialect: Dialect) -> str:
    """Build ``INSERT INTO table (a, b) VALUES (?, ?)``."""
    return (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({placeholders(dialect, len(columns))})"
    )


def update_sql(
    table: str,
    set_columns: Sequence[str],
    key_columns: Sequence[str],
    dialect: Dialect,
) -> str:
    """Build ``UPDATE table SET a = ?, b = ? WHERE id = ? AND ...``.

    Numbered placeholders continue from the SET list into the WHERE clause.
    """
    assignments = ", ".join(
        f"{col} = {placeholder(dialect, i)}" for i, col in enumerate(set_columns, 1)
    )
    offset = len(set_columns)
    keys = " AND ".join(
        f"{col} = {placeholder(dialect, offset + i)}" for i, col in enumerate(key_columns, 1)
    )
    sql = f"UPDATE {table} SET {assignments}"
    if keys:
        sql += f" WHERE {keys}"
    return sql


def condition_sql(fragment: str, dialect: Dialect, position: int) -> str:
    """Render a single-value WHERE condition.

    A bare column name defaults to equality; a fragment that already ends
    in an operator (``"age >"``, ``"name LIKE"``) is used as written.
    """
    fragment = fragment.rstrip()
    if not _TRAILING_OPERATOR.search(fragment):
        fragment += " ="
    return f"{fragment} {placeholder(dialect, position)}"


def in_sql(column: str, count: int, dialect: Dialect, start: int = 1) -> str:
    """Render ``column IN (?, ?)``; an empty list renders ``IN (NULL)``."""
    if count == 0:
        return f"{column} IN (NULL)"
    return f"{column} IN ({placeholders(dialect, count, start)})"


def select_sql(
    table: str,
    columns: str,
    conditions: Sequence[str] = (),
    order: str | None = None,
    limit: int | None = None,
) -> str:
    """Assemble a SELECT statement from already rendered parts."""
    sql = f"SELECT {columns} FROM {table}"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    if order:
        sql += f" ORDER BY {order}"
    if limit is not None:
        sql += f" LIMIT {limit}"
    return sql
