"""Fluent SELECT builder.

Accumulates WHERE conditions, ORDER BY and LIMIT for one registered table,
then renders dialect-correct SQL and runs it through the owning Mapping.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from row_map.core.exceptions import ConfigurationError
from row_map.core.sql import condition_sql, in_sql, select_sql
from row_map.mapping.plan import TableDescriptor

if TYPE_CHECKING:
    from row_map.core.mapping import Mapping

T = TypeVar("T")


class QueryBuilder(Generic[T]):
    """Chainable SELECT builder bound to one table.

    Placeholders are numbered when the statement is rendered, so conditions
    may be added in any order and still bind correctly under ``$n``.

        mapping.query(Post).where("title", "hi").order("id").limit(5).all()
    """

    def __init__(
        self,
        mapping: Mapping,
        table: TableDescriptor,
        columns: str | Sequence[str] = "*",
    ) -> None:
        self._mapping = mapping
        self._table = table
        self._columns = columns if isinstance(columns, str) else ", ".join(columns)
        # (fragment, values, is_in_list)
        self._conditions: list[tuple[str, tuple[Any, ...], bool]] = []
        self._order: str | None = None
        self._limit: int | None = None

    def where(self, condition: str, value: Any) -> QueryBuilder[T]:
        """Add a condition with one bound value.

        ``"title"`` compares for equality; ``"age >"`` keeps its operator.
        """
        self._conditions.append((condition, (value,), False))
        return self

    def in_(self, column: str, *values: Any) -> QueryBuilder[T]:
        """Add ``column IN (...)`` sized to the supplied values.

        A single list, tuple or set argument is expanded.
        """
        if len(values) == 1 and isinstance(values[0], (list, tuple, set, frozenset)):
            values = tuple(values[0])
        self._conditions.append((column, tuple(values), True))
        return self

    def order(self, clause: str) -> QueryBuilder[T]:
        """Set the ORDER BY clause."""
        self._order = clause
        return self

    def limit(self, n: int) -> QueryBuilder[T]:
        """Set the LIMIT."""
        if n < 0:
            raise ConfigurationError(f"LIMIT must be non-negative, got {n}")
        self._limit = n
        return self

    def render(self) -> tuple[str, tuple[Any, ...]]:
        """Return ``(sql, params)`` for the accumulated query."""
        dialect = self._table.dialect
        rendered: list[str] = []
        params: list[Any] = []
        for fragment, values, is_in_list in self._conditions:
            position = len(params) + 1
            if is_in_list:
                rendered.append(in_sql(fragment, len(values), dialect, position))
            else:
                rendered.append(condition_sql(fragment, dialect, position))
            params.extend(values)
        sql = select_sql(self._table.name, self._columns, rendered, self._order, self._limit)
        return sql, tuple(params)

    @property
    def params(self) -> tuple[Any, ...]:
        return self.render()[1]

    def __str__(self) -> str:
        return self.render()[0]

    def __repr__(self) -> str:
        sql, params = self.render()
        return f"<QueryBuilder {sql!r} {params!r}>"

    def all(self) -> list[T]:
        """Execute the query and map every row."""
        sql, params = self.render()
        return self._mapping.fetch(self._table, sql, params)

    do = all

    def one(self) -> T | None:
        """Execute the query and return the first row, or None."""
        sql, params = self.render()
        results = self._mapping.fetch(self._table, sql, params, first=True)
        return results[0] if results else None
