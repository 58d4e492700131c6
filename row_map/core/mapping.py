"""Type-to-table mapping registry.

The Mapping binds record types to table descriptors and turns record
instances into INSERT/UPDATE statements and result rows back into records.

The registry is not synchronized: register every table during startup,
before the mapping is shared between threads. Insert, update and select
calls keep no state between them and are as thread-safe as the executor.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping as MappingABC, Sequence
from typing import Any, TypeVar

from row_map.core.codec import Codec, CodecError, JsonCodec
from row_map.core.connection import ConnectionConfig
from row_map.core.enums import Dialect
from row_map.core.exceptions import (
    ConfigurationError,
    SerializationError,
    UnregisteredTypeError,
)
from row_map.core.executor import ConnectionExecutor, Executor
from row_map.core.sql import insert_sql, update_sql
from row_map.mapping.builder import QueryBuilder
from row_map.mapping.columns import build_columns
from row_map.mapping.model import RecordMapper
from row_map.mapping.plan import ColumnDescriptor, ColumnSpec, TableDescriptor

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Containers skipped on insert when empty
_SPARSE_CONTAINERS = (list, tuple, dict, set, frozenset, bytes, bytearray)


def _is_unset(value: Any) -> bool:
    """True for None and empty containers (left out of INSERT statements)."""
    if value is None:
        return True
    return isinstance(value, _SPARSE_CONTAINERS) and len(value) == 0


class Mapping:
    """Registry of record types and their tables.

    Args:
        executor: Statement executor. May be assigned later via ``executor``.
        dialect: Placeholder family. Defaults to the executor's dialect,
            or ``Dialect.QMARK`` when there is no executor.
        codec: Codec for serialize-flagged columns (JSON by default).
    """

    def __init__(
        self,
        executor: Executor | None = None,
        dialect: Dialect | None = None,
        codec: Codec | None = None,
    ) -> None:
        self.executor = executor
        self._dialect = dialect
        self._codec: Codec = codec if codec is not None else JsonCodec()
        self._tables: dict[type, TableDescriptor] = {}

    @classmethod
    def from_config(cls, config: ConnectionConfig, codec: Codec | None = None) -> Mapping:
        """Create a Mapping with a pooled executor for *config*."""
        return cls(ConnectionExecutor.from_config(config), codec=codec)

    @property
    def dialect(self) -> Dialect:
        if self._dialect is not None:
            return self._dialect
        if self.executor is not None:
            return self.executor.dialect
        return Dialect.QMARK

    # --- Registration ---

    def add_table(
        self,
        name: str,
        record: Any,
        columns: Iterable[ColumnSpec] | None = None,
    ) -> TableDescriptor:
        """Register a record type (or a sample instance of it) against a table.

        Re-registering a type replaces its previous descriptor.

        Args:
            name: Table name.
            record: The record class, or an instance of it.
            columns: Optional explicit column specs replacing the type's
                own declarations.

        Raises:
            ConfigurationError: If a column declaration is invalid.
        """
        record_type = record if isinstance(record, type) else type(record)
        table = TableDescriptor(
            name=name,
            record_type=record_type,
            columns=build_columns(record_type, columns),
            mapping=self,
        )
        if record_type in self._tables:
            logger.debug("Replacing table mapping for %s", record_type.__qualname__)
        self._tables[record_type] = table
        logger.debug(
            "Mapped %s to table %s with columns %s",
            record_type.__qualname__,
            name,
            table.column_names,
        )
        return table

    def table(self, record: Any) -> TableDescriptor:
        """Return the descriptor registered for a record type or instance.

        Raises:
            UnregisteredTypeError: If the type was never registered.
        """
        record_type = record if isinstance(record, type) else type(record)
        try:
            return self._tables[record_type]
        except KeyError:
            raise UnregisteredTypeError(record_type) from None

    @property
    def tables(self) -> dict[type, TableDescriptor]:
        return dict(self._tables)

    def _instance_table(self, record: Any) -> TableDescriptor:
        if isinstance(record, type):
            raise ConfigurationError(
                f"Expecting a record instance, got the type {record.__qualname__}"
            )
        return self.table(record)

    # --- Writes ---

    def insert(self, record: Any) -> int:
        """Insert *record* into its table.

        Columns whose value is None or an empty container are left out of
        the statement so the database applies its own defaults.

        Returns:
            The affected row count reported by the executor.

        Raises:
            ConfigurationError: If the type is unregistered or every mapped
                column is unset.
            SerializationError: If a serialize-flagged value cannot be encoded.
        """
        table = self._instance_table(record)
        columns: list[str] = []
        values: list[Any] = []
        for col in table.columns:
            value = getattr(record, col.attribute, None)
            if _is_unset(value):
                continue
            columns.append(col.name)
            values.append(self._encode(col, value) if col.serialize else value)

        if not columns:
            raise ConfigurationError(
                f"Nothing to insert into {table.name}: every mapped column is unset"
            )
        return self._execute(insert_sql(table.name, columns, self.dialect), values)

    def insert_values(self, table: str, columns: Sequence[str], *values: Any) -> int:
        """Insert raw values into *table* without a registered record type."""
        if not columns:
            raise ConfigurationError(f"Nothing to insert into {table}: no columns given")
        if len(columns) != len(values):
            raise ConfigurationError(
                f"Insert into {table} has {len(columns)} column(s) but {len(values)} value(s)"
            )
        return self._execute(insert_sql(table, columns, self.dialect), values)

    def update(self, record: Any, data: MappingABC[str, Any]) -> int:
        """Update the row of *record* with the column values in *data*.

        *data* maps column names to new values. The values are also written
        onto *record*. The WHERE clause uses the record's primary-key values
        after that write, so changing a key column in *data* targets the row
        holding the new key.

        Raises:
            ConfigurationError: If no mapped column is touched, the table
                has no primary key, or the record cannot be modified.
            SerializationError: If a serialize-flagged value cannot be encoded.
        """
        table = self._instance_table(record)
        staged = [(col, data[col.name]) for col in table.columns if col.name in data]
        if not staged:
            raise ConfigurationError(
                f"Update of {table.name} touches no mapped column: {sorted(data)}"
            )
        keys = table.primary_keys
        if not keys:
            raise ConfigurationError(f"Cannot update {table.name}: no primary-key column")

        ignored = set(data) - {col.name for col, _ in staged}
        if ignored:
            logger.debug("Ignoring unmapped column(s) %s for %s", sorted(ignored), table.name)

        set_values = [
            self._encode(col, value) if col.serialize else value for col, value in staged
        ]
        for col, value in staged:
            try:
                setattr(record, col.attribute, value)
            except (AttributeError, ValueError) as e:
                # frozen dataclass or frozen pydantic model
                raise ConfigurationError(
                    f"Cannot write field '{col.attribute}' of "
                    f"{type(record).__qualname__}: {e}"
                ) from e

        key_values = []
        for col in keys:
            value = getattr(record, col.attribute, None)
            key_values.append(self._encode(col, value) if col.serialize else value)

        sql = update_sql(
            table.name,
            [col.name for col, _ in staged],
            [col.name for col in keys],
            self.dialect,
        )
        return self._execute(sql, [*set_values, *key_values])

    # --- Reads ---

    def select(self, record_type: type[T], query: str, *bindings: Any) -> list[T]:
        """Run *query* and map every row onto *record_type*.

        Result columns are matched by name. Columns the type does not map
        are discarded.
        """
        return self.fetch(self.table(record_type), query, bindings)

    def select_one(self, record_type: type[T], query: str, *bindings: Any) -> T | None:
        """Run *query* and return the first mapped row, or None for no rows."""
        results = self.fetch(self.table(record_type), query, bindings, first=True)
        return results[0] if results else None

    def query(self, record_type: type[T], columns: str | Sequence[str] = "*") -> QueryBuilder[T]:
        """Start a SELECT on *record_type*'s table projecting *columns*."""
        return QueryBuilder(self, self.table(record_type), columns)

    def fetch(
        self,
        table: TableDescriptor,
        sql: str,
        params: Sequence[Any],
        first: bool = False,
    ) -> list[Any]:
        """Run *sql* and map its rows onto *table*'s record type.

        With *first*, stops after the first row.
        """
        executor = self._require_executor()
        mapper: RecordMapper[Any] = RecordMapper(table, self._codec)
        logger.debug("Executing %s with %d parameter(s)", sql, len(params))

        results: list[Any] = []
        with executor.query(sql, tuple(params)) as cursor:
            if cursor.description is None:
                return results
            bound = mapper.bind([desc[0] for desc in cursor.description])
            for row in cursor:
                results.append(mapper.map_row(row, bound))
                if first:
                    break
        return results

    # --- Helpers ---

    def _execute(self, sql: str, params: Sequence[Any]) -> int:
        executor = self._require_executor()
        logger.debug("Executing %s with %d parameter(s)", sql, len(params))
        return executor.execute(sql, tuple(params))

    def _require_executor(self) -> Executor:
        if self.executor is None:
            raise ConfigurationError("Mapping has no executor")
        return self.executor

    def _encode(self, col: ColumnDescriptor, value: Any) -> str:
        try:
            return self._codec.encode(value)
        except CodecError as e:
            raise SerializationError(col.name, str(e)) from e
