"""RowMap - bidirectional mapper between record types and table rows."""

from __future__ import annotations

from row_map.core.codec import Codec, CodecError, JsonCodec
from row_map.core.connection import ConnectionConfig, ConnectionManager
from row_map.core.enums import DatabaseBackend, Dialect
from row_map.core.exceptions import (
    AdapterError,
    ColumnMismatchError,
    ConfigurationError,
    ConnectionError,  # noqa: A004
    ExecutionError,
    MappingError,
    PoolError,
    RowMapError,
    SerializationError,
    UnregisteredTypeError,
)
from row_map.core.executor import ConnectionExecutor, Executor
from row_map.core.mapping import Mapping
from row_map.mapping.builder import QueryBuilder
from row_map.mapping.columns import column, db
from row_map.mapping.plan import ColumnDescriptor, ColumnSpec, TableDescriptor

__all__ = [
    # Registry
    "Mapping",
    "QueryBuilder",
    # Declarations
    "column",
    "db",
    "ColumnSpec",
    "ColumnDescriptor",
    "TableDescriptor",
    # Execution
    "Executor",
    "ConnectionExecutor",
    "ConnectionConfig",
    "ConnectionManager",
    # Codec
    "Codec",
    "CodecError",
    "JsonCodec",
    # Enums
    "Dialect",
    "DatabaseBackend",
    # Exceptions
    "RowMapError",
    "ConfigurationError",
    "UnregisteredTypeError",
    "ExecutionError",
    "SerializationError",
    "MappingError",
    "ColumnMismatchError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
