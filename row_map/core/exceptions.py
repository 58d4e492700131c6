"""RowMap exception hierarchy.

All exceptions are RowMap-specific. Raw driver exceptions are wrapped
before they reach callers.
"""

from __future__ import annotations


class RowMapError(Exception):
    """Base exception for all RowMap errors."""


# --- Configuration ---


class ConfigurationError(RowMapError):
    """Raised on programmer misuse: unregistered types, bad column declarations,
    statements that would render as invalid SQL."""


class UnregisteredTypeError(ConfigurationError):
    """Raised when a record type has no table registered for it."""

    def __init__(self, record_type: type) -> None:
        self.record_type = record_type
        super().__init__(f"No table registered for type '{record_type.__qualname__}'")


# --- Execution ---


class ExecutionError(RowMapError):
    """Raised when the executor fails to run a statement."""

    def __init__(self, detail: str, sql: str | None = None) -> None:
        self.sql = sql
        message = detail if sql is None else f"{detail} (query: `{sql}`)"
        super().__init__(message)


class SerializationError(ExecutionError):
    """Raised when a serialize-flagged column cannot be encoded or decoded."""

    def __init__(self, column: str, detail: str, sql: str | None = None) -> None:
        self.column = column
        super().__init__(f"Cannot serialize column '{column}': {detail}", sql)


# --- Mapping ---


class MappingError(RowMapError):
    """Base for row-to-record mapping errors."""


class ColumnMismatchError(MappingError):
    """Raised when a result row cannot be turned into the record type."""

    def __init__(self, target_class: str, missing_fields: list[str]) -> None:
        self.target_class = target_class
        self.missing_fields = missing_fields
        super().__init__(f"Cannot map to {target_class}: {missing_fields}")


# --- Adapter ---


class AdapterError(RowMapError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
