"""Database adapter protocol.

Every adapter module MUST implement this protocol so the connection
manager can drive any backend through the same calls.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from row_map.core.connection import ConnectionConfig
from row_map.core.enums import Dialect


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def dialect(self) -> Dialect:
        """Placeholder family the driver accepts."""
        ...

    def create_pool(self, config: ConnectionConfig) -> Any:
        """Create a connection pool."""
        ...

    def acquire_connection(self, pool: Any) -> Any:
        """Acquire a connection from the pool."""
        ...

    def release_connection(self, connection: Any, pool: Any) -> None:
        """Release a connection back to the pool."""
        ...

    def close_pool(self, pool: Any) -> None:
        """Close the pool and release all connections."""
        ...

    def execute(
        self,
        connection: Any,
        sql: str,
        params: tuple[Any, ...] = (),
    ) -> Any:
        """Execute SQL with positional parameters and return a cursor."""
        ...
