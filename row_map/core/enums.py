"""Database backend and placeholder dialect enumerations."""

from __future__ import annotations

from enum import Enum


class Dialect(Enum):
    """Parameter placeholder families."""

    QMARK = "qmark"  # ?, ?, ?
    NUMBERED = "numbered"  # $1, $2, $3


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"

    @property
    def dialect(self) -> Dialect:
        if self is DatabaseBackend.POSTGRESQL:
            return Dialect.NUMBERED
        return Dialect.QMARK
