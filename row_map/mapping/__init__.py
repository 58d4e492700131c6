"""Mapping layer - column declarations, table descriptors and row scatter."""

from __future__ import annotations

from row_map.mapping.builder import QueryBuilder
from row_map.mapping.columns import build_columns, column, db, parse_tag
from row_map.mapping.model import RecordMapper
from row_map.mapping.plan import ColumnDescriptor, ColumnSpec, TableDescriptor

__all__ = [
    "QueryBuilder",
    "RecordMapper",
    "ColumnSpec",
    "ColumnDescriptor",
    "TableDescriptor",
    "build_columns",
    "column",
    "db",
    "parse_tag",
]
