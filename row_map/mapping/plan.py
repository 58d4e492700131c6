"""Table mapping descriptors.

Frozen dataclasses describing how a record type's fields correspond to
table columns. Built once by ``Mapping.add_table`` and read at execution
time by the insert/update/select paths.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from row_map.core.enums import Dialect

if TYPE_CHECKING:
    from row_map.core.mapping import Mapping


@dataclass(frozen=True)
class ColumnSpec:
    """Declared configuration of one mapped field.

    ``attribute`` is only needed when columns are passed explicitly to
    ``Mapping.add_table``; declarations attached to a field infer it.
    """

    name: str
    primary_key: bool = False
    serialize: bool = False
    attribute: str | None = None


@dataclass(frozen=True)
class ColumnDescriptor:
    """Resolved mapping of one record field to one table column."""

    name: str
    attribute: str
    index: int  # position in the record type's field list
    primary_key: bool = False
    serialize: bool = False
    annotation: Any = Any  # target type for decoding serialized payloads


@dataclass(frozen=True)
class TableDescriptor:
    """Ordered column descriptors for one registered record type."""

    name: str
    record_type: type
    columns: tuple[ColumnDescriptor, ...]
    mapping: Mapping | None = field(default=None, compare=False, repr=False)

    @property
    def dialect(self) -> Dialect:
        if self.mapping is None:
            return Dialect.QMARK
        return self.mapping.dialect

    @property
    def primary_keys(self) -> tuple[ColumnDescriptor, ...]:
        return tuple(col for col in self.columns if col.primary_key)

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    def column(self, name: str) -> ColumnDescriptor | None:
        """Look up a column descriptor by its column name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None
