"""Row-to-record mapper.

Scatters result rows into new record instances using a table's column
descriptors. Supports dataclasses, Pydantic models, and plain classes.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from row_map.core.codec import Codec, CodecError, JsonCodec
from row_map.core.exceptions import ColumnMismatchError, SerializationError
from row_map.mapping.plan import ColumnDescriptor, TableDescriptor

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_pydantic_model(cls: type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def _is_empty(data: Any) -> bool:
    return data is None or (isinstance(data, (str, bytes, bytearray, memoryview)) and len(data) == 0)


class RecordMapper(Generic[T]):
    """Maps result rows onto a registered record type.

    Result columns are resolved by name, not position. Columns the table
    does not map are discarded, so ``SELECT *`` works against partially
    mapped tables. Serialized columns are decoded only after the rest of
    the row has been read; an empty payload leaves the field at its default.

    Args:
        table: Descriptor of the target record type.
        codec: Decoder for serialize-flagged columns.
    """

    def __init__(self, table: TableDescriptor, codec: Codec | None = None) -> None:
        self._table = table
        self._target_class: type[T] = table.record_type
        self._codec = codec if codec is not None else JsonCodec()
        self._is_pydantic = _is_pydantic_model(self._target_class)
        self._is_dataclass = dataclasses.is_dataclass(self._target_class)

    def bind(self, result_columns: Sequence[str]) -> list[ColumnDescriptor | None]:
        """Resolve result column names against the table's descriptors."""
        bound = [self._table.column(name) for name in result_columns]
        discarded = [name for name, desc in zip(result_columns, bound) if desc is None]
        if discarded:
            logger.debug(
                "Discarding unmapped column(s) %s for %s",
                discarded,
                self._target_class.__qualname__,
            )
        return bound

    def map_row(self, row: Sequence[Any], bound: Sequence[ColumnDescriptor | None]) -> T:
        """Map a single positional row to a target_class instance."""
        values: dict[str, Any] = {}
        deferred: list[tuple[ColumnDescriptor, Any]] = []

        for desc, value in zip(bound, row):
            if desc is None:
                continue
            if desc.serialize:
                deferred.append((desc, value))
            else:
                values[desc.attribute] = value

        for desc, data in deferred:
            if _is_empty(data):
                continue
            try:
                values[desc.attribute] = self._codec.decode(data, desc.annotation)
            except CodecError as e:
                raise SerializationError(desc.name, str(e)) from e

        return self._construct(values)

    def map_many(self, columns: Sequence[str], rows: Iterable[Sequence[Any]]) -> list[T]:
        """Map all rows of a result set with the given column names."""
        bound = self.bind(columns)
        return [self.map_row(row, bound) for row in rows]

    def _construct(self, values: dict[str, Any]) -> T:
        cls = self._target_class

        if self._is_pydantic:
            try:
                return cls.model_validate(values)  # type: ignore[attr-defined, no-any-return]
            except Exception as e:
                raise ColumnMismatchError(cls.__name__, [str(e)]) from e

        if self._is_dataclass:
            return self._construct_dataclass(values)

        # Plain class: keyword construction, else no-arg construction plus attributes
        try:
            return cls(**values)
        except TypeError as e:
            error = e
        try:
            instance = cls()
        except TypeError:
            raise ColumnMismatchError(cls.__name__, [str(error)]) from error
        for name, value in values.items():
            setattr(instance, name, value)
        return instance

    def _construct_dataclass(self, values: dict[str, Any]) -> T:
        cls = self._target_class
        kwargs: dict[str, Any] = {}
        late: dict[str, Any] = {}
        for f in dataclasses.fields(cls):  # type: ignore[arg-type]
            if not f.init:
                if f.name in values:
                    late[f.name] = values[f.name]
            elif f.name in values:
                kwargs[f.name] = values[f.name]
            elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                # Unselected required field
                kwargs[f.name] = None

        try:
            instance = cls(**kwargs)
        except TypeError as e:
            raise ColumnMismatchError(cls.__name__, [str(e)]) from e
        for name, value in late.items():
            object.__setattr__(instance, name, value)
        return instance
