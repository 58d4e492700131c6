"""Column declarations and descriptor construction.

Fields are mapped by attaching a ``ColumnSpec`` to them:

    @dataclass
    class Post:
        id: int = column("id", pk=True)
        title: str = column("title")
        body: dict = column("body,serialize")

Pydantic models use ``Annotated[int, db("id,pk")]``. Fields without a
declaration are not mapped.
"""

from __future__ import annotations

import dataclasses
import inspect
import sys
import typing
from collections.abc import Iterable
from typing import Any

from row_map.core.exceptions import ConfigurationError
from row_map.mapping.plan import ColumnDescriptor, ColumnSpec

# dataclasses.field metadata key
COLUMN_KEY = "row_map"

_KEYWORDS = {"pk": "primary_key", "serialize": "serialize"}

_MISSING = dataclasses.MISSING


def parse_tag(tag: str) -> ColumnSpec:
    """Parse a comma-separated column tag such as ``"id,pk"``.

    The first non-keyword token is the column name; ``pk`` and
    ``serialize`` may appear in any position.

    Raises:
        ConfigurationError: If the tag names no column or more than one.
    """
    name: str | None = None
    flags = {"primary_key": False, "serialize": False}
    for token in (part.strip() for part in tag.split(",")):
        if not token:
            continue
        if token in _KEYWORDS:
            flags[_KEYWORDS[token]] = True
        elif name is None:
            name = token
        else:
            raise ConfigurationError(
                f"Column tag '{tag}' names more than one column ('{name}', '{token}')"
            )
    if name is None:
        raise ConfigurationError(f"Column tag '{tag}' does not name a column")
    return ColumnSpec(name=name, **flags)


def column(
    tag: str,
    *,
    pk: bool = False,
    serialize: bool = False,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
    **kwargs: Any,
) -> Any:
    """Declare a mapped dataclass field.

    *tag* is a column name or a full tag (``"id,pk"``); the keyword flags
    are combined with the tag's. Returns a ``dataclasses.field`` carrying the
    column spec in its metadata. Without an explicit default the field
    defaults to ``None`` so partially populated records can be built.
    """
    spec = parse_tag(tag)
    if default is _MISSING and default_factory is _MISSING:
        default = None
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[COLUMN_KEY] = ColumnSpec(
        name=spec.name,
        primary_key=spec.primary_key or pk,
        serialize=spec.serialize or serialize,
    )
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata=metadata,
        **kwargs,
    )


def db(tag: str) -> ColumnSpec:
    """Column spec for ``Annotated`` metadata: ``Annotated[int, db("id,pk")]``."""
    return parse_tag(tag)


def _type_hints(record_type: type) -> dict[str, Any]:
    """Resolve annotations with extras.

    When the class-wide resolution fails, each annotation is resolved on
    its own: an unresolvable plain hint maps to ``Any``, an unresolvable
    ``Annotated`` hint raises because it may carry a column declaration.
    """
    try:
        return typing.get_type_hints(record_type, include_extras=True)
    except (NameError, TypeError):
        pass

    hints: dict[str, Any] = {}
    for klass in reversed(record_type.__mro__):
        module = sys.modules.get(klass.__module__)
        globalns = dict(getattr(module, "__dict__", {}))
        localns = dict(vars(klass))
        for name, raw in inspect.get_annotations(klass).items():
            hints[name] = _resolve_hint(record_type, name, raw, globalns, localns)
    return hints


def _resolve_hint(
    record_type: type,
    name: str,
    raw: Any,
    globalns: dict[str, Any],
    localns: dict[str, Any],
) -> Any:
    if not isinstance(raw, str):
        return raw
    try:
        return eval(raw, globalns, localns)  # noqa: S307
    except (NameError, TypeError, SyntaxError) as e:
        if "Annotated[" in raw:
            raise ConfigurationError(
                f"Cannot resolve annotation '{raw}' of field '{name}' "
                f"on {record_type.__qualname__}: {e}"
            ) from e
        return Any


def _spec_from_metadata(items: Iterable[Any]) -> ColumnSpec | None:
    for item in items:
        if isinstance(item, ColumnSpec):
            return item
    return None


def _split_annotated(hint: Any) -> tuple[Any, ColumnSpec | None]:
    if typing.get_origin(hint) is typing.Annotated:
        base, *extras = typing.get_args(hint)
        return base, _spec_from_metadata(extras)
    return hint, None


def _declared_fields(record_type: type) -> list[tuple[str, Any, ColumnSpec | None]]:
    """List ``(attribute, annotation, spec)`` in declaration order.

    Handles Pydantic models, dataclasses and plain annotated classes.
    """
    # Pydantic model
    if hasattr(record_type, "model_fields"):
        return [
            (name, info.annotation, _spec_from_metadata(info.metadata))
            for name, info in record_type.model_fields.items()
        ]

    hints = _type_hints(record_type)

    # Dataclass
    if dataclasses.is_dataclass(record_type):
        result = []
        for f in dataclasses.fields(record_type):
            annotation, spec = _split_annotated(hints.get(f.name, Any))
            result.append((f.name, annotation, f.metadata.get(COLUMN_KEY, spec)))
        return result

    # Plain class - use annotations
    return [(name, *_split_annotated(hint)) for name, hint in hints.items()]


def build_columns(
    record_type: type,
    columns: Iterable[ColumnSpec] | None = None,
) -> tuple[ColumnDescriptor, ...]:
    """Build the ordered column descriptors for *record_type*.

    Args:
        record_type: The record class being registered.
        columns: Optional explicit column specs. Each must name its
            ``attribute``; they replace any declarations on the type.

    Raises:
        ConfigurationError: On duplicate columns, shared attributes or
            attributes the type does not declare.
    """
    fields = _declared_fields(record_type)
    positions = {name: i for i, (name, _, _) in enumerate(fields)}
    annotations = {name: annotation for name, annotation, _ in fields}

    if columns is not None:
        pairs = []
        for spec in columns:
            attribute = spec.attribute or spec.name
            if positions and attribute not in positions:
                raise ConfigurationError(
                    f"{record_type.__qualname__} has no field '{attribute}' "
                    f"for column '{spec.name}'"
                )
            pairs.append((attribute, spec))
    else:
        pairs = [(name, spec) for name, _, spec in fields if spec is not None]

    descriptors: list[ColumnDescriptor] = []
    seen_names: set[str] = set()
    seen_attributes: set[str] = set()
    for order, (attribute, spec) in enumerate(pairs):
        if not spec.name:
            raise ConfigurationError(
                f"Field '{attribute}' of {record_type.__qualname__} has an empty column name"
            )
        if spec.name in seen_names:
            raise ConfigurationError(
                f"Duplicate column '{spec.name}' in {record_type.__qualname__}"
            )
        if attribute in seen_attributes:
            raise ConfigurationError(
                f"Field '{attribute}' of {record_type.__qualname__} is mapped twice"
            )
        seen_names.add(spec.name)
        seen_attributes.add(attribute)
        descriptors.append(
            ColumnDescriptor(
                name=spec.name,
                attribute=attribute,
                index=positions.get(attribute, order),
                primary_key=spec.primary_key,
                serialize=spec.serialize,
                annotation=annotations.get(attribute, Any),
            )
        )
    return tuple(descriptors)
