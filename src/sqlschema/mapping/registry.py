"""Model-to-table mappings and their cache.

``map_model`` derives a ``TableMapping`` from a pydantic model whose
attributes carry ``Column`` annotations.  Attributes without a ``Column``
are not mapped.

``MappingCache`` stores one mapping per model class.  Entries are written
at most once and never evicted; when two callers compute the same mapping
concurrently, the first one stored wins and both get it.  A custom mapper
can be registered per model class before its first use.

Usage:
    from sqlschema.mapping.registry import MappingCache, table_schema_for

    desired = table_schema_for(User, "users", engine="InnoDB")

    cache = MappingCache()          # isolated cache, e.g. in tests
    cache.register(Legacy, build_legacy_mapping)
    mapping = cache.get(Legacy)
"""

import threading
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from sqlschema.mapping.tags import Column, IndexType, SerializeMethod
from sqlschema.schema.models import (
    PRIMARY_INDEX_NAME,
    ColumnSchema,
    IndexKind,
    IndexSchema,
    TableSchema,
)


@dataclass
class ColumnMapping:
    """One mapped attribute."""

    attribute: str
    column_name: str
    data_type: str
    primary_key: bool = False
    auto_increment: bool = False
    nullable: bool = False
    default: str | None = None
    serialize: SerializeMethod = SerializeMethod.NONE
    delimiter: str = ","
    item_type: type | None = None
    index_type: IndexType = IndexType.NONE
    index_name: str = ""
    comment: str = ""

    def to_column_schema(self) -> ColumnSchema:
        return ColumnSchema(
            name=self.column_name,
            data_type=self.data_type,
            is_nullable=self.nullable,
            auto_increment=self.auto_increment,
            default=self.default,
            comment=self.comment,
        )


@dataclass
class TableMapping:
    """Columns of a model, in declaration order."""

    model: type
    columns: list[ColumnMapping] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.by_column: dict[str, ColumnMapping] = {c.column_name: c for c in self.columns}

    @property
    def auto_increment(self) -> ColumnMapping | None:
        for column in self.columns:
            if column.auto_increment:
                return column
        return None

    @property
    def primary_key(self) -> list[ColumnMapping]:
        return [c for c in self.columns if c.primary_key]

    def to_table_schema(
        self,
        name: str,
        engine: str | None = None,
        collation: str | None = None,
        comment: str = "",
    ) -> TableSchema:
        """Build the desired ``TableSchema`` for this model.

        Columns sharing an index name form one composite index, in
        declaration order; all ``pk`` columns form one primary key.
        """
        indexes: list[IndexSchema] = []
        by_name: dict[str, IndexSchema] = {}

        for column in self.columns:
            if column.index_type is IndexType.NONE:
                continue
            if column.index_type is IndexType.PRIMARY_KEY:
                index_name = PRIMARY_INDEX_NAME
            else:
                index_name = column.index_name
            if index_name in by_name:
                by_name[index_name].columns.append(column.column_name)
                continue
            if column.index_type is IndexType.PRIMARY_KEY:
                kind = IndexKind.PRIMARY
            elif column.index_type is IndexType.UNIQUE:
                kind = IndexKind.UNIQUE
            else:
                kind = IndexKind.KEY
            index = IndexSchema(name=index_name, columns=[column.column_name], kind=kind)
            by_name[index_name] = index
            indexes.append(index)

        return TableSchema(
            name=name,
            columns=[column.to_column_schema() for column in self.columns],
            indexes=indexes,
            engine=engine,
            collation=collation,
            comment=comment,
        )


# ------------------------------------------------------------------
# Deriving mappings from annotated models
# ------------------------------------------------------------------


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Strip ``X | None`` / ``Optional[X]``; report whether None was allowed."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return annotation, False


def _infer(annotation: Any) -> tuple[str, SerializeMethod, type | None]:
    """Infer (data type, serialize method, list item type) from a Python type."""
    origin = typing.get_origin(annotation)
    if origin in (list, tuple, set):
        args = typing.get_args(annotation)
        item_type = args[0] if args and isinstance(args[0], type) else str
        return "mediumtext", SerializeMethod.ARRAY, item_type
    if annotation is bool:
        return "tinyint(1)", SerializeMethod.NONE, None
    if annotation is int:
        return "bigint(20)", SerializeMethod.NONE, None
    if annotation is float:
        return "double", SerializeMethod.NONE, None
    if annotation is Decimal:
        return "decimal(10,0)", SerializeMethod.NONE, None
    if annotation is str:
        return "varchar(64)", SerializeMethod.NONE, None
    if annotation is bytes:
        return "blob", SerializeMethod.NONE, None
    if annotation is datetime:
        return "datetime", SerializeMethod.NONE, None
    if annotation is date:
        return "date", SerializeMethod.NONE, None
    return "mediumtext", SerializeMethod.JSON, None


def map_model(model: type) -> TableMapping:
    """Derive the table mapping of a pydantic model.

    Args:
        model: ``BaseModel`` subclass with ``Column``-annotated attributes.

    Returns:
        ``TableMapping`` with one ``ColumnMapping`` per annotated attribute.

    Raises:
        TypeError: If *model* is not a pydantic model class.
    """
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise TypeError(f"Expected a pydantic model class, got {model!r}")

    columns: list[ColumnMapping] = []
    for attribute, field_info in model.model_fields.items():
        marker = next((m for m in field_info.metadata if isinstance(m, Column)), None)
        if marker is None:
            continue
        spec = marker.spec

        annotation, optional = _unwrap_optional(field_info.annotation)
        inferred_type, inferred_serialize, item_type = _infer(annotation)

        data_type = spec.data_type
        if not data_type:
            data_type = inferred_type
            if spec.unsigned:
                data_type += " unsigned"

        serialize = spec.serialize
        if serialize is SerializeMethod.NONE:
            serialize = inferred_serialize

        column_name = spec.column_name or attribute
        index_name = spec.index_name
        if spec.index_type in (IndexType.UNIQUE, IndexType.INDEX) and not index_name:
            index_name = f"idx_{column_name}"

        columns.append(
            ColumnMapping(
                attribute=attribute,
                column_name=column_name,
                data_type=data_type,
                primary_key=spec.primary_key,
                auto_increment=spec.auto_increment,
                nullable=spec.nullable or optional,
                default=spec.default,
                serialize=serialize,
                delimiter=spec.delimiter,
                item_type=item_type,
                index_type=spec.index_type,
                index_name=index_name,
                comment=spec.comment,
            )
        )

    return TableMapping(model=model, columns=columns)


# ------------------------------------------------------------------
# Cache
# ------------------------------------------------------------------


class MappingCache:
    """Populate-once, never-evict cache of table mappings keyed by model class.

    Lookups of populated entries are plain dict reads.  Population computes
    outside the lock and stores under it, keeping the first stored value.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._mappings: dict[type, TableMapping] = {}
        self._mappers: dict[type, Callable[[type], TableMapping]] = {}

    def register(self, model: type, mapper: Callable[[type], TableMapping]) -> None:
        """Use *mapper* instead of ``map_model`` for *model*.

        Raises:
            ValueError: If *model* is already mapped.
        """
        with self._lock:
            if model in self._mappings:
                raise ValueError(f"{model.__name__} is already mapped")
            self._mappers[model] = mapper

    def get(self, model: type) -> TableMapping:
        """Return the mapping for *model*, computing it on first use."""
        mapping = self._mappings.get(model)
        if mapping is not None:
            return mapping

        mapper = self._mappers.get(model, map_model)
        mapping = mapper(model)
        with self._lock:
            return self._mappings.setdefault(model, mapping)

    def __contains__(self, model: object) -> bool:
        return model in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)


default_cache = MappingCache()


def table_schema_for(
    model: type,
    name: str,
    engine: str | None = None,
    collation: str | None = None,
    comment: str = "",
    cache: MappingCache | None = None,
) -> TableSchema:
    """Build the desired ``TableSchema`` of *model* using the mapping cache.

    Example:
        desired = table_schema_for(User, "users", engine="InnoDB")
        await sync_table(adapter, desired)
    """
    mapping = (cache or default_cache).get(model)
    return mapping.to_table_schema(name, engine=engine, collation=collation, comment=comment)
