"""Pydantic models for table schemas.

This module contains the in-memory schema representation shared by the
introspector, the differ and the DDL emitter:
- ColumnSchema: one column (type, nullability, auto increment, default, comment)
- IndexKind, IndexSchema: primary key, unique key or plain key
- TableSchema: ordered columns and indexes plus table options

Equality on ``ColumnSchema`` and ``IndexSchema`` is the structural rule the
differ relies on, not plain field-by-field comparison.
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

PRIMARY_INDEX_NAME = "PRIMARY"


def _normalize_default(value: str | None) -> str | None:
    """Treat the literal ``NULL`` default and an empty default as no default.

    An empty default renders no DEFAULT clause, so MySQL reports it as NULL.
    """
    if value in ("NULL", ""):
        return None
    return value


# ============================================================================
# Columns
# ============================================================================


class ColumnSchema(BaseModel):
    """Schema for a table column.

    ``default`` is ``None`` when the column has no default.  The text
    ``"NULL"`` is the literal NULL default and ``""`` renders no default;
    all three compare equal.

    Example:
        >>> col = ColumnSchema(name="id", data_type="bigint(20)", auto_increment=True)
        >>> col.is_nullable
        False
        >>> col == ColumnSchema(name="id", data_type="bigint(20)", auto_increment=True, default="NULL")
        True
    """

    name: str
    data_type: str
    is_nullable: bool = False
    auto_increment: bool = False
    default: str | None = None
    comment: str = ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColumnSchema):
            return NotImplemented
        return (
            self.name == other.name
            and self.data_type == other.data_type
            and self.is_nullable == other.is_nullable
            and self.auto_increment == other.auto_increment
            and _normalize_default(self.default) == _normalize_default(other.default)
            and self.comment == other.comment
        )


# ============================================================================
# Indexes
# ============================================================================


class IndexKind(str, Enum):
    """Kind of index. The primary key is its own case, not a name."""

    PRIMARY = "primary"
    UNIQUE = "unique"
    KEY = "key"


class IndexSchema(BaseModel):
    """Schema for a table index.

    Column order is significant: ``[a, b]`` and ``[b, a]`` are different
    indexes.  A primary index is always named ``PRIMARY``.

    Example:
        >>> pk = IndexSchema(kind=IndexKind.PRIMARY, columns=["id"])
        >>> pk.name
        'PRIMARY'
    """

    name: str = ""
    columns: list[str] = Field(default_factory=list)
    kind: IndexKind = IndexKind.KEY

    @model_validator(mode="after")
    def _check_name(self) -> "IndexSchema":
        if self.kind is IndexKind.PRIMARY:
            self.name = PRIMARY_INDEX_NAME
        elif self.name.upper() == PRIMARY_INDEX_NAME:
            raise ValueError(f"Index name {self.name!r} is reserved for the primary key")
        return self

    @property
    def primary(self) -> bool:
        return self.kind is IndexKind.PRIMARY

    @property
    def unique(self) -> bool:
        """True for unique keys. Primary keys are unique but reported separately."""
        return self.kind is IndexKind.UNIQUE

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexSchema):
            return NotImplemented
        if self.kind is not other.kind:
            return False
        if not self.primary and self.name != other.name:
            return False
        return list(self.columns) == list(other.columns)


# ============================================================================
# Tables
# ============================================================================


class TableSchema(BaseModel):
    """Schema for a database table.

    ``engine`` and ``collation`` left as ``None`` mean "whatever the server
    uses"; the differ does not compare them in that case.  ``comment`` is
    always compared (empty string clears it).

    Example:
        >>> table = TableSchema(
        ...     name="users",
        ...     columns=[ColumnSchema(name="id", data_type="bigint(20)", auto_increment=True)],
        ...     indexes=[IndexSchema(kind=IndexKind.PRIMARY, columns=["id"])],
        ... )
        >>> table.find_index("PRIMARY").columns
        ['id']
    """

    name: str
    columns: list[ColumnSchema] = Field(default_factory=list)
    indexes: list[IndexSchema] = Field(default_factory=list)
    engine: str | None = None
    collation: str | None = None
    comment: str = ""

    @model_validator(mode="after")
    def _check_invariants(self) -> "TableSchema":
        seen: set[str] = set()
        for column in self.columns:
            if column.name in seen:
                raise ValueError(f"Duplicate column {column.name!r} in table {self.name!r}")
            seen.add(column.name)

        auto = [c.name for c in self.columns if c.auto_increment]
        if len(auto) > 1:
            raise ValueError(
                f"Table {self.name!r} has more than one auto increment column: {', '.join(auto)}"
            )

        index_names: set[str] = set()
        for index in self.indexes:
            if index.name in index_names:
                if index.primary:
                    raise ValueError(f"Table {self.name!r} has more than one primary key")
                raise ValueError(f"Duplicate index {index.name!r} in table {self.name!r}")
            index_names.add(index.name)
        return self

    def find_column(self, name: str) -> ColumnSchema | None:
        """Return the column named *name*, or ``None``."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def find_index(self, name: str) -> IndexSchema | None:
        """Return the index named *name*, or ``None``.

        ``"PRIMARY"`` (any case) addresses the primary key.
        """
        if name.upper() == PRIMARY_INDEX_NAME:
            return self.primary_key
        for index in self.indexes:
            if not index.primary and index.name == name:
                return index
        return None

    def match_index(self, index: IndexSchema) -> IndexSchema | None:
        """Return the index of this table that *index* would replace.

        The primary key matches the primary key; other indexes match by name.
        """
        if index.primary:
            return self.primary_key
        return self.find_index(index.name)

    @property
    def primary_key(self) -> IndexSchema | None:
        for index in self.indexes:
            if index.primary:
                return index
        return None

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]
