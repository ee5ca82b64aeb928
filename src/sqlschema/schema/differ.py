"""Schema diffing: desired table vs. introspected table.

Produces an ordered list of change operations.  Each operation becomes
exactly one ALTER TABLE statement (see ``sqlschema.schema.emitter``).
Pure logic -- no I/O, no database connections.

The order is fixed:

1. Table options (engine, collation, comment) in one operation
2. Column drops, in the actual table's order
3. Column adds and modifies, in the desired table's order
4. Index drops, in the actual table's order
5. Index adds and replaces, in the desired table's order

All column operations run before any index operation, so an index that
references a modified column is rebuilt against the new column definition.

Usage:
    from sqlschema.schema.differ import diff_schemas, format_changes

    changes = diff_schemas(desired, actual)
    if changes:
        print(format_changes(changes))
"""

from dataclasses import dataclass

from sqlschema.schema.models import ColumnSchema, IndexSchema, TableSchema


# ------------------------------------------------------------------
# Change operations
# ------------------------------------------------------------------


@dataclass(frozen=True)
class AlterTableOptions:
    """Change table-level options.  Only changed options are set.

    Example:
        change = AlterTableOptions(engine="InnoDB")
        change.describe()
        # 'alter table options: engine=InnoDB'
    """

    engine: str | None = None
    collation: str | None = None
    comment: str | None = None

    def describe(self) -> str:
        parts: list[str] = []
        if self.engine is not None:
            parts.append(f"engine={self.engine}")
        if self.collation is not None:
            parts.append(f"collation={self.collation}")
        if self.comment is not None:
            parts.append(f"comment={self.comment!r}")
        return "alter table options: " + ", ".join(parts)


@dataclass(frozen=True)
class DropColumn:
    """Drop a column that the desired table no longer declares."""

    name: str

    def describe(self) -> str:
        return f"drop column {self.name}"


@dataclass(frozen=True)
class AddColumn:
    """Add a column missing from the actual table."""

    column: ColumnSchema

    def describe(self) -> str:
        return f"add column {self.column.name} {self.column.data_type}"


@dataclass(frozen=True)
class ModifyColumn:
    """Redefine a column.  Carries the full new definition."""

    column: ColumnSchema

    def describe(self) -> str:
        return f"modify column {self.column.name} {self.column.data_type}"


@dataclass(frozen=True)
class DropIndex:
    """Drop an index (or the primary key) the desired table no longer declares."""

    index: IndexSchema

    def describe(self) -> str:
        if self.index.primary:
            return "drop primary key"
        return f"drop index {self.index.name}"


@dataclass(frozen=True)
class AddIndex:
    """Add an index missing from the actual table."""

    index: IndexSchema

    def describe(self) -> str:
        label = "primary key" if self.index.primary else f"index {self.index.name}"
        return f"add {label} ({', '.join(self.index.columns)})"


@dataclass(frozen=True)
class ReplaceIndex:
    """Drop and re-add an index whose definition changed."""

    index: IndexSchema

    def describe(self) -> str:
        label = "primary key" if self.index.primary else f"index {self.index.name}"
        return f"replace {label} ({', '.join(self.index.columns)})"


SchemaChange = (
    AlterTableOptions
    | DropColumn
    | AddColumn
    | ModifyColumn
    | DropIndex
    | AddIndex
    | ReplaceIndex
)


# ------------------------------------------------------------------
# Diffing
# ------------------------------------------------------------------


def _diff_options(desired: TableSchema, actual: TableSchema) -> AlterTableOptions | None:
    """Compare table options.  Unset desired engine/collation are ignored."""
    engine = None
    collation = None
    comment = None

    if desired.engine and desired.engine != actual.engine:
        engine = desired.engine
    if desired.collation and desired.collation != actual.collation:
        collation = desired.collation
    if desired.comment != actual.comment:
        comment = desired.comment

    if engine is None and collation is None and comment is None:
        return None
    return AlterTableOptions(engine=engine, collation=collation, comment=comment)


def _indexes_after_drops(indexes: list[IndexSchema], dropped: set[str]) -> list[IndexSchema]:
    """Project the effect of dropping *dropped* columns on existing indexes.

    MySQL removes a dropped column from every index containing it, and an
    index left without columns disappears.
    """
    if not dropped:
        return list(indexes)

    remaining: list[IndexSchema] = []
    for index in indexes:
        columns = [c for c in index.columns if c not in dropped]
        if not columns:
            continue
        if len(columns) == len(index.columns):
            remaining.append(index)
        else:
            remaining.append(index.model_copy(update={"columns": columns}))
    return remaining


def diff_schemas(desired: TableSchema, actual: TableSchema) -> list[SchemaChange]:
    """Compute the ordered changes that turn *actual* into *desired*.

    Both schemas must exist; a missing table is handled by the caller with
    a CREATE TABLE instead.

    Args:
        desired: Table structure the caller wants.
        actual: Table structure read from the database.

    Returns:
        List of change operations, in the order they must be applied.
        Empty when the two tables are structurally identical.

    Examples:
        >>> from sqlschema.schema.models import ColumnSchema, TableSchema
        >>> t = TableSchema(name="t", columns=[ColumnSchema(name="id", data_type="int(11)")])
        >>> diff_schemas(t, t)
        []

        >>> actual = TableSchema(name="t", columns=[ColumnSchema(name="old", data_type="int(11)")])
        >>> [c.describe() for c in diff_schemas(t, actual)]
        ['drop column old', 'add column id int(11)']
    """
    changes: list[SchemaChange] = []

    # 1. Table options
    options = _diff_options(desired, actual)
    if options is not None:
        changes.append(options)

    # 2. Column drops
    dropped: set[str] = set()
    for column in actual.columns:
        if desired.find_column(column.name) is None:
            changes.append(DropColumn(name=column.name))
            dropped.add(column.name)

    # 3. Column adds / modifies
    for column in desired.columns:
        current = actual.find_column(column.name)
        if current is None:
            changes.append(AddColumn(column=column))
        elif current != column:
            changes.append(ModifyColumn(column=column))

    # Indexes as they stand once the column drops have run
    remaining = TableSchema(
        name=actual.name,
        indexes=_indexes_after_drops(actual.indexes, dropped),
    )

    # 4. Index drops
    for index in remaining.indexes:
        if desired.match_index(index) is None:
            changes.append(DropIndex(index=index))

    # 5. Index adds / replaces
    for index in desired.indexes:
        current = remaining.match_index(index)
        if current is None:
            changes.append(AddIndex(index=index))
        elif current != index:
            changes.append(ReplaceIndex(index=index))

    return changes


def format_changes(changes: list[SchemaChange]) -> str:
    """Format a change list as a human-readable report."""
    if not changes:
        return "No changes"
    lines = [f"{len(changes)} change(s):"]
    for i, change in enumerate(changes, start=1):
        lines.append(f"  {i}. {change.describe()}")
    return "\n".join(lines)
