"""MySQL DDL rendering.

Renders a ``TableSchema`` into one ``CREATE TABLE IF NOT EXISTS``
statement, or a single differ change operation into one ``ALTER TABLE``
statement.  Pure string construction -- executing the statements is the
caller's job.

Identifiers are backtick-quoted; comments and string defaults are emitted
as escaped single-quoted literals.

Usage:
    from sqlschema.schema.emitter import render_change, render_create_table

    sql = render_create_table(desired)
    statements = [render_change(desired.name, c) for c in changes]
"""

import re

from sqlschema.errors import InvalidSchemaError
from sqlschema.schema.differ import (
    AddColumn,
    AddIndex,
    AlterTableOptions,
    DropColumn,
    DropIndex,
    ModifyColumn,
    ReplaceIndex,
    SchemaChange,
)
from sqlschema.schema.models import ColumnSchema, IndexSchema, TableSchema

# Characters escaped inside single-quoted literals (same set as mysql_real_escape_string)
_STRING_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\0": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\x1a": "\\Z",
}

_OPTION_VALUE = re.compile(r"^\w+$")

# Defaults emitted verbatim rather than quoted
_RAW_DEFAULT_PATTERNS = [
    re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$"),
    re.compile(r"^(NULL|TRUE|FALSE)$", re.IGNORECASE),
    re.compile(
        r"^(CURRENT_TIMESTAMP|NOW|LOCALTIME|LOCALTIMESTAMP|CURRENT_DATE|CURRENT_TIME)"
        r"(\(\d*\))?(\s+ON\s+UPDATE\s+\w+(\(\d*\))?)?$",
        re.IGNORECASE,
    ),
    re.compile(r"^'.*'$", re.DOTALL),
    re.compile(r"^[bBxX]'[0-9a-fA-F]*'$"),
    re.compile(r"^\(.*\)$", re.DOTALL),
]


# ------------------------------------------------------------------
# Quoting
# ------------------------------------------------------------------


def quote_identifier(name: str) -> str:
    """Quote a table, column or index name with backticks.

    Example:
        >>> quote_identifier("order")
        '`order`'
        >>> quote_identifier("we`ird")
        '`we``ird`'
    """
    if not name:
        raise InvalidSchemaError("Identifier must not be empty")
    return "`" + name.replace("`", "``") + "`"


def quote_string(value: str) -> str:
    """Render *value* as an escaped single-quoted SQL literal.

    Example:
        >>> quote_string("it's")
        "'it\\\\'s'"
    """
    return "'" + "".join(_STRING_ESCAPES.get(ch, ch) for ch in value) + "'"


def render_default(value: str) -> str:
    """Render a column default.

    Numbers, ``NULL``/``TRUE``/``FALSE``, current-time expressions,
    already-quoted literals, bit/hex literals and parenthesized expressions
    are emitted as written; anything else becomes a quoted string.
    """
    for pattern in _RAW_DEFAULT_PATTERNS:
        if pattern.match(value):
            return value
    return quote_string(value)


def _option_value(option: str, value: str) -> str:
    if not _OPTION_VALUE.match(value):
        raise InvalidSchemaError(f"Invalid {option} value: {value!r}")
    return value


# ------------------------------------------------------------------
# Clauses
# ------------------------------------------------------------------


def render_column(column: ColumnSchema) -> str:
    """Render a column definition.

    Order is fixed: name, type, NULL/NOT NULL, AUTO_INCREMENT, DEFAULT,
    COMMENT.

    Example:
        >>> render_column(ColumnSchema(name="age", data_type="int(11)", default="0"))
        '`age` int(11) NOT NULL DEFAULT 0'
    """
    if not column.data_type:
        raise InvalidSchemaError(f"Column {column.name!r} has no data type")

    sql = f"{quote_identifier(column.name)} {column.data_type}"
    sql += " NULL" if column.is_nullable else " NOT NULL"
    if column.auto_increment:
        sql += " AUTO_INCREMENT"
    if column.default:
        sql += " DEFAULT " + render_default(column.default)
    if column.comment:
        sql += " COMMENT " + quote_string(column.comment)
    return sql


def _column_list(index: IndexSchema) -> str:
    if not index.columns:
        raise InvalidSchemaError(f"Index {index.name!r} has no columns")
    return "(" + ",".join(quote_identifier(c) for c in index.columns) + ")"


def render_index(index: IndexSchema) -> str:
    """Render an index clause.

    Example:
        >>> render_index(IndexSchema(name="idx_ab", columns=["a", "b"]))
        'KEY `idx_ab` (`a`,`b`)'
    """
    columns = _column_list(index)
    if index.primary:
        return f"PRIMARY KEY {columns}"
    if index.unique:
        return f"UNIQUE KEY {quote_identifier(index.name)} {columns}"
    return f"KEY {quote_identifier(index.name)} {columns}"


def _render_options(
    engine: str | None,
    collation: str | None,
    comment: str | None,
    separator: str,
) -> list[str]:
    options: list[str] = []
    if engine:
        options.append(f"ENGINE{separator}{_option_value('engine', engine)}")
    if collation:
        options.append(f"COLLATE{separator}{_option_value('collation', collation)}")
    if comment is not None:
        options.append(f"COMMENT{separator}{quote_string(comment)}")
    return options


# ------------------------------------------------------------------
# Statements
# ------------------------------------------------------------------


def render_create_table(table: TableSchema) -> str:
    """Render a ``CREATE TABLE IF NOT EXISTS`` statement.

    Columns keep their declared order, the primary key clause comes first
    among the indexes, and set table options follow the closing
    parenthesis.

    Raises:
        InvalidSchemaError: If the table has no columns or an index has
            no columns.

    Example:
        >>> t = TableSchema(name="t", columns=[ColumnSchema(name="id", data_type="int(11)")])
        >>> render_create_table(t)
        'CREATE TABLE IF NOT EXISTS `t` (`id` int(11) NOT NULL)'
    """
    if not table.columns:
        raise InvalidSchemaError(f"Table {table.name!r} has no columns")

    clauses = [render_column(column) for column in table.columns]
    primary = table.primary_key
    if primary is not None:
        clauses.append(render_index(primary))
    clauses.extend(render_index(index) for index in table.indexes if not index.primary)

    sql = f"CREATE TABLE IF NOT EXISTS {quote_identifier(table.name)} ({','.join(clauses)})"
    options = _render_options(
        table.engine, table.collation, table.comment or None, separator="="
    )
    if options:
        sql += " " + " ".join(options)
    return sql


def render_change(table_name: str, change: SchemaChange) -> str:
    """Render one change operation as one ``ALTER TABLE`` statement.

    Args:
        table_name: Table being altered.
        change: Operation produced by ``diff_schemas``.

    Returns:
        SQL text.

    Raises:
        InvalidSchemaError: If the operation is malformed or of unknown type.

    Example:
        >>> render_change("t", DropColumn(name="old"))
        'ALTER TABLE `t` DROP `old`'
    """
    prefix = f"ALTER TABLE {quote_identifier(table_name)}"

    if isinstance(change, AlterTableOptions):
        options = _render_options(change.engine, change.collation, change.comment, separator=" = ")
        if not options:
            raise InvalidSchemaError("Table options change carries no options")
        return f"{prefix} " + " ".join(options)

    if isinstance(change, DropColumn):
        return f"{prefix} DROP {quote_identifier(change.name)}"

    if isinstance(change, AddColumn):
        return f"{prefix} ADD {render_column(change.column)}"

    if isinstance(change, ModifyColumn):
        return f"{prefix} MODIFY {render_column(change.column)}"

    if isinstance(change, DropIndex):
        return f"{prefix} {_drop_index_clause(change.index)}"

    if isinstance(change, AddIndex):
        return f"{prefix} ADD {render_index(change.index)}"

    if isinstance(change, ReplaceIndex):
        add_clause = render_index(change.index)
        return f"{prefix} {_drop_index_clause(change.index)}, ADD {add_clause}"

    raise InvalidSchemaError(f"Unknown change operation: {type(change).__name__}")


def _drop_index_clause(index: IndexSchema) -> str:
    if index.primary:
        return "DROP PRIMARY KEY"
    return f"DROP INDEX {quote_identifier(index.name)}"


def render_changes(table_name: str, changes: list[SchemaChange]) -> list[str]:
    """Render a change list, one statement per change, same order."""
    return [render_change(table_name, change) for change in changes]
