"""Exception hierarchy for sqlschema.

I/O failures are wrapped with the table and the probe or statement that
failed, and chained to the underlying driver error (``raise ... from e``).
The pure layers (models, differ, emitter) only raise
``InvalidSchemaError`` on malformed input.

Usage:
    from sqlschema.errors import ReadError, WriteError

    try:
        await sync_table(adapter, desired)
    except ReadError as e:
        print(f"Introspection failed at {e.probe}: {e.__cause__}")
    except WriteError as e:
        print(f"Statement failed: {e.statement}")
"""


class SchemaSyncError(Exception):
    """Base class for all sqlschema errors."""

    pass


class InvalidSchemaError(SchemaSyncError, ValueError):
    """Raised when a schema or change operation cannot be rendered.

    Examples: a table without columns, an index without columns, or an
    engine name that is not a plain word.
    """

    pass


class ReadError(SchemaSyncError):
    """Raised when an introspection query fails.

    Attributes:
        probe: Which lookup failed (``database name``, ``table info``,
            ``columns``, ``indexes``, ``tables``).
        table: Table being introspected.
    """

    def __init__(self, probe: str, table: str, message: str | None = None):
        self.probe = probe
        self.table = table
        detail = f": {message}" if message else ""
        super().__init__(f"Get {probe} for table '{table}' failed{detail}")


class WriteError(SchemaSyncError):
    """Raised when executing a generated statement fails.

    Attributes:
        statement: The SQL text that failed.
        table: Target table.
        position: Zero-based position of the statement in its batch, or
            ``None`` for single statements.
    """

    def __init__(self, statement: str, table: str, position: int | None = None):
        self.statement = statement
        self.table = table
        self.position = position
        where = f" (statement {position + 1})" if position is not None else ""
        super().__init__(f"Write to table '{table}' failed{where}: {statement}")


class UnknownColumnError(SchemaSyncError, KeyError):
    """Raised when an operation names a column the mapping does not know."""

    def __init__(self, column: str, owner: str):
        self.column = column
        self.owner = owner
        super().__init__(f"Unknown column {column} for {owner}")

    def __str__(self) -> str:
        return self.args[0]
