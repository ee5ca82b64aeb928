"""MySQL table introspection via information_schema.

This module reads the live structure of one table:
- Table options (engine, collation, comment)
- Columns (type, nullability, default, comment, auto increment)
- Indexes (name, ordered columns, primary / unique / plain)

A missing table is not an error: ``read_table()`` returns ``None``.
Every query failure is raised as ``ReadError`` naming the probe that
failed; no partial schema is ever returned.

Usage:
    from sqlschema.schema.introspector import SchemaIntrospector

    introspector = SchemaIntrospector(adapter)
    actual = await introspector.read_table("users")
    if actual is None:
        print("users does not exist")
"""

import logging
import re
from typing import Any

from sqlschema.adapters.base import DatabaseClient
from sqlschema.errors import ReadError
from sqlschema.schema.models import (
    PRIMARY_INDEX_NAME,
    ColumnSchema,
    IndexKind,
    IndexSchema,
    TableSchema,
)

logger = logging.getLogger(__name__)

_ON_UPDATE = re.compile(r"on update (\S+)", re.IGNORECASE)


class SchemaIntrospector:
    """Introspects MySQL table schemas.

    Uses ``information_schema`` (TABLES, COLUMNS, STATISTICS) of the
    connection's active database.  Every call reads fresh -- nothing is
    cached between calls.

    Usage:
        introspector = SchemaIntrospector(adapter)
        schema = await introspector.read_table("orders")
        tables = await introspector.list_tables()
    """

    def __init__(self, client: DatabaseClient):
        """Initialize with a database client.

        Args:
            client: Any ``DatabaseClient`` implementation.
        """
        self._client = client

    async def read_table(self, table_name: str) -> TableSchema | None:
        """Read the structure of *table_name*.

        Args:
            table_name: Table to introspect.

        Returns:
            ``TableSchema`` for the table, or ``None`` if it does not exist.

        Raises:
            ReadError: If any metadata query fails.
        """
        database = await self._get_database_name(table_name)

        info = await self._probe(
            "table info",
            table_name,
            self._client.fetch_one(
                """
                SELECT ENGINE AS engine,
                       TABLE_COLLATION AS collation,
                       TABLE_COMMENT AS comment
                FROM information_schema.TABLES
                WHERE TABLE_SCHEMA = :schema
                  AND TABLE_NAME = :table
                """,
                {"schema": database, "table": table_name},
            ),
        )
        if info is None:
            logger.debug(f"Table {database}.{table_name} not found")
            return None

        columns = await self._get_columns(database, table_name)
        indexes = await self._get_indexes(database, table_name)

        return TableSchema(
            name=table_name,
            columns=columns,
            indexes=indexes,
            engine=info["engine"],
            collation=info["collation"],
            comment=info["comment"] or "",
        )

    async def list_tables(self) -> list[str]:
        """Get all base table names in the active database."""
        database = await self._get_database_name("*")
        rows = await self._probe(
            "tables",
            "*",
            self._client.fetch_all(
                """
                SELECT TABLE_NAME AS name
                FROM information_schema.TABLES
                WHERE TABLE_SCHEMA = :schema
                  AND TABLE_TYPE = 'BASE TABLE'
                ORDER BY TABLE_NAME
                """,
                {"schema": database},
            ),
        )
        return [row["name"] for row in rows]

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------

    async def _probe(self, probe: str, table_name: str, query: Any) -> Any:
        """Await *query*, wrapping data-access failures in ``ReadError``."""
        logger.debug(f"Introspecting {probe} for {table_name}")
        try:
            return await query
        except Exception as e:
            raise ReadError(probe, table_name) from e

    async def _get_database_name(self, table_name: str) -> str:
        row = await self._probe(
            "database name",
            table_name,
            self._client.fetch_one("SELECT DATABASE() AS name"),
        )
        if row is None or not row["name"]:
            raise ReadError("database name", table_name, "no database selected")
        return row["name"]

    async def _get_columns(self, database: str, table_name: str) -> list[ColumnSchema]:
        """Get columns for a table, in ordinal order."""
        rows = await self._probe(
            "columns",
            table_name,
            self._client.fetch_all(
                """
                SELECT COLUMN_NAME AS name,
                       COLUMN_TYPE AS data_type,
                       IS_NULLABLE AS is_nullable,
                       COLUMN_DEFAULT AS default_value,
                       COLUMN_COMMENT AS comment,
                       EXTRA AS extra
                FROM information_schema.COLUMNS
                WHERE TABLE_SCHEMA = :schema
                  AND TABLE_NAME = :table
                ORDER BY ORDINAL_POSITION
                """,
                {"schema": database, "table": table_name},
            ),
        )

        columns: list[ColumnSchema] = []
        for row in rows:
            extra = row["extra"] or ""
            default = row["default_value"]
            on_update = _ON_UPDATE.search(extra)
            if on_update and default is not None:
                default = f"{default} ON UPDATE {on_update.group(1)}"
            columns.append(
                ColumnSchema(
                    name=row["name"],
                    data_type=row["data_type"],
                    is_nullable=(row["is_nullable"] == "YES"),
                    auto_increment="auto_increment" in extra.lower(),
                    default=default,
                    comment=row["comment"] or "",
                )
            )
        return columns

    async def _get_indexes(self, database: str, table_name: str) -> list[IndexSchema]:
        """Get indexes for a table (including the primary key).

        One row per (index, column).  Indexes keep the order the catalog
        lists them in; columns are sorted by their position within the
        index.  Functional indexes have expression parts with no column
        name and cannot be expressed as an ``IndexSchema``, so they are
        left out.
        """
        rows = await self._probe(
            "indexes",
            table_name,
            self._client.fetch_all(
                """
                SELECT INDEX_NAME AS index_name,
                       SEQ_IN_INDEX AS seq,
                       COLUMN_NAME AS column_name,
                       NON_UNIQUE AS non_unique
                FROM information_schema.STATISTICS
                WHERE TABLE_SCHEMA = :schema
                  AND TABLE_NAME = :table
                """,
                {"schema": database, "table": table_name},
            ),
        )

        order: list[str] = []
        kinds: dict[str, IndexKind] = {}
        index_columns: dict[str, list[tuple[int, str]]] = {}
        functional: set[str] = set()

        for row in rows:
            name = row["index_name"]
            if name not in index_columns:
                order.append(name)
                index_columns[name] = []
                if name == PRIMARY_INDEX_NAME:
                    kinds[name] = IndexKind.PRIMARY
                elif int(row["non_unique"]) == 0:
                    kinds[name] = IndexKind.UNIQUE
                else:
                    kinds[name] = IndexKind.KEY
            if row["column_name"] is None:
                functional.add(name)
                continue
            index_columns[name].append((int(row["seq"]), row["column_name"]))

        indexes: list[IndexSchema] = []
        for name in order:
            if name in functional:
                logger.debug(f"Skipping functional index {name} on {table_name}")
                continue
            columns = [column for _, column in sorted(index_columns[name])]
            indexes.append(IndexSchema(name=name, columns=columns, kind=kinds[name]))
        return indexes
