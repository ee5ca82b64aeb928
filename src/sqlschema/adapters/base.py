"""Database client protocol definition.

Defines the ``DatabaseClient`` Protocol that the introspector, the
reconciler and the row helpers talk to.  All methods are ``async def`` --
the library is async-first, and cancelling the awaiting task aborts the
call in flight.

Usage:
    from sqlschema.adapters.base import DatabaseClient

    async def do_work(client: DatabaseClient) -> None:
        row = await client.fetch_one("SELECT DATABASE() AS name")
        rows = await client.fetch_all(
            "SELECT COLUMN_NAME FROM information_schema.COLUMNS WHERE TABLE_NAME = :table",
            {"table": "users"},
        )
        await client.execute("ALTER TABLE `users` ADD `email` varchar(255) NOT NULL")
        await client.close()
"""

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class ExecuteResult:
    """Outcome of a non-query statement."""

    rowcount: int = 0
    last_insert_id: int | None = None


class DatabaseClient(Protocol):
    """Database client interface that all adapters must implement.

    Parameterized statements use named ``:param`` placeholders.  A
    statement executed without parameters is sent to the server verbatim.
    """

    async def fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict]:
        """Run a query and return every row.

        Args:
            sql: Query text with ``:name`` placeholders.
            params: Optional dict of named parameters.

        Returns:
            List of dicts keyed by column label.  Empty list if no rows.
        """
        ...

    async def fetch_one(self, sql: str, params: dict[str, Any] | None = None) -> dict | None:
        """Run a query and return the first row, or ``None`` if there is none."""
        ...

    async def execute(self, sql: str, params: dict[str, Any] | None = None) -> ExecuteResult:
        """Execute a statement (DDL or DML) and commit it.

        Args:
            sql: Statement text.  With ``params=None`` the text is sent
                verbatim, so DDL containing ``:`` or ``%`` is safe.
            params: Optional dict of named parameters.

        Returns:
            ``ExecuteResult`` with affected row count and last insert id.

        Example:
            await client.execute(
                "ALTER TABLE `users` ADD `email` varchar(255) NOT NULL"
            )
        """
        ...

    async def close(self) -> None:
        """Close database connections and clean up resources."""
        ...
