"""Database adapters package.

Provides the ``DatabaseClient`` Protocol and the async MySQL adapter.

Usage:
    from sqlschema.adapters import DatabaseClient, AsyncMySQLAdapter
"""

from sqlschema.adapters.base import DatabaseClient, ExecuteResult
from sqlschema.adapters.mysql import AsyncMySQLAdapter

__all__ = [
    "DatabaseClient",
    "ExecuteResult",
    "AsyncMySQLAdapter",
]
