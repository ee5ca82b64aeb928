"""sqlschema: Keep live MySQL tables in line with declared table schemas.

Introspects a table, diffs it against the declared structure, renders the
CREATE TABLE / ALTER TABLE statements and executes them in order.  Tables
can be declared directly, in a TOML definition file, or derived from
pydantic models annotated with column tags.

Usage:
    from sqlschema import AsyncMySQLAdapter, TableSchema, sync_table
    from sqlschema import ColumnSchema, IndexSchema, IndexKind
    from sqlschema import Column, table_schema_for, insert_row, scan_row
    from sqlschema import get_adapter, load_db_config, load_table_definitions
"""

__version__ = "0.1.0"

# Adapters
from sqlschema.adapters.base import DatabaseClient, ExecuteResult
from sqlschema.adapters.mysql import AsyncMySQLAdapter

# Config
from sqlschema.config.loader import load_db_config, load_table_definitions
from sqlschema.config.models import DatabaseConfig, DatabaseProfile, TableDefinitions

# Errors
from sqlschema.errors import (
    InvalidSchemaError,
    ReadError,
    SchemaSyncError,
    UnknownColumnError,
    WriteError,
)

# Factory
from sqlschema.factory import ProfileNotFoundError, get_adapter, resolve_url

# Mapping
from sqlschema.mapping.registry import MappingCache, map_model, table_schema_for
from sqlschema.mapping.rows import insert_row, scan_row, update_row
from sqlschema.mapping.tags import Column

# Schema
from sqlschema.schema.differ import diff_schemas, format_changes
from sqlschema.schema.emitter import render_change, render_create_table
from sqlschema.schema.introspector import SchemaIntrospector
from sqlschema.schema.models import ColumnSchema, IndexKind, IndexSchema, TableSchema
from sqlschema.schema.sync import SyncPlan, SyncResult, apply_sync, plan_sync, sync_table

__all__ = [
    # Adapters
    "DatabaseClient",
    "ExecuteResult",
    "AsyncMySQLAdapter",
    # Config
    "load_db_config",
    "load_table_definitions",
    "DatabaseProfile",
    "DatabaseConfig",
    "TableDefinitions",
    # Errors
    "SchemaSyncError",
    "InvalidSchemaError",
    "ReadError",
    "WriteError",
    "UnknownColumnError",
    # Factory
    "get_adapter",
    "ProfileNotFoundError",
    "resolve_url",
    # Mapping
    "Column",
    "MappingCache",
    "map_model",
    "table_schema_for",
    "insert_row",
    "update_row",
    "scan_row",
    # Schema
    "ColumnSchema",
    "IndexKind",
    "IndexSchema",
    "TableSchema",
    "SchemaIntrospector",
    "diff_schemas",
    "format_changes",
    "render_create_table",
    "render_change",
    "plan_sync",
    "apply_sync",
    "sync_table",
    "SyncPlan",
    "SyncResult",
]
