"""Schema model, introspection, diffing, DDL rendering and reconciliation.

Usage:
    from sqlschema.schema import TableSchema, ColumnSchema, IndexSchema, IndexKind
    from sqlschema.schema import SchemaIntrospector, diff_schemas
    from sqlschema.schema import render_create_table, render_change
    from sqlschema.schema import plan_sync, apply_sync, sync_table
"""

from sqlschema.schema.differ import (
    AddColumn,
    AddIndex,
    AlterTableOptions,
    DropColumn,
    DropIndex,
    ModifyColumn,
    ReplaceIndex,
    SchemaChange,
    diff_schemas,
    format_changes,
)
from sqlschema.schema.emitter import (
    quote_identifier,
    quote_string,
    render_change,
    render_changes,
    render_column,
    render_create_table,
    render_index,
)
from sqlschema.schema.introspector import SchemaIntrospector
from sqlschema.schema.models import ColumnSchema, IndexKind, IndexSchema, TableSchema
from sqlschema.schema.sync import SyncPlan, SyncResult, apply_sync, plan_sync, sync_table

__all__ = [
    "ColumnSchema",
    "IndexKind",
    "IndexSchema",
    "TableSchema",
    "SchemaIntrospector",
    "diff_schemas",
    "format_changes",
    "SchemaChange",
    "AlterTableOptions",
    "DropColumn",
    "AddColumn",
    "ModifyColumn",
    "DropIndex",
    "AddIndex",
    "ReplaceIndex",
    "quote_identifier",
    "quote_string",
    "render_column",
    "render_index",
    "render_create_table",
    "render_change",
    "render_changes",
    "plan_sync",
    "apply_sync",
    "sync_table",
    "SyncPlan",
    "SyncResult",
]
