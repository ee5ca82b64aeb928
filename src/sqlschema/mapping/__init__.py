"""Annotated-model mapping: column tags, mapping cache and row marshalling.

Usage:
    from typing import Annotated
    from pydantic import BaseModel
    from sqlschema.mapping import Column, table_schema_for, insert_row, scan_row

    class User(BaseModel):
        id: Annotated[int, Column("id bigint pk ai")] = 0
        name: Annotated[str, Column("name varchar(128) unique")] = ""

    desired = table_schema_for(User, "users")
"""

from sqlschema.mapping.registry import (
    ColumnMapping,
    MappingCache,
    TableMapping,
    default_cache,
    map_model,
    table_schema_for,
)
from sqlschema.mapping.rows import insert_row, scan_row, update_row
from sqlschema.mapping.tags import Column, ColumnSpec, SerializeMethod, parse_tag

__all__ = [
    "Column",
    "ColumnSpec",
    "SerializeMethod",
    "parse_tag",
    "ColumnMapping",
    "TableMapping",
    "MappingCache",
    "default_cache",
    "map_model",
    "table_schema_for",
    "insert_row",
    "update_row",
    "scan_row",
]
