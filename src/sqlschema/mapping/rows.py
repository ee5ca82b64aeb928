"""Row marshalling between mapped models and tables.

- ``insert_row``: INSERT a model instance, filling its auto increment attribute
- ``update_row``: UPDATE selected columns, keyed by the primary key
- ``scan_row``: build a model instance from a result row

Serialized columns are encoded on the way in and decoded on the way out:
delimited arrays, JSON (``json``) and YAML (``pyyaml``).

Usage:
    from sqlschema.mapping.rows import insert_row, scan_row, update_row

    user = User(name="Alice", tags=["a", "b"])
    await insert_row(adapter, "users", user)      # user.id is now set
    user.name = "Alicia"
    await update_row(adapter, "users", user, columns=["name"])

    rows = await adapter.fetch_all("SELECT * FROM `users`")
    users = [scan_row(row, User) for row in rows]
"""

import json
import logging
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from sqlschema.adapters.base import DatabaseClient
from sqlschema.errors import InvalidSchemaError, UnknownColumnError, WriteError
from sqlschema.mapping.registry import ColumnMapping, MappingCache, default_cache
from sqlschema.mapping.tags import SerializeMethod
from sqlschema.schema.emitter import quote_identifier

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Value encoding
# ------------------------------------------------------------------


def encode_value(column: ColumnMapping, value: Any) -> Any:
    """Convert an attribute value into the value stored in *column*."""
    if value is None or column.serialize is SerializeMethod.NONE:
        return value
    if column.serialize is SerializeMethod.ARRAY:
        return column.delimiter.join(str(item) for item in value)
    if column.serialize is SerializeMethod.JSON:
        return json.dumps(to_jsonable_python(value))
    return yaml.safe_dump(to_jsonable_python(value), allow_unicode=True)


def decode_value(column: ColumnMapping, raw: Any) -> Any:
    """Convert a stored value back into the attribute value."""
    if raw is None or column.serialize is SerializeMethod.NONE:
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if column.serialize is SerializeMethod.ARRAY:
        if raw == "":
            return []
        items = raw.split(column.delimiter)
        if column.item_type is not None and column.item_type is not str:
            return [column.item_type(item) for item in items]
        return items
    if column.serialize is SerializeMethod.JSON:
        return json.loads(raw)
    return yaml.safe_load(raw)


# ------------------------------------------------------------------
# Statements
# ------------------------------------------------------------------


async def _execute(client: DatabaseClient, table: str, sql: str, params: dict[str, Any]):
    logger.debug(f"Executing on {table}: {sql}")
    try:
        return await client.execute(sql, params)
    except Exception as e:
        raise WriteError(sql, table) from e


async def insert_row(
    client: DatabaseClient,
    table: str,
    obj: BaseModel,
    cache: MappingCache | None = None,
) -> int | None:
    """Insert *obj* into *table*.

    Every mapped column except the auto increment one is written.  When
    the model has an auto increment column, the generated id is stored
    back on *obj*.

    Returns:
        The last insert id, or ``None`` if the driver reported none.

    Raises:
        WriteError: If the INSERT fails.
    """
    mapping = (cache or default_cache).get(type(obj))

    columns: list[str] = []
    placeholders: list[str] = []
    params: dict[str, Any] = {}
    for i, column in enumerate(mapping.columns):
        if column.auto_increment:
            continue
        param_name = f"p_{i}"
        columns.append(quote_identifier(column.column_name))
        placeholders.append(f":{param_name}")
        params[param_name] = encode_value(column, getattr(obj, column.attribute))

    sql = (
        f"INSERT INTO {quote_identifier(table)} ({','.join(columns)}) "
        f"VALUES ({','.join(placeholders)})"
    )
    result = await _execute(client, table, sql, params)

    ai_column = mapping.auto_increment
    if ai_column is not None and result.last_insert_id is not None:
        setattr(obj, ai_column.attribute, result.last_insert_id)
    return result.last_insert_id


async def update_row(
    client: DatabaseClient,
    table: str,
    obj: BaseModel,
    columns: list[str] | None = None,
    cache: MappingCache | None = None,
) -> int:
    """Update *obj*'s row in *table*, matched by its primary key.

    Args:
        client: Database client.
        table: Table name.
        obj: Mapped model instance.
        columns: Column names to write.  Defaults to every column that is
            neither part of the primary key nor auto increment.
        cache: Mapping cache (default: process-wide cache).

    Returns:
        Number of affected rows.

    Raises:
        UnknownColumnError: If *columns* names an unmapped column.
        InvalidSchemaError: If the model has no primary key.
        WriteError: If the UPDATE fails.
    """
    model = type(obj)
    mapping = (cache or default_cache).get(model)

    keys = mapping.primary_key
    if not keys:
        raise InvalidSchemaError(f"{model.__name__} has no primary key column")

    if columns is None:
        targets = [c for c in mapping.columns if not c.primary_key and not c.auto_increment]
    else:
        targets = []
        for name in columns:
            column = mapping.by_column.get(name)
            if column is None:
                raise UnknownColumnError(name, model.__name__)
            targets.append(column)
    if not targets:
        raise InvalidSchemaError(f"Nothing to update for {model.__name__}")

    params: dict[str, Any] = {}
    set_parts: list[str] = []
    for i, column in enumerate(targets):
        param_name = f"set_{i}"
        set_parts.append(f"{quote_identifier(column.column_name)} = :{param_name}")
        params[param_name] = encode_value(column, getattr(obj, column.attribute))

    where_parts: list[str] = []
    for i, column in enumerate(keys):
        param_name = f"where_{i}"
        where_parts.append(f"{quote_identifier(column.column_name)} = :{param_name}")
        params[param_name] = getattr(obj, column.attribute)

    sql = (
        f"UPDATE {quote_identifier(table)} SET {', '.join(set_parts)} "
        f"WHERE {' AND '.join(where_parts)}"
    )
    result = await _execute(client, table, sql, params)
    return result.rowcount


def scan_row(row: dict[str, Any], model: type, cache: MappingCache | None = None) -> BaseModel:
    """Build a *model* instance from a result row.

    Attributes whose columns are absent from *row* keep their defaults.

    Raises:
        UnknownColumnError: If *row* has a column the model does not map.
    """
    mapping = (cache or default_cache).get(model)

    values: dict[str, Any] = {}
    for name, raw in row.items():
        column = mapping.by_column.get(name)
        if column is None:
            raise UnknownColumnError(name, model.__name__)
        values[column.attribute] = decode_value(column, raw)
    return model.model_validate(values)
