"""Table reconciliation -- bring a live table in line with a declared one.

Introspects the table, decides between CREATE (table missing) and ALTER
(table present), renders the statements and executes them in order.

Planning and applying are separate steps so callers can review the
statements first:

Usage:
    from sqlschema.schema.sync import plan_sync, apply_sync, sync_table

    plan = await plan_sync(adapter, desired)
    print(plan.format_report())
    result = await apply_sync(adapter, plan, dry_run=False, confirm=True)

    # Or in one call
    result = await sync_table(adapter, desired)

Concurrent reconciliations of the same table are not coordinated; run at
most one per table at a time.
"""

import asyncio
import logging
from typing import Literal

from pydantic import BaseModel, Field

from sqlschema.adapters.base import DatabaseClient
from sqlschema.errors import WriteError
from sqlschema.schema.differ import diff_schemas
from sqlschema.schema.emitter import render_change, render_create_table
from sqlschema.schema.introspector import SchemaIntrospector
from sqlschema.schema.models import TableSchema

logger = logging.getLogger(__name__)

SyncAction = Literal["create", "alter", "none"]


class SyncPlan(BaseModel):
    """Statements needed to reconcile one table.

    Attributes:
        table: Table name.
        action: ``create`` (table missing), ``alter`` (changes found) or
            ``none`` (already in sync).
        changes: One description per change operation (empty for create).
        statements: SQL statements, in execution order.

    Example:
        >>> plan = SyncPlan(table="users", action="none")
        >>> plan.has_changes
        False
        >>> plan.format_report()
        'users: in sync'
    """

    table: str
    action: SyncAction
    changes: list[str] = Field(default_factory=list)
    statements: list[str] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.statements)

    def format_report(self) -> str:
        """Format the plan as a human-readable report."""
        if self.action == "none":
            return f"{self.table}: in sync"
        if self.action == "create":
            lines = [f"{self.table}: table missing, will be created"]
        else:
            lines = [f"{self.table}: {len(self.changes)} change(s)"]
            for change in self.changes:
                lines.append(f"  - {change}")
        lines.append("")
        for sql in self.statements:
            lines.append(f"  {sql};")
        return "\n".join(lines)


class SyncResult(BaseModel):
    """Result of applying a sync plan.

    Attributes:
        success: True if every statement ran (or the plan was empty / a
            dry run).
        table: Table name.
        action: Action from the plan.
        executed: Statements executed, in order.
        dry_run: True if nothing was executed on purpose.
        error: Error message if the run was refused.
    """

    success: bool = False
    table: str
    action: SyncAction
    executed: list[str] = Field(default_factory=list)
    dry_run: bool = False
    error: str | None = None

    @property
    def statement_count(self) -> int:
        return len(self.executed)


async def plan_sync(client: DatabaseClient, desired: TableSchema) -> SyncPlan:
    """Compute the statements that reconcile *desired* with the live table.

    Args:
        client: Database client to introspect with.
        desired: Declared table structure.

    Returns:
        ``SyncPlan``.  A missing table always yields exactly one CREATE
        TABLE statement and never an ALTER.

    Raises:
        ReadError: If introspection fails.
        InvalidSchemaError: If *desired* cannot be rendered.
    """
    actual = await SchemaIntrospector(client).read_table(desired.name)

    if actual is None:
        logger.info(f"Table {desired.name} does not exist, planning CREATE TABLE")
        return SyncPlan(
            table=desired.name,
            action="create",
            statements=[render_create_table(desired)],
        )

    changes = diff_schemas(desired, actual)
    if not changes:
        logger.info(f"Table {desired.name} is in sync")
        return SyncPlan(table=desired.name, action="none")

    logger.info(f"Table {desired.name} has {len(changes)} change(s)")
    return SyncPlan(
        table=desired.name,
        action="alter",
        changes=[change.describe() for change in changes],
        statements=[render_change(desired.name, change) for change in changes],
    )


async def apply_sync(
    client: DatabaseClient,
    plan: SyncPlan,
    dry_run: bool = True,
    confirm: bool = False,
) -> SyncResult:
    """Execute a sync plan, statement by statement, in order.

    There is no rollback: if a statement fails, the statements before it
    stay applied.  Planning again afterwards yields the remaining changes.

    Args:
        client: Database client to execute with.
        plan: Plan from ``plan_sync()``.
        dry_run: If True, only report what would be done.
        confirm: Must be True to actually execute (safety guard).

    Returns:
        ``SyncResult`` with the executed statements.

    Raises:
        WriteError: If a statement fails.  Chained to the driver error.

    Example:
        result = await apply_sync(adapter, plan, dry_run=False, confirm=True)
        print(f"{result.statement_count} statement(s) executed")
    """
    result = SyncResult(table=plan.table, action=plan.action, dry_run=dry_run)

    if not plan.has_changes:
        result.success = True
        return result

    if dry_run:
        result.success = True
        return result

    if not confirm:
        result.error = "Sync requires confirm=True"
        return result

    for position, sql in enumerate(plan.statements):
        logger.debug(f"Executing on {plan.table}: {sql}")
        try:
            await client.execute(sql)
        except Exception as e:
            logger.warning(f"Statement {position + 1} on {plan.table} failed: {e}")
            raise WriteError(sql, plan.table, position) from e
        result.executed.append(sql)

    result.success = True
    return result


async def sync_table(
    client: DatabaseClient,
    desired: TableSchema,
    timeout: float | None = None,
) -> SyncResult:
    """Plan and apply in one call.

    Args:
        client: Database client.
        desired: Declared table structure.
        timeout: Optional overall deadline in seconds.  On expiry the
            in-flight call is cancelled and ``TimeoutError`` is raised.

    Returns:
        ``SyncResult``.

    Raises:
        ReadError: If introspection fails.
        WriteError: If a statement fails.
        TimeoutError: If *timeout* expires.
    """
    async with asyncio.timeout(timeout):
        plan = await plan_sync(client, desired)
        return await apply_sync(client, plan, dry_run=False, confirm=True)
