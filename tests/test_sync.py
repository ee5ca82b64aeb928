"""Tests for table reconciliation: plan_sync, apply_sync and sync_table.

The client is an AsyncMock answering the introspection queries; executed
statements are read back from ``client.execute.call_args_list``.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from sqlschema.adapters.base import ExecuteResult
from sqlschema.errors import ReadError, WriteError
from sqlschema.schema.models import ColumnSchema, IndexKind, IndexSchema, TableSchema
from sqlschema.schema.sync import SyncPlan, apply_sync, plan_sync, sync_table


# ------------------------------------------------------------------
# Helpers: sample data and mocks
# ------------------------------------------------------------------


def _people(with_name: bool = True) -> TableSchema:
    columns = [ColumnSchema(name="id", data_type="int(11)", auto_increment=True)]
    indexes = [IndexSchema(kind=IndexKind.PRIMARY, columns=["id"])]
    if with_name:
        columns.append(ColumnSchema(name="name", data_type="varchar(64)"))
        indexes.append(IndexSchema(name="idx_name", columns=["name"]))
    return TableSchema(name="people", columns=columns, indexes=indexes)


PEOPLE_COLUMNS = [
    {
        "name": "id",
        "data_type": "int(11)",
        "is_nullable": "NO",
        "default_value": None,
        "comment": "",
        "extra": "auto_increment",
    }
]
PEOPLE_INDEXES = [{"index_name": "PRIMARY", "seq": 1, "column_name": "id", "non_unique": 0}]


def _client_with_existing_people() -> AsyncMock:
    """Client whose ``people`` table holds only the ``id`` column."""
    client = AsyncMock()
    client.fetch_one = AsyncMock(
        side_effect=[
            {"name": "app"},
            {"engine": "InnoDB", "collation": "utf8mb4_general_ci", "comment": ""},
        ]
    )
    client.fetch_all = AsyncMock(side_effect=[PEOPLE_COLUMNS, PEOPLE_INDEXES])
    client.execute = AsyncMock(return_value=ExecuteResult())
    return client


def _client_without_table() -> AsyncMock:
    client = AsyncMock()
    client.fetch_one = AsyncMock(side_effect=[{"name": "app"}, None])
    client.fetch_all = AsyncMock()
    client.execute = AsyncMock(return_value=ExecuteResult())
    return client


def _executed(client: AsyncMock) -> list[str]:
    return [call.args[0] for call in client.execute.call_args_list]


# ------------------------------------------------------------------
# Tests
# ------------------------------------------------------------------


class TestPlanSync:
    """plan_sync() chooses CREATE, ALTER or nothing."""

    def test_missing_table_plans_create_only(self) -> None:
        plan = asyncio.run(plan_sync(_client_without_table(), _people()))

        assert plan.action == "create"
        assert plan.changes == []
        assert plan.statements == [
            "CREATE TABLE IF NOT EXISTS `people` ("
            "`id` int(11) NOT NULL AUTO_INCREMENT,"
            "`name` varchar(64) NOT NULL,"
            "PRIMARY KEY (`id`),"
            "KEY `idx_name` (`name`))"
        ]

    def test_existing_table_plans_alters(self) -> None:
        plan = asyncio.run(plan_sync(_client_with_existing_people(), _people()))

        assert plan.action == "alter"
        assert plan.changes == ["add column name varchar(64)", "add index idx_name (name)"]
        assert plan.statements == [
            "ALTER TABLE `people` ADD `name` varchar(64) NOT NULL",
            "ALTER TABLE `people` ADD KEY `idx_name` (`name`)",
        ]

    def test_in_sync_table_plans_nothing(self) -> None:
        plan = asyncio.run(plan_sync(_client_with_existing_people(), _people(with_name=False)))

        assert plan.action == "none"
        assert plan.has_changes is False
        assert plan.format_report() == "people: in sync"

    def test_on_update_default_in_sync(self) -> None:
        """A declared ON UPDATE default matches what MySQL reports back."""
        desired = _people(with_name=False)
        desired.columns.append(
            ColumnSchema(
                name="updated_at",
                data_type="timestamp",
                default="CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP",
            )
        )
        updated_at = {
            "name": "updated_at",
            "data_type": "timestamp",
            "is_nullable": "NO",
            "default_value": "CURRENT_TIMESTAMP",
            "comment": "",
            "extra": "DEFAULT_GENERATED on update CURRENT_TIMESTAMP",
        }
        client = _client_with_existing_people()
        client.fetch_all = AsyncMock(side_effect=[PEOPLE_COLUMNS + [updated_at], PEOPLE_INDEXES])

        plan = asyncio.run(plan_sync(client, desired))
        assert plan.action == "none"

    def test_read_error_propagates(self) -> None:
        client = AsyncMock()
        client.fetch_one = AsyncMock(side_effect=RuntimeError("gone"))

        with pytest.raises(ReadError):
            asyncio.run(plan_sync(client, _people()))


class TestSyncPlanReport:
    """SyncPlan.format_report() text."""

    def test_create_report(self) -> None:
        plan = SyncPlan(table="t", action="create", statements=["CREATE TABLE x"])
        assert plan.format_report() == "t: table missing, will be created\n\n  CREATE TABLE x;"

    def test_alter_report(self) -> None:
        plan = SyncPlan(
            table="t",
            action="alter",
            changes=["drop column a"],
            statements=["ALTER TABLE `t` DROP `a`"],
        )
        assert plan.format_report() == (
            "t: 1 change(s)\n  - drop column a\n\n  ALTER TABLE `t` DROP `a`;"
        )


class TestApplySync:
    """apply_sync() safety guards and statement execution."""

    def _plan(self) -> SyncPlan:
        return SyncPlan(
            table="people",
            action="alter",
            changes=["add column name varchar(64)", "add index idx_name (name)"],
            statements=[
                "ALTER TABLE `people` ADD `name` varchar(64) NOT NULL",
                "ALTER TABLE `people` ADD KEY `idx_name` (`name`)",
            ],
        )

    def test_dry_run_executes_nothing(self) -> None:
        client = AsyncMock()
        result = asyncio.run(apply_sync(client, self._plan()))

        assert result.success is True
        assert result.dry_run is True
        assert result.executed == []
        client.execute.assert_not_called()

    def test_confirm_required(self) -> None:
        client = AsyncMock()
        result = asyncio.run(apply_sync(client, self._plan(), dry_run=False))

        assert result.success is False
        assert "confirm=True" in result.error
        client.execute.assert_not_called()

    def test_empty_plan_succeeds(self) -> None:
        client = AsyncMock()
        plan = SyncPlan(table="people", action="none")
        result = asyncio.run(apply_sync(client, plan, dry_run=False, confirm=True))

        assert result.success is True
        client.execute.assert_not_called()

    def test_executes_in_order_without_params(self) -> None:
        client = AsyncMock()
        client.execute = AsyncMock(return_value=ExecuteResult())
        result = asyncio.run(apply_sync(client, self._plan(), dry_run=False, confirm=True))

        assert result.success is True
        assert result.statement_count == 2
        assert _executed(client) == self._plan().statements
        for call in client.execute.call_args_list:
            assert len(call.args) == 1
            assert call.kwargs == {}

    def test_failure_stops_and_reports_position(self) -> None:
        client = AsyncMock()
        cause = RuntimeError("Duplicate key name 'idx_name'")
        client.execute = AsyncMock(side_effect=[ExecuteResult(), cause])

        with pytest.raises(WriteError) as exc_info:
            asyncio.run(apply_sync(client, self._plan(), dry_run=False, confirm=True))

        error = exc_info.value
        assert error.position == 1
        assert error.table == "people"
        assert error.statement == "ALTER TABLE `people` ADD KEY `idx_name` (`name`)"
        assert error.__cause__ is cause
        assert "(statement 2)" in str(error)

    def test_adapter_without_ddl_support_raises_write_error(self) -> None:
        client = AsyncMock()
        cause = NotImplementedError("execute")
        client.execute = AsyncMock(side_effect=cause)

        with pytest.raises(WriteError) as exc_info:
            asyncio.run(apply_sync(client, self._plan(), dry_run=False, confirm=True))

        assert exc_info.value.position == 0
        assert exc_info.value.__cause__ is cause


class TestSyncTable:
    """sync_table() plans and applies in one call."""

    def test_adds_column_then_index(self) -> None:
        client = _client_with_existing_people()
        result = asyncio.run(sync_table(client, _people()))

        assert result.success is True
        assert result.action == "alter"
        assert _executed(client) == [
            "ALTER TABLE `people` ADD `name` varchar(64) NOT NULL",
            "ALTER TABLE `people` ADD KEY `idx_name` (`name`)",
        ]

    def test_adds_nullable_column_then_unique_index(self) -> None:
        desired = TableSchema(
            name="people",
            columns=[
                ColumnSchema(name="id", data_type="int(11)", auto_increment=True),
                ColumnSchema(name="name", data_type="varchar(64)", is_nullable=True),
            ],
            indexes=[
                IndexSchema(kind=IndexKind.PRIMARY, columns=["id"]),
                IndexSchema(name="idx_name", columns=["name"], kind=IndexKind.UNIQUE),
            ],
        )
        client = _client_with_existing_people()
        result = asyncio.run(sync_table(client, desired))

        assert result.success is True
        assert _executed(client) == [
            "ALTER TABLE `people` ADD `name` varchar(64) NULL",
            "ALTER TABLE `people` ADD UNIQUE KEY `idx_name` (`name`)",
        ]

    def test_creates_missing_table(self) -> None:
        client = _client_without_table()
        result = asyncio.run(sync_table(client, _people()))

        assert result.action == "create"
        assert len(_executed(client)) == 1
        assert _executed(client)[0].startswith("CREATE TABLE IF NOT EXISTS `people`")

    def test_timeout(self) -> None:
        async def _slow(*args, **kwargs):
            await asyncio.sleep(10)

        client = AsyncMock()
        client.fetch_one = AsyncMock(side_effect=_slow)

        with pytest.raises(TimeoutError):
            asyncio.run(sync_table(client, _people(), timeout=0.01))
        client.execute.assert_not_called()
