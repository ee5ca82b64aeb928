"""Tests for the MySQL adapter and the DatabaseClient protocol."""

import asyncio
import inspect
from unittest.mock import AsyncMock, MagicMock, patch

from sqlschema.adapters import AsyncMySQLAdapter, DatabaseClient, ExecuteResult
from sqlschema.adapters.mysql import normalize_url


def _mock_engine(conn: AsyncMock) -> MagicMock:
    """Engine whose connect()/begin() context managers yield *conn*."""
    engine = MagicMock()
    for method in (engine.connect, engine.begin):
        method.return_value.__aenter__ = AsyncMock(return_value=conn)
        method.return_value.__aexit__ = AsyncMock(return_value=False)
    engine.dispose = AsyncMock()
    return engine


class TestProtocol:
    """DatabaseClient is satisfied structurally."""

    def test_protocol_methods_are_async(self) -> None:
        for name in ("fetch_all", "fetch_one", "execute", "close"):
            assert inspect.iscoroutinefunction(getattr(DatabaseClient, name))
            assert inspect.iscoroutinefunction(getattr(AsyncMySQLAdapter, name))

    def test_execute_result_defaults(self) -> None:
        result = ExecuteResult()
        assert result.rowcount == 0
        assert result.last_insert_id is None


class TestNormalizeUrl:
    """URLs are rewritten to the aiomysql driver."""

    def test_aliases(self) -> None:
        assert normalize_url("mysql://u@h/db") == "mysql+aiomysql://u@h/db"
        assert normalize_url("mysql+pymysql://u@h/db") == "mysql+aiomysql://u@h/db"
        assert normalize_url("mariadb://u@h/db") == "mysql+aiomysql://u@h/db"

    def test_already_async(self) -> None:
        assert normalize_url("mysql+aiomysql://u@h/db") == "mysql+aiomysql://u@h/db"


class TestAdapterInit:
    """Engine creation."""

    def test_connect_timeout_appended(self) -> None:
        with patch("sqlschema.adapters.mysql.create_async_engine_pooled") as mock_create:
            mock_create.return_value = MagicMock()
            AsyncMySQLAdapter("mysql://root@localhost/app")
        assert mock_create.call_args.args[0] == (
            "mysql+aiomysql://root@localhost/app?connect_timeout=5"
        )

    def test_existing_query_string(self) -> None:
        with patch("sqlschema.adapters.mysql.create_async_engine_pooled") as mock_create:
            mock_create.return_value = MagicMock()
            AsyncMySQLAdapter("mysql://root@localhost/app?charset=utf8mb4", pool_size=2)
        assert mock_create.call_args.args[0].endswith("?charset=utf8mb4&connect_timeout=5")
        assert mock_create.call_args.kwargs == {"pool_size": 2}

    def test_pool_defaults(self) -> None:
        with patch("sqlschema.adapters.mysql.create_async_engine") as mock_create:
            mock_create.return_value = MagicMock()
            AsyncMySQLAdapter("mysql://root@localhost/app")
        kwargs = mock_create.call_args.kwargs
        assert kwargs["pool_pre_ping"] is True
        assert kwargs["pool_recycle"] == 300


class TestAdapterQueries:
    """fetch_* and execute against a mocked engine."""

    def _adapter(self, conn: AsyncMock) -> AsyncMySQLAdapter:
        with patch("sqlschema.adapters.mysql.create_async_engine_pooled") as mock_create:
            mock_create.return_value = _mock_engine(conn)
            return AsyncMySQLAdapter("mysql://root@localhost/app")

    def test_fetch_one(self) -> None:
        result = MagicMock()
        result.mappings.return_value.first.return_value = {"name": "app"}
        conn = AsyncMock()
        conn.execute = AsyncMock(return_value=result)

        row = asyncio.run(self._adapter(conn).fetch_one("SELECT DATABASE() AS name"))
        assert row == {"name": "app"}

    def test_fetch_all(self) -> None:
        result = MagicMock()
        result.mappings.return_value.all.return_value = [{"a": 1}, {"a": 2}]
        conn = AsyncMock()
        conn.execute = AsyncMock(return_value=result)

        rows = asyncio.run(self._adapter(conn).fetch_all("SELECT a FROM t", {"x": 1}))
        assert rows == [{"a": 1}, {"a": 2}]
        assert conn.execute.call_args.args[1] == {"x": 1}

    def test_execute_ddl_bypasses_parameters(self) -> None:
        conn = AsyncMock()
        conn.exec_driver_sql = AsyncMock(return_value=MagicMock(rowcount=0, lastrowid=0))
        sql = "ALTER TABLE `t` COMMENT = 'ratio 50%: ok'"

        result = asyncio.run(self._adapter(conn).execute(sql))

        assert result == ExecuteResult(rowcount=0, last_insert_id=None)
        assert conn.exec_driver_sql.call_args.args[0] == sql
        assert conn.exec_driver_sql.call_args.kwargs == {
            "execution_options": {"no_parameters": True}
        }
        conn.execute.assert_not_called()

    def test_execute_with_params(self) -> None:
        conn = AsyncMock()
        conn.execute = AsyncMock(return_value=MagicMock(rowcount=1, lastrowid=42))

        result = asyncio.run(
            self._adapter(conn).execute("INSERT INTO `t` (`a`) VALUES (:p_0)", {"p_0": 1})
        )
        assert result == ExecuteResult(rowcount=1, last_insert_id=42)

    def test_close_disposes_engine(self) -> None:
        adapter = self._adapter(AsyncMock())
        asyncio.run(adapter.close())
        adapter._engine.dispose.assert_awaited_once()
