"""Tests for the table schema models.

Covers the structural equality rules on columns and indexes, the primary
key naming rule, and the table-level validators and lookups.
"""

import pytest

from sqlschema.schema.models import (
    PRIMARY_INDEX_NAME,
    ColumnSchema,
    IndexKind,
    IndexSchema,
    TableSchema,
)


def _users() -> TableSchema:
    return TableSchema(
        name="users",
        columns=[
            ColumnSchema(name="id", data_type="bigint(20)", auto_increment=True),
            ColumnSchema(name="email", data_type="varchar(255)"),
        ],
        indexes=[
            IndexSchema(kind=IndexKind.PRIMARY, columns=["id"]),
            IndexSchema(name="uk_email", columns=["email"], kind=IndexKind.UNIQUE),
        ],
    )


class TestColumnEquality:
    """ColumnSchema equality compares every attribute, NULL default aside."""

    def test_identical_columns_equal(self) -> None:
        a = ColumnSchema(name="age", data_type="int(11)", default="0", comment="years")
        b = ColumnSchema(name="age", data_type="int(11)", default="0", comment="years")
        assert a == b

    def test_null_default_equals_no_default(self) -> None:
        """The literal NULL default and an absent default are the same."""
        assert ColumnSchema(name="a", data_type="int(11)", default="NULL") == ColumnSchema(
            name="a", data_type="int(11)"
        )

    def test_empty_default_equals_no_default(self) -> None:
        assert ColumnSchema(name="a", data_type="varchar(8)", default="") == ColumnSchema(
            name="a", data_type="varchar(8)"
        )

    @pytest.mark.parametrize(
        "changes",
        [
            {"name": "b"},
            {"data_type": "bigint(20)"},
            {"is_nullable": True},
            {"auto_increment": True},
            {"default": "1"},
            {"comment": "changed"},
        ],
    )
    def test_any_attribute_difference(self, changes: dict) -> None:
        base = ColumnSchema(name="a", data_type="int(11)")
        assert base != base.model_copy(update=changes)

    def test_type_comparison_is_exact_text(self) -> None:
        """int(11) and INT(11) are different column types."""
        assert ColumnSchema(name="a", data_type="int(11)") != ColumnSchema(
            name="a", data_type="INT(11)"
        )


class TestIndexEquality:
    """IndexSchema equality: kind, then name for non-primary, then ordered columns."""

    def test_column_order_matters(self) -> None:
        assert IndexSchema(name="idx", columns=["a", "b"]) != IndexSchema(
            name="idx", columns=["b", "a"]
        )

    def test_unique_flag_matters(self) -> None:
        assert IndexSchema(name="idx", columns=["a"]) != IndexSchema(
            name="idx", columns=["a"], kind=IndexKind.UNIQUE
        )

    def test_name_matters_for_plain_index(self) -> None:
        assert IndexSchema(name="idx_a", columns=["a"]) != IndexSchema(
            name="idx_b", columns=["a"]
        )

    def test_primary_keys_equal_on_columns(self) -> None:
        a = IndexSchema(kind=IndexKind.PRIMARY, columns=["id"])
        b = IndexSchema(name="whatever", kind=IndexKind.PRIMARY, columns=["id"])
        assert a == b

    def test_primary_never_equals_unique(self) -> None:
        assert IndexSchema(kind=IndexKind.PRIMARY, columns=["id"]) != IndexSchema(
            name="uk_id", columns=["id"], kind=IndexKind.UNIQUE
        )


class TestPrimaryIndexName:
    """The primary key is tagged by kind and always named PRIMARY."""

    def test_primary_is_named_primary(self) -> None:
        index = IndexSchema(kind=IndexKind.PRIMARY, columns=["id"])
        assert index.name == PRIMARY_INDEX_NAME
        assert index.primary is True
        assert index.unique is False

    def test_empty_name_is_not_primary(self) -> None:
        index = IndexSchema(columns=["id"])
        assert index.primary is False
        assert index.kind is IndexKind.KEY

    @pytest.mark.parametrize("name", ["PRIMARY", "primary"])
    def test_reserved_name_rejected_for_non_primary(self, name: str) -> None:
        with pytest.raises(ValueError, match="reserved"):
            IndexSchema(name=name, columns=["id"], kind=IndexKind.UNIQUE)


class TestTableValidation:
    """TableSchema rejects structurally impossible tables."""

    def test_duplicate_column_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate column"):
            TableSchema(
                name="t",
                columns=[
                    ColumnSchema(name="a", data_type="int(11)"),
                    ColumnSchema(name="a", data_type="int(11)"),
                ],
            )

    def test_two_auto_increment_columns_rejected(self) -> None:
        with pytest.raises(ValueError, match="more than one auto increment"):
            TableSchema(
                name="t",
                columns=[
                    ColumnSchema(name="a", data_type="int(11)", auto_increment=True),
                    ColumnSchema(name="b", data_type="int(11)", auto_increment=True),
                ],
            )

    def test_two_primary_keys_rejected(self) -> None:
        with pytest.raises(ValueError, match="more than one primary key"):
            TableSchema(
                name="t",
                indexes=[
                    IndexSchema(kind=IndexKind.PRIMARY, columns=["a"]),
                    IndexSchema(kind=IndexKind.PRIMARY, columns=["b"]),
                ],
            )

    def test_duplicate_index_name_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate index"):
            TableSchema(
                name="t",
                indexes=[
                    IndexSchema(name="idx", columns=["a"]),
                    IndexSchema(name="idx", columns=["b"], kind=IndexKind.UNIQUE),
                ],
            )

    def test_table_options_default_unset(self) -> None:
        table = TableSchema(name="t")
        assert table.engine is None
        assert table.collation is None
        assert table.comment == ""


class TestTableLookups:
    """find_column, find_index and match_index."""

    def test_find_column(self) -> None:
        table = _users()
        assert table.find_column("email").data_type == "varchar(255)"
        assert table.find_column("missing") is None

    @pytest.mark.parametrize("name", ["PRIMARY", "primary", "Primary"])
    def test_find_index_primary_any_case(self, name: str) -> None:
        assert _users().find_index(name).columns == ["id"]

    def test_find_index_by_name(self) -> None:
        assert _users().find_index("uk_email").unique is True
        assert _users().find_index("idx_missing") is None

    def test_primary_key_absent(self) -> None:
        assert TableSchema(name="t").primary_key is None
        assert TableSchema(name="t").find_index("PRIMARY") is None

    def test_match_index(self) -> None:
        table = _users()
        pk = IndexSchema(kind=IndexKind.PRIMARY, columns=["other"])
        assert table.match_index(pk) is table.primary_key
        assert table.match_index(IndexSchema(name="uk_email", columns=["x"])).name == "uk_email"
        assert table.match_index(IndexSchema(name="idx_new", columns=["x"])) is None

    def test_column_names_in_order(self) -> None:
        assert _users().column_names == ["id", "email"]
