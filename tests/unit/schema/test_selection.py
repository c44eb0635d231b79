"""Unit tests for table selection."""

import pytest

from generative_db.schema.models import Table, TableNotFoundError
from generative_db.schema.selection import (
    INCLUDE_TABLES_PREFIX,
    TARGET_TABLES_PREFIX,
    select_tables,
    verify_tables_exist,
)


@pytest.fixture
def tables():
    return [
        Table(table_name="Orders", table_schema="dbo"),
        Table(table_name="Customers", table_schema="dbo"),
        Table(table_name="Invoices", table_schema="billing"),
    ]


def _names(selected):
    return [t.table_name for t in selected]


class TestSelectTables:
    def test_no_lists_returns_everything(self, tables):
        assert _names(select_tables(tables)) == ["Orders", "Customers", "Invoices"]

    def test_include_list_restricts(self, tables):
        selected = select_tables(tables[:2], include_tables=["Orders"], ignore_tables=[])
        assert _names(selected) == ["Orders"]

    def test_ignore_applied_after_include(self, tables):
        selected = select_tables(
            tables,
            include_tables=["Orders", "Customers"],
            ignore_tables=["Customers"],
        )
        assert _names(selected) == ["Orders"]

    def test_ignore_only(self, tables):
        assert _names(select_tables(tables, ignore_tables=["Invoices"])) == ["Orders", "Customers"]

    def test_targets_override_include_and_ignore(self, tables):
        selected = select_tables(
            tables,
            include_tables=["Orders"],
            ignore_tables=["Invoices"],
            target_tables=["Invoices"],
        )
        assert _names(selected) == ["Invoices"]

    def test_empty_targets_do_not_override(self, tables):
        assert _names(select_tables(tables, include_tables=["Orders"], target_tables=[])) == ["Orders"]

    def test_missing_target_fails_naming_table(self, tables):
        with pytest.raises(TableNotFoundError) as exc_info:
            select_tables(tables, target_tables=["Orders", "Missing"])

        assert exc_info.value.table_name == "Missing"
        assert str(exc_info.value) == (
            f"{TARGET_TABLES_PREFIX} the table Missing was not found in the database"
        )

    def test_targets_match_by_bare_name(self, tables):
        assert _names(select_tables(tables, target_tables=["Invoices"])) == ["Invoices"]


class TestVerifyTablesExist:
    def test_all_present(self, tables):
        verify_tables_exist(tables, ["Orders", "Invoices"], INCLUDE_TABLES_PREFIX)

    def test_empty_list_is_valid(self):
        verify_tables_exist([], [], INCLUDE_TABLES_PREFIX)

    def test_missing_uses_prefix(self, tables):
        with pytest.raises(TableNotFoundError, match="^Include tables not found in database: the table Ordrs"):
            verify_tables_exist(tables, ["Ordrs"], INCLUDE_TABLES_PREFIX)

    def test_is_lookup_error(self, tables):
        with pytest.raises(LookupError):
            verify_tables_exist(tables, ["Nope"], INCLUDE_TABLES_PREFIX)
