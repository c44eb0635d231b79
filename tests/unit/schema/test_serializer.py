"""
Unit tests for the schema serializer.

Covers the pure rendering helpers and SchemaSerializer with a fake
connector supplying sample rows.
"""

import pytest

from generative_db.connectors.base import QueryError
from generative_db.schema.models import Column, Constraint, ConstraintType, Table
from generative_db.schema.serializer import (
    SchemaSerializer,
    group_constraints,
    render_column,
    render_create_table,
    render_description,
    render_sample_query,
    render_sample_rows,
)


def _constraint(name, kind, column, ordinal=1, **extra):
    return Constraint(
        constraint_name=name,
        constraint_type=kind,
        column_name=column,
        ordinal_position=ordinal,
        **extra,
    )


@pytest.fixture
def order_lines():
    return Table(
        table_name="OrderLines",
        table_schema="sales",
        columns=[
            Column(column_name="OrderId", data_type="int", is_nullable=False),
            Column(column_name="LineNo", data_type="int", is_nullable=False),
            Column(column_name="Qty", data_type="int", is_nullable=False),
            Column(column_name="Sku", data_type="nvarchar", column_description="Stock unit"),
        ],
        constraints=[
            _constraint("pk_lines", ConstraintType.PRIMARY_KEY, "LineNo", ordinal=2),
            _constraint("pk_lines", ConstraintType.PRIMARY_KEY, "OrderId", ordinal=1),
            _constraint("ck_qty", ConstraintType.CHECK, "Qty", check_clause="([Qty]>(0))"),
            _constraint("df_qty", ConstraintType.DEFAULT, "Qty", default_value="((1))"),
            _constraint("uq_sku", ConstraintType.UNIQUE, "Sku"),
        ],
    )


class TestConstraintGrouping:
    def test_single_row_groups_are_inline(self, order_lines):
        inline, composite = group_constraints(order_lines)

        assert [c.constraint_name for c in inline["Qty"]] == ["ck_qty", "df_qty"]
        assert [c.constraint_name for c in inline["Sku"]] == ["uq_sku"]
        assert "OrderId" not in inline
        assert "LineNo" not in inline

    def test_multi_row_groups_are_composite_in_ordinal_order(self, order_lines):
        _, composite = group_constraints(order_lines)

        assert len(composite) == 1
        assert [c.column_name for c in composite[0]] == ["OrderId", "LineNo"]


class TestRenderCreateTable:
    def test_one_line_per_column_in_order(self, order_lines):
        ddl = render_create_table(order_lines)
        lines = ddl.splitlines()

        assert lines[0] == "CREATE TABLE [sales].[OrderLines] ("
        assert lines[1] == "OrderId int NOT NULL,"
        assert lines[2] == "LineNo int NOT NULL,"
        assert lines[3] == (
            "Qty int NOT NULL CONSTRAINT ck_qty CHECK ([Qty]>(0)) CONSTRAINT df_qty DEFAULT ((1)),"
        )
        assert lines[4] == "Sku nvarchar CONSTRAINT uq_sku UNIQUE /* Stock unit */,"
        assert lines[5] == "CONSTRAINT pk_lines PRIMARY KEY (OrderId, LineNo)"
        assert lines[6] == ")"

    def test_composite_rendered_once_never_inline(self, order_lines):
        ddl = render_create_table(order_lines)
        assert ddl.count("pk_lines") == 1

    def test_inline_foreign_key(self):
        table = Table(
            table_name="Orders",
            table_schema="dbo",
            columns=[Column(column_name="CustomerId", data_type="int")],
            constraints=[
                _constraint(
                    "fk_customer",
                    ConstraintType.FOREIGN_KEY,
                    "CustomerId",
                    referenced_schema="dbo",
                    referenced_table="Customers",
                    referenced_column="Id",
                )
            ],
        )
        assert "CustomerId int CONSTRAINT fk_customer REFERENCES dbo.Customers(Id)" in render_create_table(table)

    def test_composite_foreign_key(self):
        table = Table(
            table_name="Shipments",
            table_schema="dbo",
            columns=[
                Column(column_name="OrderId", data_type="int"),
                Column(column_name="LineNo", data_type="int"),
            ],
            constraints=[
                _constraint(
                    "fk_line",
                    ConstraintType.FOREIGN_KEY,
                    column,
                    ordinal=ordinal,
                    referenced_schema="sales",
                    referenced_table="OrderLines",
                    referenced_column=column,
                )
                for column, ordinal in (("OrderId", 1), ("LineNo", 2))
            ],
        )
        assert (
            "CONSTRAINT fk_line FOREIGN KEY (OrderId, LineNo) REFERENCES sales.OrderLines(OrderId, LineNo)"
            in render_create_table(table)
        )

    def test_check_clause_without_parentheses_is_wrapped(self):
        column = Column(column_name="Qty", data_type="int")
        rendered = render_column(
            column, [_constraint("ck", ConstraintType.CHECK, "Qty", check_clause="Qty > 0")]
        )
        assert rendered == "Qty int CONSTRAINT ck CHECK (Qty > 0)"


class TestSectionHelpers:
    def test_custom_description_wins(self, orders_table):
        assert render_description(orders_table, {"Orders": "Override"}) == "/* Override */\n"

    def test_catalog_description_used(self, orders_table):
        assert render_description(orders_table) == "/* Customer orders */\n"

    def test_missing_description_omits_line(self, products_table):
        assert render_description(products_table) == ""
        assert "undefined" not in render_description(products_table, {})

    def test_sample_query_excludes_binary_and_image(self):
        table = Table(
            table_name="Files",
            table_schema="dbo",
            columns=[
                Column(column_name="Id", data_type="int"),
                Column(column_name="Blob", data_type="binary"),
                Column(column_name="Scan", data_type="IMAGE"),
                Column(column_name="Name", data_type="varbinary"),
            ],
        )
        assert render_sample_query(table, 3) == "SELECT TOP 3 [Id], [Name] FROM [dbo].[Files];"

    def test_sample_query_none_when_nothing_sampleable(self):
        table = Table(
            table_name="Blobs",
            table_schema="dbo",
            columns=[Column(column_name="Data", data_type="image")],
        )
        assert render_sample_query(table, 3) is None

    def test_sample_rows_render_null(self):
        assert render_sample_rows([{"a": 1, "b": None}, {"a": 2, "b": "x"}]) == "1 NULL\n2 x\n"


class TestSchemaSerializer:
    @pytest.mark.asyncio
    async def test_products_end_to_end(self, products_table, fake_connector_factory):
        connector = fake_connector_factory()
        connector.add_response("FROM [dbo].[Products]", [{"Id": 1, "Name": "Widget"}])

        text = await SchemaSerializer(connector).render([products_table], sample_rows=1)

        assert text == (
            "CREATE TABLE [dbo].[Products] (\n"
            "Id int NOT NULL CONSTRAINT pk_products PRIMARY KEY,\n"
            "Name nvarchar\n"
            ")\n"
            "SELECT TOP 1 [Id], [Name] FROM [dbo].[Products];\n"
            "Id Name\n"
            "1 Widget\n"
            "\n"
        )
        assert connector.executed == ["SELECT TOP 1 [Id], [Name] FROM [dbo].[Products];"]

    @pytest.mark.asyncio
    async def test_recap_includes_excluded_columns(self, orders_table, fake_connector):
        text = await SchemaSerializer(fake_connector).render([orders_table], sample_rows=3)

        assert "SELECT TOP 3 [OrderId], [ProductId] FROM [sales].[Orders];" in text
        assert "\nOrderId ProductId Receipt\n" in text
        assert text.startswith("/* Customer orders */\n")

    @pytest.mark.asyncio
    async def test_empty_selection_renders_empty_string(self, fake_connector):
        assert await SchemaSerializer(fake_connector).render([], sample_rows=3) == ""

    @pytest.mark.asyncio
    async def test_sampling_failure_degrades_block(
        self, products_table, orders_table, fake_connector_factory, caplog
    ):
        connector = fake_connector_factory()
        connector.add_response("FROM [dbo].[Products]", QueryError("permission denied"))
        connector.add_response("FROM [sales].[Orders]", [{"OrderId": 7, "ProductId": 1}])

        text = await SchemaSerializer(connector).render(
            [products_table, orders_table], sample_rows=3
        )

        assert "Id Name\n\n" in text
        assert "7 1\n" in text
        assert "Sample rows unavailable for dbo.Products" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_sampling_error_degrades_block(
        self, products_table, orders_table, fake_connector_factory, caplog
    ):
        connector = fake_connector_factory()
        connector.add_response("FROM [dbo].[Products]", OSError("connection reset"))
        connector.add_response("FROM [sales].[Orders]", [{"OrderId": 7, "ProductId": 1}])

        text = await SchemaSerializer(connector).render(
            [products_table, orders_table], sample_rows=3
        )

        assert "Id Name\n\n" in text
        assert "7 1\n" in text
        assert "CREATE TABLE [sales].[Orders] (" in text
        assert "Sample rows unavailable for dbo.Products: connection reset" in caplog.text

    @pytest.mark.asyncio
    async def test_zero_sample_rows_skips_execution(self, products_table, fake_connector):
        text = await SchemaSerializer(fake_connector).render([products_table], sample_rows=0)

        assert "SELECT TOP 0 [Id], [Name] FROM [dbo].[Products];" in text
        assert fake_connector.executed == []

    @pytest.mark.asyncio
    async def test_deterministic(self, snapshot, fake_connector):
        serializer = SchemaSerializer(fake_connector)
        first = await serializer.render(snapshot.tables, sample_rows=2)
        second = await serializer.render(snapshot.tables, sample_rows=2)
        assert first == second

    @pytest.mark.asyncio
    async def test_custom_descriptions_applied(self, products_table, fake_connector):
        text = await SchemaSerializer(fake_connector).render(
            [products_table], sample_rows=0, custom_descriptions={"Products": "Catalog items"}
        )
        assert text.startswith("/* Catalog items */\nCREATE TABLE [dbo].[Products] (")
