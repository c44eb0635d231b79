"""Schema model builder: normalize raw catalog rows into Table objects."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from generative_db.schema.models import (
    Column,
    ColumnRow,
    Constraint,
    ConstraintRow,
    Table,
    TableRow,
)

logger = logging.getLogger(__name__)


def build_tables(
    table_rows: Iterable[TableRow],
    column_rows: Iterable[ColumnRow],
    constraint_rows: Iterable[ConstraintRow],
) -> list[Table]:
    """
    Join the three catalog row sets by (schema, table) into Table objects.

    Row order is preserved exactly as delivered; the catalog queries already
    order columns by ordinal position. Rows that reference a table missing
    from the tables result get a synthesized placeholder table instead of
    failing the build.
    """
    tables: list[Table] = []
    index: dict[tuple[str, str], Table] = {}

    def owner(schema: str, name: str) -> Table:
        table = index.get((schema, name))
        if table is None:
            logger.warning(
                f"Catalog row references unknown table {schema}.{name}; synthesizing it",
                extra={"table_schema": schema, "table_name": name},
            )
            table = Table(table_name=name, table_schema=schema)
            index[table.key] = table
            tables.append(table)
        return table

    for row in table_rows:
        if (row.table_schema, row.table_name) in index:
            continue
        table = Table(
            table_name=row.table_name,
            table_schema=row.table_schema,
            table_description=row.table_description or None,
        )
        index[table.key] = table
        tables.append(table)

    for row in column_rows:
        owner(row.table_schema, row.table_name).columns.append(
            Column(
                column_name=row.column_name,
                data_type=row.data_type,
                is_nullable=row.is_nullable.strip().upper() == "YES",
                column_description=row.column_description or None,
            )
        )

    for row in constraint_rows:
        owner(row.table_schema, row.table_name).constraints.append(
            Constraint(
                constraint_name=row.constraint_name,
                constraint_type=row.constraint_type,
                column_name=row.column_name,
                ordinal_position=row.ordinal_position,
                referenced_schema=row.referenced_schema,
                referenced_table=row.referenced_table,
                referenced_column=row.referenced_column,
                check_clause=row.check_clause,
                default_value=row.default_value,
            )
        )

    return tables
