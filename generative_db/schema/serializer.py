"""
Schema Serializer

Renders tables into the compact, LLM-oriented "pseudo-DDL" used as prompt
context. Each table block contains, in order:

    /* table description */
    CREATE TABLE [schema].[name] (
    column type NOT NULL CONSTRAINT ... /* column description */,
    ...
    CONSTRAINT composite_name PRIMARY KEY (a, b)
    )
    SELECT TOP n [a], [b] FROM [schema].[name];
    a b c
    <sample row>
    <sample row>

The output is intentionally lossy and is not meant to be re-executed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from generative_db.connectors.base import ConnectorError
from generative_db.schema.models import Column, Constraint, ConstraintType, Table

if TYPE_CHECKING:
    from generative_db.connectors.base import BaseConnector

logger = logging.getLogger(__name__)

SAMPLE_EXCLUDED_TYPES = frozenset({"binary", "image"})


# ============================================================================
# Constraint grouping
# ============================================================================


def group_constraints(
    table: Table,
) -> tuple[dict[str, list[Constraint]], list[list[Constraint]]]:
    """
    Split a table's constraints into inline and composite groups.

    Rows sharing a constraint name form one group. A group of one row is
    inlined on its column; larger groups are composite and rendered once
    after the columns, members sorted by ordinal position. Groups keep the
    order in which their first row was delivered.

    Returns:
        (inline constraints keyed by column name, composite groups)
    """
    groups: dict[str, list[Constraint]] = {}
    for constraint in table.constraints:
        groups.setdefault(constraint.constraint_name, []).append(constraint)

    inline: dict[str, list[Constraint]] = {}
    composite: list[list[Constraint]] = []
    for members in groups.values():
        if len(members) == 1:
            inline.setdefault(members[0].column_name, []).append(members[0])
        else:
            composite.append(sorted(members, key=lambda member: member.ordinal_position))
    return inline, composite


def _parenthesize(clause: str | None) -> str:
    value = (clause or "").strip()
    if value.startswith("(") and value.endswith(")"):
        return value
    return f"({value})"


def render_inline_constraint(constraint: Constraint) -> str:
    prefix = f"CONSTRAINT {constraint.constraint_name}"
    kind = constraint.constraint_type
    if kind is ConstraintType.PRIMARY_KEY:
        return f"{prefix} PRIMARY KEY"
    if kind is ConstraintType.FOREIGN_KEY:
        return (
            f"{prefix} REFERENCES {constraint.referenced_schema}."
            f"{constraint.referenced_table}({constraint.referenced_column})"
        )
    if kind is ConstraintType.UNIQUE:
        return f"{prefix} UNIQUE"
    if kind is ConstraintType.CHECK:
        return f"{prefix} CHECK {_parenthesize(constraint.check_clause)}"
    return f"{prefix} DEFAULT {constraint.default_value}"


def render_composite_constraint(members: Sequence[Constraint]) -> str:
    first = members[0]
    prefix = f"CONSTRAINT {first.constraint_name}"
    column_list = ", ".join(member.column_name for member in members)
    kind = first.constraint_type
    if kind is ConstraintType.PRIMARY_KEY:
        return f"{prefix} PRIMARY KEY ({column_list})"
    if kind is ConstraintType.FOREIGN_KEY:
        referenced = ", ".join(member.referenced_column or "" for member in members)
        return (
            f"{prefix} FOREIGN KEY ({column_list}) REFERENCES "
            f"{first.referenced_schema}.{first.referenced_table}({referenced})"
        )
    if kind is ConstraintType.UNIQUE:
        return f"{prefix} UNIQUE ({column_list})"
    if kind is ConstraintType.CHECK:
        return f"{prefix} CHECK {_parenthesize(first.check_clause)} /* columns: {column_list} */"
    return f"{prefix} DEFAULT {first.default_value} /* columns: {column_list} */"


# ============================================================================
# Block sections
# ============================================================================


def render_description(table: Table, custom_descriptions: Mapping[str, str] | None = None) -> str:
    """Description comment line, preferring a configured override."""
    description = None
    if custom_descriptions and table.table_name in custom_descriptions:
        description = custom_descriptions[table.table_name]
    elif table.table_description:
        description = table.table_description
    if not description:
        return ""
    return f"/* {description} */\n"


def render_column(column: Column, inline: Sequence[Constraint] = ()) -> str:
    line = f"{column.column_name} {column.data_type}"
    if not column.is_nullable:
        line += " NOT NULL"
    for constraint in inline:
        line += f" {render_inline_constraint(constraint)}"
    if column.column_description:
        line += f" /* {column.column_description} */"
    return line


def render_create_table(table: Table) -> str:
    """CREATE TABLE approximation with inline and trailing composite constraints."""
    inline, composite = group_constraints(table)
    entries = [
        render_column(column, inline.get(column.column_name, ()))
        for column in table.columns
    ]
    entries.extend(render_composite_constraint(members) for members in composite)
    body = ",\n".join(entries)
    return f"CREATE TABLE {table.bracketed_name} (\n{body}\n)\n"


def sample_columns(table: Table) -> list[Column]:
    return [
        column
        for column in table.columns
        if column.data_type.strip().lower() not in SAMPLE_EXCLUDED_TYPES
    ]


def render_sample_query(table: Table, sample_rows: int) -> str | None:
    """TOP-n select over every non-binary column, or None if nothing is selectable."""
    columns = sample_columns(table)
    if not columns:
        return None
    select_list = ", ".join(f"[{column.column_name}]" for column in columns)
    return f"SELECT TOP {sample_rows} {select_list} FROM {table.bracketed_name};"


def render_column_recap(table: Table) -> str:
    return " ".join(table.column_names) + "\n"


def _format_value(value: Any) -> str:
    if value is None:
        return "NULL"
    return str(value)


def render_sample_rows(rows: Sequence[Mapping[str, Any]]) -> str:
    """One line per row, values joined by single spaces."""
    return "".join(
        " ".join(_format_value(value) for value in row.values()) + "\n" for row in rows
    )


# ============================================================================
# Serializer
# ============================================================================


class SchemaSerializer:
    """Render selected tables, fetching sample rows through a connector."""

    def __init__(self, connector: BaseConnector) -> None:
        self.connector = connector

    async def render(
        self,
        tables: Sequence[Table],
        sample_rows: int,
        custom_descriptions: Mapping[str, str] | None = None,
    ) -> str:
        """
        Render one block per table, in the order given.

        Sample rows are fetched one table at a time so the source database
        only ever sees a single sampling query.
        """
        blocks = []
        for table in tables:
            blocks.append(await self.render_table(table, sample_rows, custom_descriptions))
        return "".join(blocks)

    async def render_table(
        self,
        table: Table,
        sample_rows: int,
        custom_descriptions: Mapping[str, str] | None = None,
    ) -> str:
        block = render_description(table, custom_descriptions)
        block += render_create_table(table)

        sample_query = render_sample_query(table, sample_rows)
        sample = ""
        if sample_query:
            block += f"{sample_query}\n"
            if sample_rows > 0:
                sample = await self._fetch_sample(table, sample_query)

        block += render_column_recap(table)
        block += sample
        return block + "\n"

    async def _fetch_sample(self, table: Table, query: str) -> str:
        try:
            result = await self.connector.execute(query)
        except ConnectorError as exc:
            logger.warning(
                f"Sample rows unavailable for {table.qualified_name}: {exc}",
                extra={"table": table.qualified_name},
            )
            return ""
        except Exception as exc:
            # Sampling never aborts rendering of the remaining tables.
            logger.warning(
                f"Sample rows unavailable for {table.qualified_name}: {exc}",
                extra={"table": table.qualified_name, "error_type": type(exc).__name__},
                exc_info=True,
            )
            return ""
        return render_sample_rows(result.rows)
