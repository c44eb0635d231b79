"""
Metadata Catalog Reader

Issues the three catalog queries (tables, columns, constraints) against
the target database and returns typed raw rows for the schema builder.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, NamedTuple

from pydantic import ValidationError

from generative_db.connectors.base import ConnectorError, SchemaError
from generative_db.schema.catalog_templates import render_catalog_queries
from generative_db.schema.models import ColumnRow, ConstraintRow, TableRow

if TYPE_CHECKING:
    from generative_db.connectors.base import BaseConnector

logger = logging.getLogger(__name__)


class CatalogRows(NamedTuple):
    """Raw row sets of one catalog read."""

    tables: list[TableRow]
    columns: list[ColumnRow]
    constraints: list[ConstraintRow]


class CatalogReader:
    """Read table, column and constraint metadata from the system catalog."""

    def __init__(self, connector: BaseConnector) -> None:
        self.connector = connector

    async def read(self, schema_name: str | None = None) -> CatalogRows:
        """
        Run the three catalog queries concurrently.

        Any failure aborts the whole read; callers never see a partial
        catalog.

        Raises:
            SchemaError: If a catalog query fails or returns malformed rows
        """
        queries, params = render_catalog_queries(schema_name)
        try:
            table_result, column_result, constraint_result = await asyncio.gather(
                self.connector.execute(queries.list_tables, params),
                self.connector.execute(queries.list_columns, params),
                self.connector.execute(queries.list_constraints, params),
            )
        except ConnectorError as exc:
            logger.error(f"Catalog query failed: {exc}")
            raise SchemaError(f"Failed to read database catalog: {exc}") from exc

        try:
            rows = CatalogRows(
                tables=[TableRow.model_validate(row) for row in table_result.rows],
                columns=[ColumnRow.model_validate(row) for row in column_result.rows],
                constraints=[ConstraintRow.model_validate(row) for row in constraint_result.rows],
            )
        except ValidationError as exc:
            raise SchemaError(f"Unexpected catalog row shape: {exc}") from exc

        logger.info(
            "Catalog read complete",
            extra={
                "schema": schema_name,
                "tables": len(rows.tables),
                "columns": len(rows.columns),
                "constraints": len(rows.constraints),
            },
        )
        return rows
