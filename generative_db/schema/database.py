"""
SQL Database

Binds one connector to the schema snapshot captured from it, together with
the table selection and description overrides that shape the prompt.

Usage:
    database = await SQLDatabase.from_connector(
        connector,
        include_tables=["Orders", "Customers"],
        sample_rows=3,
    )
    print(await database.get_table_info(["Orders"]))
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from generative_db.connectors.base import BaseConnector
from generative_db.schema.models import SchemaSnapshot, Table
from generative_db.schema.selection import (
    IGNORE_TABLES_PREFIX,
    INCLUDE_TABLES_PREFIX,
    select_tables,
    verify_tables_exist,
)
from generative_db.schema.serializer import SchemaSerializer

logger = logging.getLogger(__name__)


class SQLDatabase:
    """A connector plus its immutable schema snapshot and selection rules."""

    def __init__(
        self,
        connector: BaseConnector,
        snapshot: SchemaSnapshot,
        include_tables: Sequence[str] = (),
        ignore_tables: Sequence[str] = (),
        custom_descriptions: Mapping[str, str] | None = None,
        sample_rows: int = 3,
    ) -> None:
        self.connector = connector
        self.snapshot = snapshot
        self.include_tables = list(include_tables)
        self.ignore_tables = list(ignore_tables)
        self.sample_rows = sample_rows

        known = set(snapshot.table_names())
        self.custom_descriptions = {
            name: description
            for name, description in (custom_descriptions or {}).items()
            if name in known
        }
        dropped = set(custom_descriptions or {}) - set(self.custom_descriptions)
        if dropped:
            logger.warning(
                f"Ignoring custom descriptions for unknown tables: {sorted(dropped)}"
            )

        verify_tables_exist(snapshot.tables, self.include_tables, INCLUDE_TABLES_PREFIX)
        verify_tables_exist(snapshot.tables, self.ignore_tables, IGNORE_TABLES_PREFIX)

        self._serializer = SchemaSerializer(connector)

    @classmethod
    async def from_connector(
        cls,
        connector: BaseConnector,
        *,
        schema_name: str | None = None,
        include_tables: Sequence[str] = (),
        ignore_tables: Sequence[str] = (),
        custom_descriptions: Mapping[str, str] | None = None,
        sample_rows: int = 3,
    ) -> SQLDatabase:
        """
        Connect if needed, capture the snapshot, and validate the selection.

        Raises:
            SchemaError: If the catalog cannot be read
            TableNotFoundError: If an include/ignore name does not exist
        """
        if not connector.is_connected:
            await connector.connect()
        snapshot = await connector.get_schema(schema_name=schema_name)
        logger.info(
            f"Captured schema snapshot with {len(snapshot)} tables",
            extra={"database": snapshot.database, "schema": schema_name},
        )
        return cls(
            connector,
            snapshot,
            include_tables=include_tables,
            ignore_tables=ignore_tables,
            custom_descriptions=custom_descriptions,
            sample_rows=sample_rows,
        )

    @property
    def dialect(self) -> str:
        return self.connector.dialect

    @property
    def all_tables(self) -> tuple[Table, ...]:
        return self.snapshot.tables

    def selected_tables(self, target_tables: Sequence[str] | None = None) -> list[Table]:
        return select_tables(
            self.snapshot.tables,
            include_tables=self.include_tables,
            ignore_tables=self.ignore_tables,
            target_tables=target_tables,
        )

    def table_description(self, table: Table) -> str | None:
        return self.custom_descriptions.get(table.table_name) or table.table_description

    async def get_table_info(self, target_tables: Sequence[str] | None = None) -> str:
        """Pseudo-DDL for the selected tables (or exactly target_tables)."""
        return await self._serializer.render(
            self.selected_tables(target_tables),
            self.sample_rows,
            self.custom_descriptions,
        )

    async def run(self, query: str) -> str:
        """
        Execute a statement and return its rows as JSON text.

        Raises:
            QueryError: If execution fails
        """
        result = await self.connector.execute(query)
        return json.dumps(result.rows, default=_json_default)

    def __repr__(self) -> str:
        return f"<SQLDatabase {self.connector!r} tables={len(self.snapshot)}>"


def _json_default(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    return str(value)
