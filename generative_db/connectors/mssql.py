"""
SQL Server Connector

Async-compatible SQL Server connector using pymssql.

The underlying driver is synchronous, so query and schema operations are
executed in worker threads via asyncio.to_thread. Every call opens its own
connection, which lets the catalog queries run side by side.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

import pymssql

from generative_db.connectors.base import (
    BaseConnector,
    ConnectionError,
    QueryError,
    QueryResult,
    SchemaError,
)

if TYPE_CHECKING:
    from generative_db.schema.models import SchemaSnapshot

logger = logging.getLogger(__name__)


class MSSQLConnector(BaseConnector):
    """SQL Server database connector using pymssql."""

    dialect = "mssql"

    def __init__(
        self,
        host: str,
        port: int = 1433,
        database: str = "master",
        user: str = "sa",
        password: str = "",
        timeout: int = 30,
        login_timeout: int = 30,
        encrypt: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(
            host=host,
            port=port,
            database=database,
            user=user,
            password=password,
            timeout=timeout,
            **kwargs,
        )
        self.login_timeout = login_timeout
        self.encrypt = encrypt

    async def connect(self) -> None:
        """Validate connection credentials."""
        if self._connected:
            logger.debug("Already connected, skipping connection")
            return
        try:
            logger.info(f"Connecting to SQL Server at {self.host}:{self.port}/{self.database}")
            version = await asyncio.to_thread(self._test_connection_sync)
            logger.info(f"Connected to SQL Server: {version}")
            self._connected = True
        except pymssql.Error as exc:
            logger.error(f"SQL Server connection failed: {exc}")
            raise ConnectionError(f"Failed to connect to SQL Server: {exc}") from exc
        except Exception as exc:
            logger.error(f"SQL Server connection failed: {exc}")
            raise ConnectionError(f"Connection error: {exc}") from exc

    async def execute(
        self,
        query: str,
        params: list[Any] | None = None,
        timeout: int | None = None,
    ) -> QueryResult:
        """Execute SQL query and return rows."""
        if not self._connected:
            raise ConnectionError("Not connected to database. Call connect() first.")

        start_time = time.perf_counter()
        query_timeout = timeout or self.timeout
        try:
            rows, columns = await asyncio.to_thread(
                self._execute_sync,
                query,
                params,
                query_timeout,
            )
        except pymssql.Error as exc:
            logger.error(f"SQL Server query failed: {exc}\nQuery: {query[:200]}...")
            raise QueryError(f"Query execution failed: {exc}") from exc
        except Exception as exc:
            logger.error(f"SQL Server query failed: {exc}\nQuery: {query[:200]}...")
            raise QueryError(f"Query error: {exc}") from exc

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Query executed in {execution_time_ms:.2f}ms, returned {len(rows)} rows"
        )
        return QueryResult(
            rows=rows,
            row_count=len(rows),
            columns=columns,
            execution_time_ms=execution_time_ms,
        )

    async def get_schema(self, schema_name: str | None = None) -> SchemaSnapshot:
        """Introspect tables, columns and constraints from the catalog."""
        from generative_db.schema.builder import build_tables
        from generative_db.schema.catalog import CatalogReader
        from generative_db.schema.models import SchemaSnapshot

        if not self._connected:
            raise ConnectionError("Not connected to database. Call connect() first.")
        try:
            catalog = await CatalogReader(self).read(schema_name)
        except SchemaError:
            raise
        except Exception as exc:
            logger.error(f"SQL Server schema introspection failed: {exc}")
            raise SchemaError(f"Schema error: {exc}") from exc

        tables = build_tables(catalog.tables, catalog.columns, catalog.constraints)
        return SchemaSnapshot(tables=tuple(tables), database=self.database)

    async def close(self) -> None:
        """Close connector state."""
        self._connected = False

    def _connection_kwargs(self, query_timeout: int | None = None) -> dict[str, Any]:
        kwargs = {
            "server": self.host,
            "port": str(self.port),
            "database": self.database,
            "user": self.user,
            "password": self.password,
            "login_timeout": self.login_timeout,
            "timeout": query_timeout or self.timeout,
            "autocommit": True,
        }
        if self.encrypt:
            kwargs["encryption"] = "require"
        kwargs.update(self.kwargs)
        return kwargs

    def _test_connection_sync(self) -> str:
        conn = pymssql.connect(**self._connection_kwargs())
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT @@VERSION")
            row = cursor.fetchone()
            return str(row[0]).splitlines()[0] if row else "unknown version"
        finally:
            conn.close()

    def _execute_sync(
        self,
        query: str,
        params: list[Any] | None,
        query_timeout: int,
    ) -> tuple[list[dict[str, Any]], list[str]]:
        conn = pymssql.connect(**self._connection_kwargs(query_timeout))
        try:
            cursor = conn.cursor(as_dict=True)
            if params is None:
                cursor.execute(query)
            else:
                cursor.execute(query, tuple(params))
            if cursor.description is None:
                return [], []
            columns = [str(col[0]) for col in cursor.description]
            rows = list(cursor.fetchall())
            return rows, columns
        finally:
            conn.close()
