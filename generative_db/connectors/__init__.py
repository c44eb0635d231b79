"""
Database Connectors Module

Provides async database connectors.

Available Connectors:
    - BaseConnector: Abstract base class
    - MSSQLConnector: SQL Server connector (pymssql)

Usage:
    from generative_db.connectors import MSSQLConnector

    connector = MSSQLConnector(
        host="localhost",
        port=1433,
        database="AdventureWorks",
        user="sa",
        password="secret"
    )

    async with connector:
        result = await connector.execute("SELECT TOP 5 * FROM dbo.Customers")
        snapshot = await connector.get_schema()
"""

from generative_db.connectors.base import (
    BaseConnector,
    ConnectionError,
    ConnectorError,
    QueryError,
    QueryResult,
    SchemaError,
)
from generative_db.connectors.factory import create_connector, create_connector_from_url
from generative_db.connectors.mssql import MSSQLConnector

__all__ = [
    "BaseConnector",
    "MSSQLConnector",
    "create_connector",
    "create_connector_from_url",
    "QueryResult",
    "ConnectorError",
    "ConnectionError",
    "QueryError",
    "SchemaError",
]
