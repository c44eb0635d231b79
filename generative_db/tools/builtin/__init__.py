"""Built-in tools."""

from generative_db.tools.builtin.database import (
    INFO_SQL_TOOL,
    LIST_TABLES_TOOL,
    QUERY_CHECKER_TOOL,
    QUERY_SQL_TOOL,
    InfoSqlTool,
    ListTablesTool,
    QueryCheckerTool,
    QuerySqlTool,
    create_database_tools,
)

__all__ = [
    "INFO_SQL_TOOL",
    "LIST_TABLES_TOOL",
    "QUERY_CHECKER_TOOL",
    "QUERY_SQL_TOOL",
    "InfoSqlTool",
    "ListTablesTool",
    "QueryCheckerTool",
    "QuerySqlTool",
    "create_database_tools",
]
