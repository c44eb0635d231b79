"""Built-in database tools."""

from __future__ import annotations

import logging
import re

from generative_db.connectors.base import ConnectorError
from generative_db.llm.base import BaseLLMProvider
from generative_db.llm.models import LLMMessage, LLMRequest
from generative_db.prompts.loader import PromptLoader
from generative_db.schema.database import SQLDatabase
from generative_db.schema.models import TableNotFoundError
from generative_db.tools.base import BaseTool, ToolCategory, ToolErrorKind, ToolResult

logger = logging.getLogger(__name__)

LIST_TABLES_TOOL = "list-tables-sql"
INFO_SQL_TOOL = "info-sql"
QUERY_SQL_TOOL = "query-sql"
QUERY_CHECKER_TOOL = "query-checker"

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*[ \t]*\r?\n|\r?\n?```\s*$")
_IDENTIFIER_STRIP = " \t\r\n\"'`[]"


def strip_sql_fence(text: str) -> str:
    """Remove a leading ``` / ```sql line and a trailing ``` line."""
    return _FENCE_RE.sub("", text).strip()


def parse_table_names(tool_input: str) -> list[str]:
    """'dbo.Orders, [sales].[Customers]' -> ['Orders', 'Customers']"""
    names = []
    for part in tool_input.split(","):
        name = part.strip().strip(_IDENTIFIER_STRIP).split(".")[-1].strip(_IDENTIFIER_STRIP)
        if name:
            names.append(name)
    return names


class ListTablesTool(BaseTool):
    name = LIST_TABLES_TOOL
    description = (
        "Input is an empty string, output is the list of tables in the database "
        "along with their schema, one per line (e.g. dbo.tablename -- description)."
    )

    def __init__(self, database: SQLDatabase) -> None:
        self.database = database

    async def invoke(self, tool_input: str) -> ToolResult:
        lines = []
        for table in self.database.selected_tables():
            description = self.database.table_description(table)
            if description:
                lines.append(f"{table.qualified_name} -- {description}")
            else:
                lines.append(table.qualified_name)
        return ToolResult.ok("\n".join(lines))


class InfoSqlTool(BaseTool):
    name = INFO_SQL_TOOL
    description = (
        "Input to this tool is a comma-separated list of qualified table names in the "
        "format schema.table, output is the schema and sample rows for those tables.\n"
        f"Be sure that the tables actually exist by calling {LIST_TABLES_TOOL} first!\n\n"
        'Example Input: "schema1.table1, schema1.table2, schema2.table3"'
    )

    def __init__(self, database: SQLDatabase) -> None:
        self.database = database

    async def invoke(self, tool_input: str) -> ToolResult:
        tables = parse_table_names(tool_input)
        if not tables:
            return ToolResult.failure(
                ToolErrorKind.INVALID_INPUT,
                "Expected a comma-separated list of table names.",
            )
        try:
            return ToolResult.ok(await self.database.get_table_info(tables))
        except TableNotFoundError as exc:
            return ToolResult.failure(ToolErrorKind.TABLE_NOT_FOUND, str(exc))


class QuerySqlTool(BaseTool):
    name = QUERY_SQL_TOOL
    description = (
        "Input to this tool is a detailed and correct SQL query, output is a result "
        "from the database.\n"
        "If the query is not correct, an error message will be returned.\n"
        "If an error is returned, rewrite the query, check the query, and try again."
    )

    def __init__(self, database: SQLDatabase) -> None:
        self.database = database

    async def invoke(self, tool_input: str) -> ToolResult:
        query = strip_sql_fence(tool_input)
        if not query:
            return ToolResult.failure(ToolErrorKind.INVALID_INPUT, "Expected a SQL query.")
        try:
            rows = await self.database.run(query)
        except ConnectorError as exc:
            logger.info(f"Agent query failed: {exc}")
            return ToolResult.failure(ToolErrorKind.QUERY_ERROR, str(exc))
        return ToolResult.ok(f"SQL QUERY:\n{query}\n\nRESULT:\n{rows}")


class QueryCheckerTool(BaseTool):
    name = QUERY_CHECKER_TOOL
    category = ToolCategory.LLM
    description = (
        "Use this tool to double check if your query is correct before executing it.\n"
        f"Always use this tool before executing a query with {QUERY_SQL_TOOL}!"
    )

    def __init__(
        self,
        llm: BaseLLMProvider,
        dialect: str = "mssql",
        prompts: PromptLoader | None = None,
    ) -> None:
        self.llm = llm
        self.dialect = dialect
        self.prompts = prompts or PromptLoader()

    async def invoke(self, tool_input: str) -> ToolResult:
        query = tool_input.strip()
        if not query:
            return ToolResult.failure(ToolErrorKind.INVALID_INPUT, "Expected a SQL query.")

        prompt = self.prompts.render(
            "tools/query_checker.md",
            query=query,
            dialect=self.dialect,
        )
        try:
            response = await self.llm.generate(
                LLMRequest(messages=[LLMMessage(role="user", content=prompt)])
            )
        except Exception as exc:
            logger.warning(f"Query checker LLM call failed: {exc}")
            return ToolResult.failure(ToolErrorKind.LLM_ERROR, f"Query check failed: {exc}")
        return ToolResult.ok(response.content.strip())


def create_database_tools(
    database: SQLDatabase,
    llm: BaseLLMProvider,
    prompts: PromptLoader | None = None,
) -> list[BaseTool]:
    """The four SQL agent tools, sharing one database and one LLM provider."""
    return [
        QuerySqlTool(database),
        InfoSqlTool(database),
        ListTablesTool(database),
        QueryCheckerTool(llm, dialect=database.dialect, prompts=prompts),
    ]
