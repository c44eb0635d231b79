"""Tool system entrypoint."""

from __future__ import annotations

from generative_db.llm.base import BaseLLMProvider
from generative_db.prompts.loader import PromptLoader
from generative_db.schema.database import SQLDatabase
from generative_db.tools.base import (
    BaseTool,
    ToolCategory,
    ToolContext,
    ToolDefinition,
    ToolErrorKind,
    ToolResult,
)
from generative_db.tools.builtin.database import create_database_tools
from generative_db.tools.executor import ToolExecutor
from generative_db.tools.registry import ToolRegistry


def create_sql_toolkit(
    database: SQLDatabase,
    llm: BaseLLMProvider,
    prompts: PromptLoader | None = None,
) -> ToolRegistry:
    """Registry holding the four SQL tools bound to one database."""
    return ToolRegistry(create_database_tools(database, llm, prompts=prompts))


__all__ = [
    "BaseTool",
    "ToolCategory",
    "ToolContext",
    "ToolDefinition",
    "ToolErrorKind",
    "ToolExecutor",
    "ToolRegistry",
    "ToolResult",
    "create_sql_toolkit",
]
