"""Tool system base types: definitions, typed results and the tool interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

INPUT_PARAMETERS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "input": {"type": "string", "description": "Tool input text"},
    },
    "required": ["input"],
    "additionalProperties": False,
}


class ToolCategory(StrEnum):
    DATABASE = "database"
    LLM = "llm"


class ToolErrorKind(StrEnum):
    QUERY_ERROR = "query_error"
    TABLE_NOT_FOUND = "table_not_found"
    INVALID_INPUT = "invalid_input"
    LLM_ERROR = "llm_error"
    UNKNOWN_TOOL = "unknown_tool"
    INTERNAL = "internal"


class ToolDefinition(BaseModel):
    name: str
    description: str
    category: ToolCategory
    parameters_schema: dict[str, Any] = Field(
        default_factory=lambda: dict(INPUT_PARAMETERS_SCHEMA)
    )


class ToolResult(BaseModel):
    """
    Outcome of one tool invocation.

    A failure is still a normal return value: the agent reads the message
    as the tool's output and may correct itself. Only the executor's
    INTERNAL kind marks a tool that crashed rather than reported an error.
    """

    success: bool
    output: str = ""
    error_kind: ToolErrorKind | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls, output: str) -> ToolResult:
        return cls(success=True, output=output)

    @classmethod
    def failure(cls, kind: ToolErrorKind, message: str) -> ToolResult:
        return cls(success=False, error_kind=kind, error_message=message)

    def to_observation(self) -> str:
        """Text handed back to the completion engine."""
        if self.success:
            return self.output
        return f"Error: {self.error_message}"


class ToolContext(BaseModel):
    correlation_id: str

    def log_action(self, action: str, metadata: dict[str, Any]) -> None:
        logger.info(
            "tool_action",
            extra={
                "correlation_id": self.correlation_id,
                "action": action,
                "metadata": metadata,
            },
        )


class BaseTool(ABC):
    """
    A named capability taking one string input and returning a ToolResult.

    Subclasses set name, description and category as class attributes and
    receive their collaborators through the constructor.
    """

    name: str
    description: str
    category: ToolCategory = ToolCategory.DATABASE

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            category=self.category,
        )

    @abstractmethod
    async def invoke(self, tool_input: str) -> ToolResult:
        """Run the tool. Expected failures are returned, not raised."""
        pass  # pragma: no cover - abstract method

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
