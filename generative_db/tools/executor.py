"""Tool execution engine."""

from __future__ import annotations

import logging
from typing import Any

from generative_db.tools.base import ToolContext, ToolErrorKind, ToolResult
from generative_db.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolExecutor:
    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    async def execute(
        self,
        name: str,
        args: dict[str, Any],
        ctx: ToolContext | None = None,
    ) -> ToolResult:
        """
        Dispatch one call by tool name.

        Never raises for tool problems: an unknown name or a crashing tool
        comes back as a failed ToolResult so the agent loop keeps going.
        """
        tool = self.registry.get(name)
        if tool is None:
            logger.warning(f"Agent requested unknown tool: {name}")
            return ToolResult.failure(
                ToolErrorKind.UNKNOWN_TOOL,
                f"{name} is not a valid tool, try one of [{', '.join(self.registry.names())}].",
            )

        tool_input = self.resolve_input(args)
        if ctx:
            ctx.log_action("tool_invoked", {"tool": name, "input": tool_input[:200]})

        try:
            result = await tool.invoke(tool_input)
        except Exception as exc:
            logger.error(f"Tool execution failed: {name} - {exc}", exc_info=True)
            return ToolResult.failure(ToolErrorKind.INTERNAL, f"Tool {name} failed: {exc}")

        if ctx:
            ctx.log_action(
                "tool_completed",
                {"tool": name, "success": result.success, "error_kind": result.error_kind},
            )
        return result

    @staticmethod
    def resolve_input(args: dict[str, Any]) -> str:
        """Tools take one string; accept the usual argument spellings."""
        if not args:
            return ""
        for key in ("input", "tool_input", "query"):
            if key in args and args[key] is not None:
                return str(args[key])
        if len(args) == 1:
            value = next(iter(args.values()))
            return "" if value is None else str(value)
        return ""
