"""
Generative DB Pipeline

Builds the long-lived pieces once (connector, schema snapshot, LLM provider,
toolkit, agent) and answers any number of requests with them.

Usage:
    pipeline = await GenerativeDBPipeline.create()
    try:
        result = await pipeline.run("Top 5 products by revenue")
        print(result.answer)
        print(result.generated_sql)
    finally:
        await pipeline.close()
"""

import logging
import time
from typing import Any

from pydantic import BaseModel, Field

from generative_db.agents.sql import SQLAgent
from generative_db.config import Settings, get_settings
from generative_db.connectors.base import BaseConnector
from generative_db.connectors.factory import create_connector
from generative_db.llm.base import BaseLLMProvider
from generative_db.llm.factory import LLMProviderFactory
from generative_db.models.agent import (
    AgentError,
    AgentExhaustedError,
    AgentStep,
    Message,
    SQLAgentInput,
)
from generative_db.prompts.loader import PromptLoader
from generative_db.schema.database import SQLDatabase
from generative_db.tools import create_sql_toolkit
from generative_db.tools.base import ToolResult
from generative_db.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class PipelineResult(BaseModel):
    """What the caller gets back for one request."""

    query: str
    success: bool
    answer: str | None = None
    generated_sql: str | None = None
    steps: list[AgentStep] = Field(default_factory=list)
    error: str | None = None
    duration_ms: float = 0.0
    llm_calls: int = 0


class GenerativeDBPipeline:
    """Natural-language to SQL pipeline bound to one database connection."""

    def __init__(
        self,
        database: SQLDatabase,
        llm: BaseLLMProvider,
        agent: SQLAgent,
    ) -> None:
        self.database = database
        self.llm = llm
        self.agent = agent

    @classmethod
    async def create(
        cls,
        settings: Settings | None = None,
        *,
        connector: BaseConnector | None = None,
        llm: BaseLLMProvider | None = None,
        prompts: PromptLoader | None = None,
    ) -> "GenerativeDBPipeline":
        """
        Construct the pipeline from settings.

        The LLM provider is created before any database call so a missing
        API key fails fast.

        Raises:
            ValueError: If the selected provider is not configured
            ConnectorError: If the database cannot be reached or introspected
            TableNotFoundError: If an include/ignore table name is wrong
        """
        settings = settings or get_settings()
        llm = llm or LLMProviderFactory.create_default_provider(settings.llm)
        connector = connector or create_connector(settings.database)
        prompts = prompts or PromptLoader()

        try:
            database = await SQLDatabase.from_connector(
                connector,
                schema_name=settings.database.schema_name,
                include_tables=settings.schema_selection.include_tables,
                ignore_tables=settings.schema_selection.ignore_tables,
                custom_descriptions=settings.schema_selection.custom_descriptions,
                sample_rows=settings.schema_selection.sample_rows,
            )
        except Exception:
            await connector.close()
            raise

        agent = SQLAgent(
            llm=llm,
            tools=create_sql_toolkit(database, llm, prompts=prompts),
            max_iterations=settings.agent.max_iterations,
            top_k=settings.agent.top_k,
            dialect=settings.agent.dialect,
            prompts=prompts,
        )
        logger.info(
            "Pipeline ready",
            extra={
                "tables": len(database.snapshot),
                "selected_tables": len(database.selected_tables()),
                "provider": llm.provider_name,
            },
        )
        return cls(database=database, llm=llm, agent=agent)

    @property
    def tools(self) -> ToolRegistry:
        return self.agent.tools

    async def run(
        self,
        query: str,
        conversation_history: list[Message] | None = None,
        **context: Any,
    ) -> PipelineResult:
        """
        Answer one request.

        Agent failures, exhaustion included, are reported in the result
        rather than raised.
        """
        start_time = time.perf_counter()
        agent_input = SQLAgentInput(
            query=query,
            conversation_history=conversation_history or [],
            context=context,
        )
        try:
            output = await self.agent(agent_input)
        except AgentExhaustedError as exc:
            logger.warning(f"Request not answered: {exc.message}")
            return PipelineResult(
                query=query,
                success=False,
                steps=exc.steps,
                error=exc.message,
                duration_ms=(time.perf_counter() - start_time) * 1000,
                llm_calls=exc.max_iterations,
            )
        except AgentError as exc:
            logger.error(f"Request failed: {exc}")
            return PipelineResult(
                query=query,
                success=False,
                steps=exc.steps,
                error=exc.message,
                duration_ms=(time.perf_counter() - start_time) * 1000,
            )

        return PipelineResult(
            query=query,
            success=True,
            answer=output.answer,
            generated_sql=output.generated_sql,
            steps=output.steps,
            duration_ms=(time.perf_counter() - start_time) * 1000,
            llm_calls=output.metadata.llm_calls,
        )

    async def run_tool(self, name: str, tool_input: str = "") -> ToolResult:
        """Invoke one tool directly, outside the agent loop."""
        return await self.agent.executor.execute(name, {"input": tool_input})

    async def schema_text(self) -> str:
        """Pseudo-DDL for every selected table."""
        return await self.database.get_table_info()

    async def close(self) -> None:
        await self.database.connector.close()

    async def __aenter__(self) -> "GenerativeDBPipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
