"""
SQLAgent

Answers a natural-language request by driving a bounded tool-calling loop
over the SQL tools:

1. Send the system prompt, the request and the tool specs to the LLM
2. If the response carries no tool calls, it is the final answer
3. Otherwise run each requested tool and feed its output back
4. Stop with AgentExhaustedError once max_iterations LLM turns are used

A failed LLM request is retried in place; the conversation, the step trace
and the turn count carry over, so the cap holds across retries.
"""

import logging
import re
from uuid import uuid4

from generative_db.agents.base import BaseAgent
from generative_db.llm.base import BaseLLMProvider
from generative_db.llm.models import LLMMessage, LLMRequest, LLMResponse, LLMToolSpec
from generative_db.models.agent import (
    AgentExhaustedError,
    AgentStep,
    LLMError,
    SQLAgentInput,
    SQLAgentOutput,
)
from generative_db.prompts.loader import PromptLoader
from generative_db.tools.base import ToolContext
from generative_db.tools.builtin.database import QUERY_SQL_TOOL, strip_sql_fence
from generative_db.tools.executor import ToolExecutor
from generative_db.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 15

_SQL_BLOCK_RE = re.compile(r"```sql[ \t]*\r?\n(.*?)```", re.IGNORECASE | re.DOTALL)


def extract_sql_block(text: str) -> str | None:
    """First fenced ```sql block of text, if any."""
    match = _SQL_BLOCK_RE.search(text)
    if not match:
        return None
    return match.group(1).strip() or None


class SQLAgent(BaseAgent):
    """
    Tool-calling SQL agent.

    All collaborators are passed in; the agent holds no process-wide state
    and can be reused across requests.

    Usage:
        agent = SQLAgent(llm=provider, tools=create_sql_toolkit(database, provider))
        output = await agent(SQLAgentInput(query="How many orders shipped in May?"))
        print(output.answer, output.generated_sql)
    """

    def __init__(
        self,
        llm: BaseLLMProvider,
        tools: ToolRegistry,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        top_k: int = 10,
        dialect: str = "mssql",
        prompts: PromptLoader | None = None,
        max_retries: int = 1,
    ):
        super().__init__(name="SQLAgent", max_retries=max_retries)
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.llm = llm
        self.tools = tools
        self.executor = ToolExecutor(tools)
        self.max_iterations = max_iterations
        self.top_k = top_k
        self.dialect = dialect
        self.prompts = prompts or PromptLoader()

    def system_prompt(self) -> str:
        return self.prompts.render(
            "agents/sql_agent.md",
            dialect=self.dialect,
            top_k=self.top_k,
        )

    def tool_specs(self) -> list[LLMToolSpec]:
        return [
            LLMToolSpec(
                name=definition.name,
                description=definition.description,
                parameters=definition.parameters_schema,
            )
            for definition in self.tools.list_definitions()
        ]

    async def _generate(
        self, request: LLMRequest, iteration: int, steps: list[AgentStep]
    ) -> LLMResponse:
        try:
            return await self.llm.generate(request)
        except Exception as exc:
            raise LLMError(
                self.name,
                f"LLM request failed: {exc}",
                context={"iteration": iteration},
                steps=steps,
            ) from exc

    async def execute(self, input: SQLAgentInput) -> SQLAgentOutput:
        max_iterations = input.max_iterations or self.max_iterations
        messages = [LLMMessage(role="system", content=self.system_prompt())]
        messages.extend(
            LLMMessage(role=message.role, content=message.content)
            for message in input.conversation_history
        )
        messages.append(LLMMessage(role="user", content=input.query))

        specs = self.tool_specs()
        ctx = ToolContext(correlation_id=input.context.get("correlation_id") or uuid4().hex)
        steps: list[AgentStep] = []
        last_sql: str | None = None

        for iteration in range(1, max_iterations + 1):
            request = LLMRequest(messages=list(messages), tools=specs)
            response = await self._with_retries(
                lambda: self._generate(request, iteration, steps)
            )
            self._track_llm_call(tokens=response.usage.total_tokens)

            if not response.tool_calls:
                answer = response.content.strip()
                logger.info(
                    f"{self.name} answered after {iteration} iterations",
                    extra={
                        "tool_calls": len(steps),
                        "correlation_id": ctx.correlation_id,
                        "prompt_version": self.prompts.get_metadata(
                            "agents/sql_agent.md"
                        ).get("version"),
                    },
                )
                return SQLAgentOutput(
                    success=True,
                    answer=answer,
                    generated_sql=last_sql or extract_sql_block(answer),
                    steps=steps,
                    iterations=iteration,
                    metadata=self._metadata,
                )

            messages.append(
                LLMMessage(
                    role="assistant",
                    content=response.content,
                    tool_calls=response.tool_calls,
                )
            )
            for call in response.tool_calls:
                tool_input = ToolExecutor.resolve_input(call.arguments)
                result = await self.executor.execute(call.name, call.arguments, ctx)
                self._track_tool_call()
                observation = result.to_observation()

                steps.append(
                    AgentStep(
                        iteration=iteration,
                        tool=call.name,
                        tool_input=tool_input,
                        output=observation,
                        success=result.success,
                        error_kind=result.error_kind,
                    )
                )
                if call.name == QUERY_SQL_TOOL and result.success:
                    last_sql = strip_sql_fence(tool_input)

                messages.append(
                    LLMMessage(
                        role="tool",
                        content=observation,
                        tool_call_id=call.id,
                        name=call.name,
                    )
                )

        logger.warning(
            f"{self.name} exhausted {max_iterations} iterations",
            extra={"tool_calls": len(steps), "correlation_id": ctx.correlation_id},
        )
        raise AgentExhaustedError(self.name, max_iterations, steps)
