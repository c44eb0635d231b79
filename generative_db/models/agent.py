"""
Agent I/O Models

Pydantic models for agent inputs, outputs and the step trace, plus the
agent exception hierarchy.
"""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from generative_db.tools.base import ToolErrorKind


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """Single message in conversation history."""

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True)


class AgentMetadata(BaseModel):
    """Metadata about agent execution."""

    agent_name: str
    started_at: datetime = Field(default_factory=_utcnow)
    completed_at: datetime | None = None
    duration_ms: float | None = None
    llm_calls: int = 0
    tool_calls: int = 0
    tokens_used: int | None = None
    error: str | None = None

    def mark_complete(self) -> None:
        self.completed_at = _utcnow()
        self.duration_ms = (self.completed_at - self.started_at).total_seconds() * 1000


class AgentInput(BaseModel):
    """Base input model for all agents."""

    query: str = Field(..., min_length=1, description="User's natural language request")
    conversation_history: list[Message] = Field(
        default_factory=list, description="Previous turns, oldest first"
    )
    context: dict[str, Any] = Field(
        default_factory=dict, description="Additional context passed by the caller"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": "Which five customers placed the most orders last year?",
                "conversation_history": [],
                "context": {},
            }
        }
    )


class AgentOutput(BaseModel):
    """Base output model for all agents."""

    success: bool = Field(..., description="Whether the agent executed successfully")
    metadata: AgentMetadata = Field(..., description="Execution metadata")


class AgentStep(BaseModel):
    """One tool invocation made by the agent loop."""

    iteration: int = Field(..., ge=1, description="LLM turn that requested the call")
    tool: str
    tool_input: str
    output: str = Field(..., description="Text returned to the model")
    success: bool
    error_kind: ToolErrorKind | None = None


class SQLAgentInput(AgentInput):
    """Input for the SQL agent."""

    max_iterations: int | None = Field(
        None, ge=1, description="Override the agent's iteration cap for this request"
    )


class SQLAgentOutput(AgentOutput):
    """Final answer of the SQL agent together with its trace."""

    answer: str = Field(..., description="Final answer text from the model")
    generated_sql: str | None = Field(
        None, description="SQL behind the answer, if any"
    )
    steps: list[AgentStep] = Field(default_factory=list)
    iterations: int = Field(0, ge=0, description="LLM turns used")


class AgentError(Exception):
    """
    Exception for agent execution errors.

    Attributes:
        agent: Name of the agent that raised the error
        message: Error description
        recoverable: Whether the agent may be retried
        context: Additional context for debugging
        steps: Tool invocations completed before the failure
    """

    def __init__(
        self,
        agent: str,
        message: str,
        recoverable: bool = True,
        context: dict[str, Any] | None = None,
        steps: list[AgentStep] | None = None,
    ):
        self.agent = agent
        self.message = message
        self.recoverable = recoverable
        self.context = context or {}
        self.steps = list(steps or [])
        super().__init__(f"[{agent}] {message}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent": self.agent,
            "message": self.message,
            "recoverable": self.recoverable,
            "context": self.context,
            "type": self.__class__.__name__,
        }


class LLMError(AgentError):
    """Error during an LLM API call (recoverable with retry)."""

    def __init__(
        self,
        agent: str,
        message: str,
        context: dict[str, Any] | None = None,
        steps: list[AgentStep] | None = None,
    ):
        super().__init__(agent, message, recoverable=True, context=context, steps=steps)


class AgentExhaustedError(AgentError):
    """The iteration cap was reached without a final answer. Never retried."""

    def __init__(self, agent: str, max_iterations: int, steps: list[AgentStep]):
        self.max_iterations = max_iterations
        super().__init__(
            agent,
            f"Agent stopped after {max_iterations} iterations without a final answer",
            recoverable=False,
            context={"max_iterations": max_iterations, "tool_calls": len(steps)},
            steps=steps,
        )
