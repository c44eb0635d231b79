"""Agent data models."""

from generative_db.models.agent import (
    AgentError,
    AgentExhaustedError,
    AgentInput,
    AgentMetadata,
    AgentOutput,
    AgentStep,
    LLMError,
    Message,
    SQLAgentInput,
    SQLAgentOutput,
)

__all__ = [
    "AgentError",
    "AgentExhaustedError",
    "AgentInput",
    "AgentMetadata",
    "AgentOutput",
    "AgentStep",
    "LLMError",
    "Message",
    "SQLAgentInput",
    "SQLAgentOutput",
]
