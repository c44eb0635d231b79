"""
LLM Request and Response Models

Pydantic models for LLM provider interactions, including tool calling.
Provider-agnostic models that work across OpenAI and Anthropic.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class LLMToolCall(BaseModel):
    """A tool invocation requested by the model."""

    id: str = Field(..., description="Provider-assigned call identifier")
    name: str = Field(..., description="Tool name")
    arguments: Dict[str, Any] = Field(
        default_factory=dict,
        description="Decoded tool arguments"
    )


class LLMToolSpec(BaseModel):
    """A tool offered to the model."""

    name: str = Field(..., description="Tool name")
    description: str = Field(..., description="Natural-language description used for tool selection")
    parameters: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON schema of the tool arguments"
    )


class LLMMessage(BaseModel):
    """Single message in an LLM conversation."""

    role: Literal["system", "user", "assistant", "tool"] = Field(
        ...,
        description="Message role"
    )
    content: str = Field(
        default="",
        description="Message content"
    )
    tool_calls: List[LLMToolCall] = Field(
        default_factory=list,
        description="Tool calls made by the assistant in this message"
    )
    tool_call_id: Optional[str] = Field(
        None,
        description="For tool messages, the call this message answers"
    )
    name: Optional[str] = Field(
        None,
        description="For tool messages, the tool that produced the content"
    )


class LLMRequest(BaseModel):
    """Request to an LLM provider."""

    messages: List[LLMMessage] = Field(
        ...,
        description="Conversation messages",
        min_length=1
    )
    tools: List[LLMToolSpec] = Field(
        default_factory=list,
        description="Tools the model may call"
    )
    temperature: Optional[float] = Field(
        None,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (overrides default)"
    )
    max_tokens: Optional[int] = Field(
        None,
        gt=0,
        description="Maximum tokens to generate (overrides default)"
    )
    model: Optional[str] = Field(
        None,
        description="Specific model to use (overrides default)"
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional provider-specific parameters"
    )


class LLMUsage(BaseModel):
    """Token usage information."""

    prompt_tokens: int = Field(
        ...,
        ge=0,
        description="Number of tokens in the prompt"
    )
    completion_tokens: int = Field(
        ...,
        ge=0,
        description="Number of tokens in the completion"
    )
    total_tokens: int = Field(
        ...,
        ge=0,
        description="Total tokens used"
    )


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    content: str = Field(
        ...,
        description="Generated text content"
    )
    tool_calls: List[LLMToolCall] = Field(
        default_factory=list,
        description="Tool calls requested instead of (or alongside) text"
    )
    model: str = Field(
        ...,
        description="Model that generated the response"
    )
    usage: LLMUsage = Field(
        ...,
        description="Token usage information"
    )
    finish_reason: Literal["stop", "length", "content_filter", "tool_calls", "error"] = Field(
        ...,
        description="Reason the generation stopped"
    )
    provider: str = Field(
        ...,
        description="Provider that handled the request (openai, anthropic)"
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional provider-specific response data"
    )

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)
