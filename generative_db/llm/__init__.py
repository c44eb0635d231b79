"""
LLM Provider Module

Provider-agnostic chat completion with tool calling.

Usage:
    from generative_db.config import get_settings
    from generative_db.llm import LLMProviderFactory, LLMMessage, LLMRequest

    provider = LLMProviderFactory.create_default_provider(get_settings().llm)
    response = await provider.generate(
        LLMRequest(messages=[LLMMessage(role="user", content="Hello")])
    )
"""

from generative_db.llm.anthropic import AnthropicProvider
from generative_db.llm.base import BaseLLMProvider
from generative_db.llm.factory import LLMProviderFactory
from generative_db.llm.models import (
    LLMMessage,
    LLMRequest,
    LLMResponse,
    LLMToolCall,
    LLMToolSpec,
    LLMUsage,
)
from generative_db.llm.openai import OpenAIProvider

__all__ = [
    "BaseLLMProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "LLMProviderFactory",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "LLMToolCall",
    "LLMToolSpec",
    "LLMUsage",
]
