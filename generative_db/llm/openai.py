"""
OpenAI LLM Provider

Implementation of BaseLLMProvider for OpenAI's GPT models with function
calling. Supports GPT-4o, GPT-4o-mini, GPT-4.1, etc.
"""

import json
import logging
from typing import Any

import openai
from openai import AsyncOpenAI

from generative_db.llm.base import BaseLLMProvider
from generative_db.llm.models import (
    LLMMessage,
    LLMRequest,
    LLMResponse,
    LLMToolCall,
    LLMToolSpec,
    LLMUsage,
)

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseLLMProvider):
    """
    OpenAI LLM provider implementation.

    Uses the official openai Python SDK with async support. Tools are
    offered as chat-completions functions and tool results are sent back
    as "tool" role messages.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        temperature: float = 0.0,
        max_tokens: int = 2000,
        timeout: int = 60,
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Default model to use
            temperature: Default temperature
            max_tokens: Default max tokens
            timeout: Request timeout
        """
        super().__init__(
            provider_name="openai",
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )

        self.client = AsyncOpenAI(
            api_key=api_key,
            timeout=float(timeout),
        )

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate completion using OpenAI API.

        Raises:
            openai.APIError: On API errors
            openai.APITimeoutError: On timeout
        """
        request = self._apply_defaults(request)
        self._log_request(request)

        params: dict[str, Any] = {
            "model": request.model or self.model,
            "messages": [self._convert_message(msg) for msg in request.messages],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        if request.tools:
            params["tools"] = [self._convert_tool(tool) for tool in request.tools]
        params.update(request.metadata)

        try:
            response = await self.client.chat.completions.create(**params)
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI API timeout: {e}")
            raise
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise

        choice = response.choices[0]
        tool_calls = [
            LLMToolCall(
                id=call.id,
                name=call.function.name,
                arguments=self._parse_arguments(call.function.arguments),
            )
            for call in (choice.message.tool_calls or [])
        ]

        llm_response = LLMResponse(
            content=choice.message.content or "",
            tool_calls=tool_calls,
            model=response.model,
            usage=LLMUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            ),
            finish_reason=self._map_finish_reason(choice.finish_reason),
            provider="openai",
            metadata={
                "id": response.id,
                "created": response.created,
                "system_fingerprint": response.system_fingerprint,
            },
        )

        self._log_response(llm_response)
        return llm_response

    @staticmethod
    def _convert_message(message: LLMMessage) -> dict[str, Any]:
        if message.role == "tool":
            return {
                "role": "tool",
                "tool_call_id": message.tool_call_id,
                "content": message.content,
            }
        if message.role == "assistant" and message.tool_calls:
            return {
                "role": "assistant",
                "content": message.content or None,
                "tool_calls": [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {
                            "name": call.name,
                            "arguments": json.dumps(call.arguments),
                        },
                    }
                    for call in message.tool_calls
                ],
            }
        return {"role": message.role, "content": message.content}

    @staticmethod
    def _convert_tool(tool: LLMToolSpec) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters,
            },
        }

    @staticmethod
    def _parse_arguments(raw: str | None) -> dict[str, Any]:
        """Decode function arguments; a non-JSON payload becomes the tool input."""
        if not raw:
            return {}
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"OpenAI returned non-JSON tool arguments: {raw[:200]}")
            return {"input": raw}
        if isinstance(decoded, dict):
            return decoded
        return {"input": decoded}

    def _map_finish_reason(self, reason: str | None) -> str:
        """Map OpenAI finish reason to our standard format."""
        if reason == "length":
            return "length"
        elif reason == "content_filter":
            return "content_filter"
        elif reason in ("tool_calls", "function_call"):
            return "tool_calls"
        else:
            return "stop"
