"""
Anthropic LLM Provider

Implementation of BaseLLMProvider for Anthropic's Claude models with tool use.
"""

import logging
from typing import Any

import anthropic
from anthropic import AsyncAnthropic

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


class AnthropicProvider(BaseLLMProvider):
    """
    Anthropic (Claude) LLM provider implementation.

    The Messages API keeps the system prompt outside the conversation and
    carries tool results as "tool_result" blocks inside user turns, so
    messages are regrouped before each call.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        temperature: float = 0.0,
        max_tokens: int = 2000,
        timeout: int = 60,
    ):
        super().__init__(
            provider_name="anthropic",
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )

        self.client = AsyncAnthropic(api_key=api_key, timeout=float(timeout))

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Generate completion using Anthropic API."""
        request = self._apply_defaults(request)
        self._log_request(request)

        system_message, messages = self._convert_messages(request.messages)
        params: dict[str, Any] = {
            "model": request.model or self.model,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": messages,
        }
        if system_message:
            params["system"] = system_message
        if request.tools:
            params["tools"] = [self._convert_tool(tool) for tool in request.tools]
        params.update(request.metadata)

        try:
            response = await self.client.messages.create(**params)
        except anthropic.APITimeoutError as e:
            logger.error(f"Anthropic API timeout: {e}")
            raise
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise

        text_parts = []
        tool_calls = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                arguments = block.input if isinstance(block.input, dict) else {"input": block.input}
                tool_calls.append(LLMToolCall(id=block.id, name=block.name, arguments=arguments))

        llm_response = LLMResponse(
            content="".join(text_parts),
            tool_calls=tool_calls,
            model=response.model,
            usage=LLMUsage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            ),
            finish_reason=self._map_finish_reason(response.stop_reason),
            provider="anthropic",
            metadata={"id": response.id},
        )

        self._log_response(llm_response)
        return llm_response

    @staticmethod
    def _convert_messages(
        messages: list[LLMMessage],
    ) -> tuple[str | None, list[dict[str, Any]]]:
        """Split out the system prompt and merge consecutive tool results."""
        system_parts = []
        converted: list[dict[str, Any]] = []

        for msg in messages:
            if msg.role == "system":
                system_parts.append(msg.content)
            elif msg.role == "tool":
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg.tool_call_id,
                    "content": msg.content,
                }
                previous = converted[-1] if converted else None
                if (
                    previous is not None
                    and previous["role"] == "user"
                    and isinstance(previous["content"], list)
                    and all(part.get("type") == "tool_result" for part in previous["content"])
                ):
                    previous["content"].append(block)
                else:
                    converted.append({"role": "user", "content": [block]})
            elif msg.role == "assistant" and msg.tool_calls:
                content: list[dict[str, Any]] = []
                if msg.content:
                    content.append({"type": "text", "text": msg.content})
                for call in msg.tool_calls:
                    content.append(
                        {
                            "type": "tool_use",
                            "id": call.id,
                            "name": call.name,
                            "input": call.arguments,
                        }
                    )
                converted.append({"role": "assistant", "content": content})
            else:
                converted.append({"role": msg.role, "content": msg.content})

        system_message = "\n\n".join(system_parts) if system_parts else None
        return system_message, converted

    @staticmethod
    def _convert_tool(tool: LLMToolSpec) -> dict[str, Any]:
        return {
            "name": tool.name,
            "description": tool.description,
            "input_schema": tool.parameters,
        }

    def _map_finish_reason(self, reason: str | None) -> str:
        """Map Anthropic stop reason to our standard format."""
        if reason == "max_tokens":
            return "length"
        elif reason == "tool_use":
            return "tool_calls"
        else:
            return "stop"
