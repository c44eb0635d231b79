"""
LLM Provider Factory

Creates the configured LLM provider instance from LLM_* settings.
"""

import logging
from typing import Literal

from generative_db.config import LLMSettings
from generative_db.llm.anthropic import AnthropicProvider
from generative_db.llm.base import BaseLLMProvider
from generative_db.llm.openai import OpenAIProvider

logger = logging.getLogger(__name__)


class LLMProviderFactory:
    """Factory for creating LLM provider instances."""

    PROVIDERS = {
        "openai": OpenAIProvider,
        "anthropic": AnthropicProvider,
    }

    @staticmethod
    def create_provider(
        provider_type: Literal["openai", "anthropic"],
        config: LLMSettings,
    ) -> BaseLLMProvider:
        """
        Create an LLM provider instance.

        Args:
            provider_type: Type of provider to create
            config: LLM configuration settings

        Returns:
            Configured provider instance

        Raises:
            ValueError: If provider type is unknown or its API key is missing
        """
        if provider_type not in LLMProviderFactory.PROVIDERS:
            raise ValueError(
                f"Unknown provider type: {provider_type}. "
                f"Available providers: {list(LLMProviderFactory.PROVIDERS.keys())}"
            )

        logger.info(
            f"Creating {provider_type} provider",
            extra={"provider": provider_type},
        )

        if provider_type == "openai":
            return LLMProviderFactory._create_openai(config)
        return LLMProviderFactory._create_anthropic(config)

    @staticmethod
    def create_default_provider(config: LLMSettings) -> BaseLLMProvider:
        """Create provider using the configured LLM_PROVIDER."""
        return LLMProviderFactory.create_provider(config.provider, config)

    @staticmethod
    def _create_openai(config: LLMSettings) -> OpenAIProvider:
        if not config.openai_api_key:
            raise ValueError("OpenAI API key is required but not configured")

        return OpenAIProvider(
            api_key=config.openai_api_key,
            model=config.openai_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
        )

    @staticmethod
    def _create_anthropic(config: LLMSettings) -> AnthropicProvider:
        if not config.anthropic_api_key:
            raise ValueError("Anthropic API key is required but not configured")

        return AnthropicProvider(
            api_key=config.anthropic_api_key,
            model=config.anthropic_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
        )
