"""Chat providers."""

from picobot.config.schema import Config
from picobot.providers.base import (
    ChatMessage,
    LLMProvider,
    ProviderError,
    ProviderResponse,
    ToolCall,
)
from picobot.providers.openai import OpenAIProvider
from picobot.providers.stub import StubProvider

__all__ = [
    "ChatMessage",
    "LLMProvider",
    "OpenAIProvider",
    "ProviderError",
    "ProviderResponse",
    "StubProvider",
    "ToolCall",
    "create_provider",
]


def create_provider(config: Config) -> LLMProvider:
    """Build the configured provider, falling back to the offline stub."""
    openai = config.providers.openai
    if openai is None or not openai.api_key or "REPLACE_ME" in openai.api_key:
        return StubProvider()

    defaults = config.agents.defaults
    return OpenAIProvider(
        api_key=openai.api_key,
        api_base=openai.api_base,
        model=defaults.model,
        timeout_s=defaults.request_timeout_s,
        max_tokens=defaults.max_tokens,
        temperature=defaults.temperature,
    )
