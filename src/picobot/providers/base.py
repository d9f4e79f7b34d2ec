"""Provider-agnostic chat interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class ProviderError(Exception):
    """Network, HTTP, or model failure while talking to a provider."""


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class ChatMessage:
    role: str  # 'system', 'user', 'assistant', 'tool'
    content: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_call_id: str | None = None


@dataclass
class ProviderResponse:
    content: str
    tool_calls: list[ToolCall] = field(default_factory=list)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


class LLMProvider(ABC):
    """Abstract base class for chat providers."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model used when the caller does not name one."""
        ...

    @abstractmethod
    async def chat(
        self,
        messages: list[ChatMessage],
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
    ) -> ProviderResponse:
        """
        Send a chat completion request.

        Safe to call repeatedly within one turn with a growing message list.

        Raises:
            ProviderError: on any backend failure
        """
        ...
