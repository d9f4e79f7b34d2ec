"""Offline provider used when no API key is configured."""

from typing import Any

from picobot.providers.base import ChatMessage, LLMProvider, ProviderResponse


class StubProvider(LLMProvider):
    """Echoes the last user message. Never requests tools."""

    @property
    def default_model(self) -> str:
        return "stub-model"

    async def chat(
        self,
        messages: list[ChatMessage],
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
    ) -> ProviderResponse:
        last_user = next(
            (m.content for m in reversed(messages) if m.role == "user"), ""
        )
        return ProviderResponse(content=f"(stub) {last_user}".strip())
