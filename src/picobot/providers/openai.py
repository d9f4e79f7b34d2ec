"""OpenAI-compatible provider (OpenAI, OpenRouter, Groq, etc.)."""

import json
import logging
from typing import Any

import httpx

from picobot.providers.base import (
    ChatMessage,
    LLMProvider,
    ProviderError,
    ProviderResponse,
    ToolCall,
)

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "openai/gpt-4o-mini"


class OpenAIProvider(LLMProvider):
    """
    Chat completions over any OpenAI-compatible endpoint.

    - OpenAI:     https://api.openai.com/v1
    - OpenRouter: https://openrouter.ai/api/v1
    - Groq:       https://api.groq.com/openai/v1
    """

    def __init__(
        self,
        api_key: str,
        api_base: str = DEFAULT_API_BASE,
        model: str = DEFAULT_MODEL,
        timeout_s: float = 60.0,
        max_tokens: int = 8192,
        temperature: float = 0.7,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.api_base = (api_base or DEFAULT_API_BASE).rstrip("/")
        self._model = model or DEFAULT_MODEL
        self.timeout_s = timeout_s
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._transport = transport

    @property
    def default_model(self) -> str:
        return self._model

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _format_messages(messages: list[ChatMessage]) -> list[dict[str, Any]]:
        """Convert ChatMessages to the OpenAI wire format."""
        formatted = []
        for msg in messages:
            if msg.role == "tool":
                formatted.append(
                    {
                        "role": "tool",
                        "content": msg.content,
                        "tool_call_id": msg.tool_call_id or "",
                    }
                )
            elif msg.role == "assistant" and msg.tool_calls:
                formatted.append(
                    {
                        "role": "assistant",
                        "content": msg.content or None,
                        "tool_calls": [
                            {
                                "id": tc.id,
                                "type": "function",
                                "function": {
                                    "name": tc.name,
                                    "arguments": json.dumps(tc.arguments),
                                },
                            }
                            for tc in msg.tool_calls
                        ],
                    }
                )
            else:
                formatted.append({"role": msg.role, "content": msg.content})
        return formatted

    @staticmethod
    def _parse_tool_calls(raw_calls: list[dict[str, Any]]) -> list[ToolCall]:
        calls = []
        for i, tc in enumerate(raw_calls):
            fn = tc.get("function") or {}
            raw_args = fn.get("arguments") or "{}"
            if isinstance(raw_args, dict):
                args = raw_args
            else:
                try:
                    args = json.loads(raw_args)
                except json.JSONDecodeError:
                    logger.warning(
                        "Malformed arguments for tool call %s: %r",
                        fn.get("name"),
                        raw_args[:200],
                    )
                    args = {}
            if not isinstance(args, dict):
                args = {}
            calls.append(
                ToolCall(
                    id=tc.get("id") or f"call_{i}",
                    name=fn.get("name", ""),
                    arguments=args,
                )
            )
        return calls

    async def chat(
        self,
        messages: list[ChatMessage],
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
    ) -> ProviderResponse:
        body: dict[str, Any] = {
            "model": model or self._model,
            "messages": self._format_messages(messages),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        if tools:
            body["tools"] = tools
            body["tool_choice"] = "auto"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self._transport
            ) as client:
                resp = await client.post(
                    f"{self.api_base}/chat/completions",
                    headers=self._get_headers(),
                    json=body,
                )
        except httpx.HTTPError as e:
            raise ProviderError(f"request to {self.api_base} failed: {e}") from e

        if resp.status_code >= 400:
            raise ProviderError(
                f"provider returned HTTP {resp.status_code}: {resp.text[:300]}"
            )

        try:
            data = resp.json()
            message = data["choices"][0]["message"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"malformed provider response: {e}") from e

        tool_calls = self._parse_tool_calls(message.get("tool_calls") or [])
        content = message.get("content") or ""
        logger.debug(
            "Provider reply: %d chars, %d tool calls", len(content), len(tool_calls)
        )
        return ProviderResponse(content=content, tool_calls=tool_calls)
