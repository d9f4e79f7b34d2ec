"""Pytest configuration and shared fixtures."""

from datetime import datetime
from typing import Any

import pytest

from picobot.agent import AgentLoop, ContextBuilder
from picobot.bus import MessageHub
from picobot.memory import InMemoryStore, MemoryStore, SessionStore
from picobot.providers import ChatMessage, LLMProvider, ProviderResponse, ToolCall
from picobot.tools import Tool, ToolRegistry


class ScriptedProvider(LLMProvider):
    """Returns queued responses in order; records every call."""

    def __init__(self, responses=None, default=None):
        self.responses = list(responses or [])
        self.default = default
        self.calls: list[list[ChatMessage]] = []
        self.tools_seen: list[Any] = []

    @property
    def default_model(self) -> str:
        return "test-model"

    async def chat(self, messages, tools=None, model=None) -> ProviderResponse:
        self.calls.append(list(messages))
        self.tools_seen.append(tools)
        if self.responses:
            item = self.responses.pop(0)
        else:
            item = self.default
        if isinstance(item, Exception):
            raise item
        if item is None:
            return ProviderResponse(content="done")
        return item


def tool_call(name: str, call_id: str = "call_1", **arguments) -> ProviderResponse:
    return ProviderResponse(
        content="", tool_calls=[ToolCall(id=call_id, name=name, arguments=arguments)]
    )


class EchoTool(Tool):
    name = "echo"
    description = "Echo the text argument"
    parameters = {
        "type": "object",
        "properties": {"text": {"type": "string"}},
    }

    def __init__(self):
        self.received: list[dict] = []

    async def execute(self, args: dict[str, Any]) -> str:
        self.received.append(args)
        return f"echo: {args.get('text', '')}"


class FailingTool(Tool):
    name = "broken"
    description = "Always fails"

    async def execute(self, args: dict[str, Any]) -> str:
        raise RuntimeError("disk on fire")


FIXED_NOW = datetime(2026, 3, 14, 9, 30, 0)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def memory(store):
    return MemoryStore(store, clock=lambda: FIXED_NOW)


@pytest.fixture
def sessions(store):
    return SessionStore(store)


@pytest.fixture
def registry():
    reg = ToolRegistry()
    reg.register(EchoTool())
    reg.register(FailingTool())
    return reg


@pytest.fixture
def make_agent(registry, sessions, memory, tmp_path):
    """Build an AgentLoop around a provider; in-memory storage by default."""

    def _make(provider, hub=None, max_iterations=10, **kwargs):
        return AgentLoop(
            hub=hub or MessageHub(),
            provider=provider,
            tools=kwargs.pop("tools", registry),
            sessions=kwargs.pop("sessions", sessions),
            memory=kwargs.pop("memory", memory),
            context=kwargs.pop("context", ContextBuilder(tmp_path, bootstrap={})),
            max_iterations=max_iterations,
            **kwargs,
        )

    return _make
