"""Agent loop and context assembly."""

from picobot.agent.context import ContextBuilder
from picobot.agent.loop import AgentLoop, Turn, TurnState, default_tools, is_system_channel

__all__ = [
    "AgentLoop",
    "ContextBuilder",
    "Turn",
    "TurnState",
    "default_tools",
    "is_system_channel",
]
