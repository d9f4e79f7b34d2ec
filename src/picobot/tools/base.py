"""
Tool contract.
"""

from abc import ABC, abstractmethod
from typing import Any


class ToolError(Exception):
    """A tool could not do what was asked. Rendered as text for the model."""


class Tool(ABC):
    """
    A named capability the model may call.

    Subclasses set `name`, `description` and `parameters` (JSON Schema),
    and implement `execute`. Raising signals failure; the agent loop turns
    the exception into a "(tool error) ..." result.
    """

    name: str
    description: str
    parameters: dict[str, Any] = {"type": "object", "properties": {}}

    @abstractmethod
    async def execute(self, args: dict[str, Any]) -> str:
        ...

    def to_schema(self) -> dict[str, Any]:
        """OpenAI function-calling definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ContextualTool(Tool):
    """A tool that needs to know which conversation is being served."""

    def __init__(self) -> None:
        self.channel = ""
        self.chat_id = ""

    def set_context(self, channel: str, chat_id: str) -> None:
        self.channel = channel
        self.chat_id = chat_id
