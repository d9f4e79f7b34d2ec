"""Tool registry: holds tools, exposes their schema, dispatches by name."""

import logging
from typing import Any

from picobot.tools.base import ContextualTool, Tool, ToolError

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Tools available to one agent loop. Built once, passed in explicitly."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            logger.warning("Replacing already registered tool %s", tool.name)
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> None:
        self._tools.pop(name, None)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def definitions(self) -> list[dict[str, Any]]:
        """Schemas of every tool, in registration order."""
        return [tool.to_schema() for tool in self._tools.values()]

    def set_context(self, channel: str, chat_id: str) -> None:
        """Tell contextual tools which conversation the current turn serves."""
        for tool in self._tools.values():
            if isinstance(tool, ContextualTool):
                tool.set_context(channel, chat_id)

    async def execute(self, name: str, arguments: dict[str, Any] | None) -> str:
        """
        Execute a tool by name.

        Arguments are passed through unvalidated; tools check their own input.

        Raises:
            ToolError: if no tool has this name
            Exception: whatever the tool raises
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolError(f"tool '{name}' not found")

        logger.info("Executing tool %s", name)
        return await tool.execute(arguments or {})
