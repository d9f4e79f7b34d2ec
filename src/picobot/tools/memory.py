"""
Tool: write_memory

Persists notes to today's daily file or to long-term memory.
"""

from typing import Any

from picobot.memory.store import MemoryStore
from picobot.tools.base import Tool, ToolError


class WriteMemoryTool(Tool):
    name = "write_memory"
    description = (
        "Persist information to memory. target 'today' appends a daily note; "
        "target 'long' updates long-term memory (append or replace)."
    )
    parameters = {
        "type": "object",
        "properties": {
            "target": {
                "type": "string",
                "enum": ["today", "long"],
                "description": "'today' for daily notes, 'long' for long-term memory",
            },
            "content": {"type": "string", "description": "What to remember"},
            "append": {
                "type": "boolean",
                "description": "For 'long': true to append (default), false to replace",
            },
        },
        "required": ["target", "content"],
    }

    def __init__(self, memory: MemoryStore):
        self.memory = memory

    async def execute(self, args: dict[str, Any]) -> str:
        target = args.get("target")
        content = str(args.get("content") or "").strip()
        if not content:
            raise ToolError("content is required")

        if target == "today":
            self.memory.append_today(content)
            return "Appended to today's notes"

        if target == "long":
            if args.get("append", True):
                existing = self.memory.read_long_term().rstrip()
                content = f"{existing}\n{content}\n" if existing else f"{content}\n"
            self.memory.write_long_term(content)
            return "Updated long-term memory"

        raise ToolError(f"unknown target '{target}', expected 'today' or 'long'")
