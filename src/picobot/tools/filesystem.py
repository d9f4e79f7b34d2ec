"""
Tool: filesystem

Read, write, and list files. Every path is confined to the workspace.
"""

from pathlib import Path
from typing import Any

from picobot.tools.base import Tool, ToolError

MAX_READ_CHARS = 50_000


class FilesystemTool(Tool):
    name = "filesystem"
    description = "Read, write, or list files in the workspace (paths are relative to it)."
    parameters = {
        "type": "object",
        "properties": {
            "action": {"type": "string", "enum": ["read", "write", "list"]},
            "path": {
                "type": "string",
                "description": "File or directory path relative to the workspace",
            },
            "content": {
                "type": "string",
                "description": "Content to write (for action 'write')",
            },
        },
        "required": ["action", "path"],
    }

    def __init__(self, workspace: Path):
        self.workspace = Path(workspace).expanduser().resolve()

    def _resolve(self, raw: str) -> Path:
        path = (self.workspace / raw).resolve()
        if not path.is_relative_to(self.workspace):
            raise ToolError(f"path escapes workspace: {raw}")
        return path

    async def execute(self, args: dict[str, Any]) -> str:
        action = args.get("action")
        raw = args.get("path")
        if not raw:
            raise ToolError("path is required")
        path = self._resolve(str(raw))

        if action == "read":
            if not path.is_file():
                raise ToolError(f"no such file: {raw}")
            text = path.read_text(encoding="utf-8", errors="replace")
            if len(text) > MAX_READ_CHARS:
                text = text[:MAX_READ_CHARS] + "\n... (truncated)"
            return text

        if action == "write":
            content = args.get("content")
            if content is None:
                raise ToolError("content is required for write")
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(str(content), encoding="utf-8")
            return f"Wrote {len(str(content))} chars to {raw}"

        if action == "list":
            if not path.is_dir():
                raise ToolError(f"no such directory: {raw}")
            entries = sorted(
                f"{p.name}/" if p.is_dir() else p.name for p in path.iterdir()
            )
            return "\n".join(entries) if entries else "(empty)"

        raise ToolError(f"unknown action '{action}'")
