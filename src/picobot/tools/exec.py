"""
Tool: exec

Runs a shell command inside the workspace with a timeout.
"""

import asyncio
import re
from pathlib import Path
from typing import Any

from picobot.tools.base import Tool, ToolError

MAX_OUTPUT_CHARS = 10_000

BLOCKED_PATTERNS = [
    re.compile(r"\brm\s+-[a-z]*r[a-z]*f?\s+/(\s|$)"),
    re.compile(r"\bmkfs(\.\w+)?\b"),
    re.compile(r"\bdd\s+if="),
    re.compile(r"\b(shutdown|reboot|halt|poweroff)\b"),
    re.compile(r":\(\)\s*\{\s*:\|:&\s*\};:"),
]


class ExecTool(Tool):
    name = "exec"
    description = "Execute a shell command in the workspace and return its output."
    parameters = {
        "type": "object",
        "properties": {
            "command": {"type": "string", "description": "Shell command to run"},
        },
        "required": ["command"],
    }

    def __init__(self, workspace: Path, timeout_s: float = 60):
        self.workspace = Path(workspace).expanduser().resolve()
        self.timeout_s = timeout_s

    async def execute(self, args: dict[str, Any]) -> str:
        command = str(args.get("command") or "").strip()
        if not command:
            raise ToolError("command is required")
        if any(p.search(command) for p in BLOCKED_PATTERNS):
            raise ToolError("command blocked by safety policy")

        proc = await asyncio.create_subprocess_shell(
            command,
            cwd=self.workspace,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), self.timeout_s)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise ToolError(f"command timed out after {self.timeout_s}s")
        except asyncio.CancelledError:
            proc.kill()
            raise

        output = stdout.decode("utf-8", errors="replace")
        if len(output) > MAX_OUTPUT_CHARS:
            output = output[:MAX_OUTPUT_CHARS] + "\n... (truncated)"
        if proc.returncode:
            return f"(exit {proc.returncode})\n{output}"
        return output or "(no output)"
