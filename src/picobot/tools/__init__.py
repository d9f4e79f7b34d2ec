"""Tools the agent can call."""

from picobot.tools.base import ContextualTool, Tool, ToolError
from picobot.tools.exec import ExecTool
from picobot.tools.filesystem import FilesystemTool
from picobot.tools.memory import WriteMemoryTool
from picobot.tools.message import MessageTool
from picobot.tools.registry import ToolRegistry
from picobot.tools.schedule import CronTool
from picobot.tools.skills import (
    CreateSkillTool,
    DeleteSkillTool,
    ListSkillsTool,
    ReadSkillTool,
    SkillManager,
)
from picobot.tools.web import WebTool

__all__ = [
    "ContextualTool",
    "CreateSkillTool",
    "CronTool",
    "DeleteSkillTool",
    "ExecTool",
    "FilesystemTool",
    "ListSkillsTool",
    "MessageTool",
    "ReadSkillTool",
    "SkillManager",
    "Tool",
    "ToolError",
    "ToolRegistry",
    "WebTool",
    "WriteMemoryTool",
]
