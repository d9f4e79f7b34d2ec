"""
Tool: cron

Lets the agent create, list, and remove scheduled tasks.
"""

from typing import Any

from picobot.cron.service import CronService
from picobot.tools.base import ContextualTool, ToolError


class CronTool(ContextualTool):
    name = "cron"
    description = "Schedule a one-time or recurring task, list tasks, or remove one"
    parameters = {
        "type": "object",
        "properties": {
            "action": {
                "type": "string",
                "enum": ["add", "list", "remove"],
                "description": "What to do (default 'add')",
            },
            "name": {"type": "string", "description": "Task name for identification"},
            "message": {
                "type": "string",
                "description": "Prompt/message to execute when task runs",
            },
            "schedule_type": {
                "type": "string",
                "enum": ["at", "every", "cron"],
                "description": "Type of schedule",
            },
            "schedule_value": {
                "type": "string",
                "description": "Schedule value: ISO datetime (for 'at'), seconds (for 'every'), or cron expression (for 'cron')",
            },
            "deliver": {
                "type": "boolean",
                "description": "Whether to send the result to this chat (default true)",
            },
        },
    }

    def __init__(self, cron: CronService):
        super().__init__()
        self.cron = cron

    async def execute(self, args: dict[str, Any]) -> str:
        action = args.get("action") or "add"

        if action == "list":
            jobs = self.cron.list_jobs()
            if not jobs:
                return "No scheduled tasks"
            return "\n".join(f"- {j.describe()}" for j in jobs)

        name = args.get("name")
        if not name:
            raise ToolError("name is required")

        if action == "remove":
            if self.cron.remove_job(name):
                return f"Task '{name}' removed"
            raise ToolError(f"no task named '{name}'")

        if action != "add":
            raise ToolError(f"unknown action '{action}'")

        message = args.get("message")
        schedule_type = args.get("schedule_type")
        schedule_value = args.get("schedule_value")
        if not message or not schedule_type or schedule_value is None:
            raise ToolError("message, schedule_type and schedule_value are required")
        if schedule_type not in ("at", "every", "cron"):
            raise ToolError(f"unknown schedule_type '{schedule_type}'")

        try:
            self.cron.add_job(
                name=name,
                message=message,
                schedule_type=schedule_type,
                schedule_value=str(schedule_value),
                deliver=bool(args.get("deliver", True)),
                channel=self.channel,
                chat_id=self.chat_id,
            )
        except ValueError as e:
            raise ToolError(str(e)) from e
        return f"Task '{name}' scheduled ({schedule_type}: {schedule_value})"
