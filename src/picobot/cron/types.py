"""
Scheduled job record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal


# "at": ISO datetime, "every": seconds, "cron": five-field expression
ScheduleType = Literal["at", "every", "cron"]


@dataclass
class CronJob:
    """
    One scheduled prompt, keyed by `name`.

    When `deliver` is set, the agent's reply to the fired job is routed to
    `channel`/`chat_id` (the conversation that scheduled it) instead of the
    cron channel, where nobody listens.
    """

    name: str
    message: str
    schedule_type: ScheduleType
    schedule_value: str
    deliver: bool = False
    channel: str = ""
    chat_id: str = ""
    enabled: bool = True
    next_run_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def delivers(self) -> bool:
        return self.deliver and bool(self.channel) and bool(self.chat_id)

    def describe(self) -> str:
        next_run = self.next_run_at.isoformat() if self.next_run_at else "never"
        return f"{self.name}: {self.schedule_type} {self.schedule_value} (next: {next_run})"
