"""
Cron service for scheduled tasks.

Due jobs are not executed here: each one becomes an InboundMessage on the
"cron" channel and is processed by the agent loop like any other message.
"""

import asyncio
import logging
from datetime import datetime, timedelta

from croniter import croniter

from picobot.bus import InboundMessage, MessageHub
from picobot.cron.types import CronJob, ScheduleType

logger = logging.getLogger(__name__)

CRON_CHANNEL = "cron"


class CronService:
    """
    Scheduled tasks service.

    Three schedule types:
    - "at": One-time execution at specific ISO datetime
    - "every": Interval-based (every N seconds)
    - "cron": Cron expression
    """

    def __init__(self, hub: MessageHub, interval_s: float = 60):
        """
        Initialize cron service.

        Args:
            hub: Hub that receives the synthesized messages
            interval_s: How often to check for due jobs (default 60s)
        """
        self.hub = hub
        self.interval_s = interval_s
        self.jobs: dict[str, CronJob] = {}
        self._running = False
        self._task: asyncio.Task[None] | None = None

    @staticmethod
    def compute_next_run(job: CronJob, now: datetime | None = None) -> datetime | None:
        """
        Compute next run time for a job.

        Returns:
            Next run datetime, or None if the schedule is invalid or expired
        """
        now = now or datetime.now()

        if job.schedule_type == "at":
            try:
                run_at = datetime.fromisoformat(job.schedule_value)
            except ValueError:
                return None
            if run_at.tzinfo is not None:
                run_at = run_at.astimezone().replace(tzinfo=None)
            return run_at if run_at > now else None

        elif job.schedule_type == "every":
            try:
                seconds = int(job.schedule_value)
            except ValueError:
                return None
            return now + timedelta(seconds=seconds) if seconds > 0 else None

        elif job.schedule_type == "cron":
            if not croniter.is_valid(job.schedule_value):
                return None
            return croniter(job.schedule_value, now).get_next(datetime)

        return None

    def add_job(
        self,
        name: str,
        message: str,
        schedule_type: ScheduleType,
        schedule_value: str,
        deliver: bool = False,
        channel: str = "",
        chat_id: str = "",
    ) -> CronJob:
        """
        Add (or replace) a scheduled job.

        Raises:
            ValueError: if the schedule cannot produce a future run
        """
        job = CronJob(
            name=name,
            message=message,
            schedule_type=schedule_type,
            schedule_value=schedule_value,
            deliver=deliver,
            channel=channel,
            chat_id=chat_id,
        )
        job.next_run_at = self.compute_next_run(job)
        if job.next_run_at is None:
            raise ValueError(
                f"invalid or past schedule: {schedule_type} {schedule_value!r}"
            )
        self.jobs[name] = job
        logger.info("Scheduled job %s (%s: %s)", name, schedule_type, schedule_value)
        return job

    def remove_job(self, name: str) -> bool:
        """
        Remove a job.

        Returns:
            True if removed, False if not found
        """
        return self.jobs.pop(name, None) is not None

    def list_jobs(self) -> list[CronJob]:
        return sorted(self.jobs.values(), key=lambda j: j.name)

    def build_message(self, job: CronJob) -> InboundMessage:
        """The synthetic message submitted when a job fires."""
        metadata: dict[str, str] = {"job": job.name}
        if job.delivers:
            metadata["reply_channel"] = job.channel
            metadata["reply_chat_id"] = job.chat_id
        return InboundMessage(
            channel=CRON_CHANNEL,
            sender_id="cron",
            chat_id=f"job:{job.name}",
            content=(
                f"[Scheduled task fired] {job.message}\n"
                "Please relay this to the user in a friendly way."
            ),
            metadata=metadata,
        )

    async def tick(self, now: datetime | None = None) -> list[str]:
        """
        Submit every due job.

        Returns:
            Names of the jobs that fired.
        """
        now = now or datetime.now()
        fired = []

        for name, job in list(self.jobs.items()):
            if not job.enabled:
                continue
            if job.next_run_at is None or job.next_run_at > now:
                continue

            logger.info("Cron fired: %s", name)
            await self.hub.submit_inbound(self.build_message(job))
            fired.append(name)

            # "at" jobs run once
            if job.schedule_type == "at":
                job.enabled = False
                job.next_run_at = None
            else:
                job.next_run_at = self.compute_next_run(job, now)

        return fired

    async def _run_loop(self) -> None:
        """Main cron loop."""
        while self._running:
            await self.tick()
            await asyncio.sleep(self.interval_s)

    async def start(self) -> None:
        """Start the cron service."""
        self._running = True
        self._task = asyncio.create_task(self._run_loop(), name="cron")

    async def stop(self) -> None:
        """Stop the cron service."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
