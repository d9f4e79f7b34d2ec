"""
Heartbeat service: periodic wake-up for proactive tasks.

Checks HEARTBEAT.md and, when it lists tasks, submits a message on the
"heartbeat" channel for the agent loop to act on.
"""

import asyncio
import logging
from pathlib import Path

from picobot.bus import InboundMessage, MessageHub

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_INTERVAL_S = 60
HEARTBEAT_CHANNEL = "heartbeat"
HEARTBEAT_CHAT_ID = "system"

HEARTBEAT_PROMPT = """Heartbeat check. These are the tasks listed in HEARTBEAT.md:

{tasks}

Complete any task that is due, using your tools. Use the message tool if a user should be told something.
If nothing needs doing, reply with just: HEARTBEAT_OK"""


def is_heartbeat_empty(content: str) -> bool:
    """
    Check if HEARTBEAT.md has actionable content.

    Skips:
    - Empty lines
    - Lines starting with #
    - HTML comments <!-- ... -->, including multi-line ones
    """
    in_comment = False
    for line in content.splitlines():
        stripped = line.strip()

        if in_comment:
            if "-->" in stripped:
                in_comment = False
            continue
        if stripped.startswith("<!--"):
            in_comment = "-->" not in stripped
            continue
        if not stripped or stripped.startswith("#"):
            continue

        return False

    return True


class HeartbeatService:
    """
    Periodic wake-up service.

    Every interval:
    1. Reads HEARTBEAT.md from workspace
    2. If it has actionable lines, submits a heartbeat message to the hub
    3. The agent processes it statelessly; "HEARTBEAT_OK" means nothing to do
    """

    def __init__(
        self,
        hub: MessageHub,
        workspace: Path,
        interval_s: float = DEFAULT_HEARTBEAT_INTERVAL_S,
    ):
        self.hub = hub
        self.heartbeat_path = Path(workspace) / "HEARTBEAT.md"
        self.interval_s = interval_s
        self._running = False
        self._task: asyncio.Task[None] | None = None

    async def tick(self) -> bool:
        """
        Check HEARTBEAT.md and submit a message if needed.

        Returns:
            True if a heartbeat message was submitted.
        """
        if not self.heartbeat_path.exists():
            return False

        try:
            content = self.heartbeat_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Could not read %s: %s", self.heartbeat_path, e)
            return False

        if is_heartbeat_empty(content):
            return False

        await self.hub.submit_inbound(
            InboundMessage(
                channel=HEARTBEAT_CHANNEL,
                sender_id="heartbeat",
                chat_id=HEARTBEAT_CHAT_ID,
                content=HEARTBEAT_PROMPT.format(tasks=content.strip()),
            )
        )
        logger.debug("Heartbeat submitted")
        return True

    async def _run_loop(self) -> None:
        """Main heartbeat loop."""
        while self._running:
            await asyncio.sleep(self.interval_s)
            if self._running:  # Check again in case stopped during sleep
                await self.tick()

    async def start(self) -> None:
        """Start the heartbeat service."""
        self._running = True
        self._task = asyncio.create_task(self._run_loop(), name="heartbeat")

    async def stop(self) -> None:
        """Stop the heartbeat service."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
