"""
Adapter contract: one chat platform on one side, the hub on the other.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from picobot.bus import InboundMessage, MessageHub, OutboundMessage

logger = logging.getLogger(__name__)


class BaseChannel(ABC):
    """
    Base for chat adapters.

    The constructor subscribes `name` on the hub, so adapters must be built
    before routing starts. Replies arrive on `self.outbound` and are handed
    to `send()` by `run_outbound()`; user messages go the other way through
    `_publish_inbound()`, which applies the `allow_from` list.
    """

    def __init__(self, name: str, hub: MessageHub, config: dict[str, Any]):
        self.name = name
        self.hub = hub
        self.config = config
        self.outbound: asyncio.Queue[OutboundMessage] = hub.subscribe(name)
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def enabled(self) -> bool:
        return bool(self.config.get("enabled", False))

    @property
    def allowed_senders(self) -> list[str]:
        """Sender IDs allowed to talk to the agent; empty allows everyone."""
        return [str(s) for s in self.config.get("allow_from", [])]

    def is_allowed(self, sender_id: str) -> bool:
        allowed = self.allowed_senders
        return not allowed or str(sender_id) in allowed

    @abstractmethod
    async def start(self) -> None:
        """Connect to the platform and listen for messages."""

    @abstractmethod
    async def stop(self) -> None:
        ...

    @abstractmethod
    async def send(self, msg: OutboundMessage) -> None:
        """Deliver one reply to the platform."""

    async def run_outbound(self) -> None:
        """Drain this adapter's reply queue until cancelled."""
        while True:
            msg = await self.outbound.get()
            try:
                await self.send(msg)
            except Exception:
                logger.exception("Error sending to %s:%s", self.name, msg.chat_id)

    async def _publish_inbound(
        self, sender_id: str, chat_id: str, content: str, **metadata: Any
    ) -> bool:
        """
        Submit a user message to the hub. Waits if the inbound queue is full.

        Returns:
            False if the sender is not on the allow-list (nothing submitted)
        """
        if not self.is_allowed(sender_id):
            logger.info("Ignoring message from unauthorized sender %s on %s", sender_id, self.name)
            return False

        await self.hub.submit_inbound(
            InboundMessage(
                channel=self.name,
                sender_id=str(sender_id),
                chat_id=str(chat_id),
                content=content,
                metadata=metadata,
            )
        )
        return True
