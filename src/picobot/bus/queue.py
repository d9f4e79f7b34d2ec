"""
Async message hub for decoupling channels from the agent.

Two directions:
- inbound: every channel and scheduler → one bounded queue → agent
- outbound: agent → one queue → router → the matching channel's private queue

Inbound submission applies backpressure (producers wait for space).
Outbound delivery never waits: a reply with no subscriber, or whose
subscriber queue is full, is dropped and logged.
"""

import asyncio
import logging
from typing import Self

from picobot.bus.events import InboundMessage, OutboundMessage

logger = logging.getLogger(__name__)


class HubError(RuntimeError):
    """Raised when subscriptions and routing are sequenced incorrectly."""


class MessageHub:
    """
    Central routing fabric.

    Subscriptions are fixed before routing starts, so the routing table is
    never mutated while the router reads it.
    """

    def __init__(
        self,
        inbound_size: int = 200,
        outbound_size: int = 100,
        subscriber_size: int = 100,
    ) -> None:
        self._inbound: asyncio.Queue[InboundMessage] = asyncio.Queue(
            maxsize=max(inbound_size, 0)
        )
        self._outbound: asyncio.Queue[OutboundMessage] = asyncio.Queue(
            maxsize=max(outbound_size, 0)
        )
        self._subscriber_size = max(subscriber_size, 0)
        self._subscribers: dict[str, asyncio.Queue[OutboundMessage]] = {}
        self._router_task: asyncio.Task[None] | None = None
        self._dropped = 0

    async def submit_inbound(self, msg: InboundMessage) -> None:
        """
        Enqueue a message for the agent.

        Waits for free space when the queue is full; inbound messages are
        never dropped.
        """
        await self._inbound.put(msg)

    async def consume_inbound(self) -> InboundMessage:
        """Take the next inbound message (global FIFO across producers)."""
        return await self._inbound.get()

    def subscribe(self, channel: str) -> asyncio.Queue[OutboundMessage]:
        """
        Register a channel's interest in replies addressed to it.

        Args:
            channel: Channel name, matched against OutboundMessage.channel

        Returns:
            The channel's private queue. Only the channel should read it.
        """
        if self._router_task is not None:
            raise HubError(f"cannot subscribe '{channel}': routing already started")
        if channel in self._subscribers:
            raise HubError(f"channel '{channel}' is already subscribed")

        queue: asyncio.Queue[OutboundMessage] = asyncio.Queue(
            maxsize=self._subscriber_size
        )
        self._subscribers[channel] = queue
        logger.debug("Channel %s subscribed to outbound messages", channel)
        return queue

    def publish_outbound(self, msg: OutboundMessage) -> bool:
        """
        Hand a reply to the router without waiting.

        Returns:
            True if queued, False if the outbound queue was full.
        """
        try:
            self._outbound.put_nowait(msg)
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning(
                "Outbound queue full, dropping message for %s:%s",
                msg.channel,
                msg.chat_id,
            )
            return False
        return True

    def start_routing(self) -> Self:
        """Start the routing task. Call after every channel has subscribed."""
        if self._router_task is not None:
            raise HubError("routing already started")
        self._router_task = asyncio.create_task(self._route_loop(), name="hub-router")
        logger.info(
            "Hub routing started for channels: %s",
            ", ".join(sorted(self._subscribers)) or "(none)",
        )
        return self

    async def _route_loop(self) -> None:
        """Forward outbound messages to their channel's private queue."""
        while True:
            msg = await self._outbound.get()
            self._deliver(msg)

    def _deliver(self, msg: OutboundMessage) -> None:
        queue = self._subscribers.get(msg.channel)
        if queue is None:
            self._dropped += 1
            logger.warning(
                "No subscriber for channel '%s', dropping message for chat %s",
                msg.channel,
                msg.chat_id,
            )
            return

        try:
            queue.put_nowait(msg)
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning(
                "Subscriber queue for '%s' full, dropping message for chat %s",
                msg.channel,
                msg.chat_id,
            )

    async def stop(self) -> None:
        """Stop the routing task."""
        task, self._router_task = self._router_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    @property
    def routing(self) -> bool:
        return self._router_task is not None and not self._router_task.done()

    @property
    def channels(self) -> list[str]:
        """Names of subscribed channels."""
        return sorted(self._subscribers)

    @property
    def dropped(self) -> int:
        """Number of outbound messages dropped so far."""
        return self._dropped

    @property
    def inbound_depth(self) -> int:
        """Current number of messages in the inbound queue."""
        return self._inbound.qsize()

    @property
    def outbound_depth(self) -> int:
        """Current number of messages in the outbound queue."""
        return self._outbound.qsize()
