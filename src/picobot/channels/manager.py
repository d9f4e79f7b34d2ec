"""
Channel manager: initializes channels, starts their reply drains, then
starts hub routing.
"""

import asyncio
import logging
from typing import Any

from picobot.bus import MessageHub
from picobot.channels.base import BaseChannel

logger = logging.getLogger(__name__)


class ChannelManager:
    """
    Manages all channel integrations.

    - Initializes enabled channels from config (each subscribes to the hub)
    - Starts channels with retries, then their outbound drains
    - Starts hub routing only after every channel has subscribed
    - Coordinates shutdown
    """

    MAX_START_RETRIES = 3

    def __init__(self, hub: MessageHub, retry_base_s: float = 1.0):
        self.hub = hub
        self.channels: dict[str, BaseChannel] = {}
        self._drain_tasks: list[asyncio.Task[None]] = []
        self._retry_base_s = retry_base_s
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def init_channel(
        self, name: str, channel_class: type[BaseChannel], config: dict[str, Any]
    ) -> BaseChannel | None:
        """
        Initialize a channel if enabled.

        Args:
            name: Channel identifier (e.g., "telegram")
            channel_class: Class implementing BaseChannel
            config: Channel configuration dict
        """
        if not config.get("enabled", False):
            return None

        channel = channel_class(name, self.hub, config)
        self.channels[name] = channel
        return channel

    def add_channel(self, channel: BaseChannel) -> None:
        """Register an already constructed channel."""
        self.channels[channel.name] = channel

    async def _start_channel_with_retry(self, name: str, channel: BaseChannel) -> bool:
        """Start a channel with exponential backoff retries."""
        for attempt in range(self.MAX_START_RETRIES):
            try:
                await channel.start()
                logger.info("%s channel started", name)
                return True
            except Exception as e:
                wait = self._retry_base_s * 2**attempt
                logger.warning(
                    "%s channel failed (attempt %d/%d): %s",
                    name,
                    attempt + 1,
                    self.MAX_START_RETRIES,
                    e,
                )
                if attempt < self.MAX_START_RETRIES - 1:
                    await asyncio.sleep(wait)
        logger.error(
            "%s channel failed permanently after %d attempts", name, self.MAX_START_RETRIES
        )
        return False

    async def start_all(self) -> None:
        """Start all channels, their reply drains, and hub routing."""
        self._running = True
        for name, channel in self.channels.items():
            await self._start_channel_with_retry(name, channel)
            self._drain_tasks.append(
                asyncio.create_task(channel.run_outbound(), name=f"{name}-outbound")
            )

        self.hub.start_routing()

    async def stop_all(self) -> None:
        """Stop routing, drains, and all channels."""
        self._running = False
        await self.hub.stop()

        for task in self._drain_tasks:
            task.cancel()
        await asyncio.gather(*self._drain_tasks, return_exceptions=True)
        self._drain_tasks.clear()

        for name, channel in self.channels.items():
            try:
                await channel.stop()
                logger.info("%s channel stopped", name)
            except Exception as e:
                logger.error("%s channel stop failed: %s", name, e)

    def get_status(self) -> dict[str, dict]:
        """Get status of all channels."""
        return {
            name: {
                "running": channel.running,
                "type": type(channel).__name__,
                "pending": channel.outbound.qsize(),
            }
            for name, channel in self.channels.items()
        }
