"""
Envelopes carried by the hub: inbound to the agent loop, outbound to adapters.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class InboundMessage:
    """
    A user message, or a synthetic one from cron/heartbeat.

    `metadata` is adapter-specific. Keys the agent loop understands:
    "command" ("reset"), "reply_channel" and "reply_chat_id".
    """

    channel: str
    sender_id: str
    chat_id: str
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def session_key(self) -> str:
        return f"{self.channel}:{self.chat_id}"

    @property
    def command(self) -> str | None:
        return self.metadata.get("command")

    def reply_address(self) -> tuple[str, str]:
        """(channel, chat_id) the reply goes to; metadata may redirect it."""
        channel = self.metadata.get("reply_channel") or self.channel
        chat_id = self.metadata.get("reply_chat_id") or self.chat_id
        return channel, str(chat_id)


@dataclass
class OutboundMessage:
    """A reply addressed to one adapter's chat."""

    channel: str
    chat_id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
