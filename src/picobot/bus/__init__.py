"""Message hub for decoupling channels from agent."""

from picobot.bus.events import InboundMessage, OutboundMessage
from picobot.bus.queue import HubError, MessageHub

__all__ = ["InboundMessage", "OutboundMessage", "MessageHub", "HubError"]
