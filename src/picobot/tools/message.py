"""
Tool: message

Lets the agent send a message to the current chat, or to any
channel/chat, through the hub's outbound path.
"""

import logging
from typing import Any

from picobot.bus import MessageHub, OutboundMessage
from picobot.tools.base import ContextualTool, ToolError

logger = logging.getLogger(__name__)


class MessageTool(ContextualTool):
    name = "message"
    description = (
        "Send a message to a user. Defaults to the current channel and chat; "
        "pass channel and chat_id to reach another conversation."
    )
    parameters = {
        "type": "object",
        "properties": {
            "content": {
                "type": "string",
                "description": "Message content to send (markdown supported)",
            },
            "channel": {
                "type": "string",
                "description": "Channel name (e.g., 'telegram'). Defaults to the current channel",
            },
            "chat_id": {
                "type": "string",
                "description": "Chat ID on that channel. Defaults to the current chat",
            },
        },
        "required": ["content"],
    }

    def __init__(self, hub: MessageHub):
        super().__init__()
        self.hub = hub

    async def execute(self, args: dict[str, Any]) -> str:
        content = args.get("content")
        if not content:
            raise ToolError("content is required")

        channel = args.get("channel") or self.channel
        chat_id = str(args.get("chat_id") or self.chat_id)
        if not channel or not chat_id:
            raise ToolError("no target: pass channel and chat_id")

        logger.info("message tool sending to %s:%s", channel, chat_id)
        sent = self.hub.publish_outbound(
            OutboundMessage(channel=channel, chat_id=chat_id, content=str(content))
        )
        if not sent:
            raise ToolError("outbound queue full, message not sent")
        return f"Message sent to {channel}:{chat_id}"
