"""
Telegram channel integration using python-telegram-bot.
"""

import logging
from typing import Any

from telegram import Update
from telegram.constants import ChatAction
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from picobot.bus import MessageHub, OutboundMessage
from picobot.channels.base import BaseChannel

logger = logging.getLogger(__name__)

# Telegram message length limit
MAX_MESSAGE_LENGTH = 4096


def chunk_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split a message into chunks that fit Telegram's length limit.

    Splits at paragraph boundaries first, then sentence boundaries,
    then word boundaries as a last resort.
    """
    if len(text) <= limit:
        return [text]

    chunks = []
    remaining = text

    while remaining:
        if len(remaining) <= limit:
            chunks.append(remaining)
            break

        chunk = remaining[:limit]

        split_at = chunk.rfind("\n\n")
        if split_at <= 0:
            split_at = chunk.rfind(". ")
            if split_at > 0:
                split_at += 1  # Include the period
        if split_at <= 0:
            split_at = chunk.rfind(" ")
        if split_at <= 0:
            split_at = limit

        chunks.append(remaining[:split_at].rstrip())
        remaining = remaining[split_at:].lstrip()

    return chunks


class TelegramChannel(BaseChannel):
    """
    Telegram channel using python-telegram-bot v20+ long polling.

    Handles text messages and the /start, /help, /reset commands.
    """

    def __init__(self, name: str, hub: MessageHub, config: dict[str, Any]):
        super().__init__(name, hub, config)
        self._app: Application | None = None

    @property
    def token(self) -> str:
        return self.config.get("token", "")

    async def start(self) -> None:
        """Start Telegram channel with long polling."""
        if not self.token:
            raise ValueError("Telegram token not configured")

        self._app = Application.builder().token(self.token).build()
        self._app.add_handler(
            CommandHandler(["start", "help", "reset"], self._handle_command)
        )
        self._app.add_handler(
            MessageHandler(filters.TEXT & ~filters.COMMAND, self._handle_message)
        )

        # PTB lifecycle: initialize → start → updater.start_polling
        await self._app.initialize()
        await self._app.start()
        assert self._app.updater is not None
        await self._app.updater.start_polling()
        self._running = True

    async def _handle_message(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle incoming text messages from Telegram."""
        if not update.effective_user or not update.message or not update.effective_chat:
            return

        user_id = str(update.effective_user.id)
        if not self.is_allowed(user_id):
            await update.message.reply_text("Sorry, you're not authorized to use this bot.")
            return

        await update.effective_chat.send_action(ChatAction.TYPING)
        await self._publish_inbound(
            sender_id=user_id,
            chat_id=str(update.effective_chat.id),
            content=update.message.text or "",
            update_id=update.update_id,
            username=update.effective_user.username or "",
        )

    async def _handle_command(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle bot commands."""
        if not update.effective_user or not update.message or not update.effective_chat:
            return

        user_id = str(update.effective_user.id)
        if not self.is_allowed(user_id):
            await update.message.reply_text("Sorry, you're not authorized to use this bot.")
            return

        command = (update.message.text or "").split()[0].split("@")[0]
        if command == "/start":
            await update.message.reply_text(
                "Hi! I'm picobot, your personal AI assistant.\n\n"
                "Just send me a message and I'll respond!"
            )
        elif command == "/help":
            await update.message.reply_text(
                "Available commands:\n\n"
                "/start - Start the bot\n"
                "/help - Show this help\n"
                "/reset - Reset conversation\n\n"
                "Just send any message to chat with me!"
            )
        elif command == "/reset":
            await self._publish_inbound(
                sender_id=user_id,
                chat_id=str(update.effective_chat.id),
                content="/reset",
                command="reset",
            )
            await update.message.reply_text("Conversation reset!")

    async def stop(self) -> None:
        """Stop Telegram channel with proper PTB shutdown sequence."""
        self._running = False
        if self._app is None:
            return
        if self._app.updater and self._app.updater.running:
            await self._app.updater.stop()
        if self._app.running:
            await self._app.stop()
        await self._app.shutdown()

    async def send(self, msg: OutboundMessage) -> None:
        """Send an outbound message to Telegram, chunking if needed."""
        if self._app is None:
            logger.warning("Telegram app not initialized, dropping reply to %s", msg.chat_id)
            return
        if not msg.content:
            return

        logger.info("Telegram sending %d chars to %s", len(msg.content), msg.chat_id)
        for chunk in chunk_message(msg.content):
            await self._app.bot.send_message(chat_id=msg.chat_id, text=chunk)
