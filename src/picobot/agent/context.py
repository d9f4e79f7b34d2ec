"""
Prompt assembly for one turn.
"""

import logging
from pathlib import Path

from picobot.memory.store import MemoryItem
from picobot.providers.base import ChatMessage

logger = logging.getLogger(__name__)

BOOTSTRAP_FILES = ("SOUL.md", "AGENTS.md", "USER.md", "TOOLS.md")

IDENTITY = """You are picobot, a personal AI assistant.

You can call tools to act on the user's behalf. Your workspace is: {workspace}
Daily notes live in memory/YYYY-MM-DD.md, long-term memory in memory/MEMORY.md."""


def load_bootstrap(workspace: Path) -> dict[str, str]:
    """Read the workspace bootstrap files that exist, in fixed order."""
    texts = {}
    for name in BOOTSTRAP_FILES:
        path = Path(workspace) / name
        if not path.is_file():
            continue
        try:
            content = path.read_text(encoding="utf-8").strip()
        except OSError as e:
            logger.warning("Could not read bootstrap file %s: %s", path, e)
            continue
        if content:
            texts[name] = content
    return texts


class ContextBuilder:
    """
    Builds the ordered prompt for a turn.

    Bootstrap files are read once at construction; build_messages() itself
    touches nothing outside its arguments, so identical inputs give
    identical prompts.
    """

    def __init__(self, workspace: Path, bootstrap: dict[str, str] | None = None):
        self.workspace = Path(workspace)
        self.bootstrap = load_bootstrap(self.workspace) if bootstrap is None else dict(bootstrap)

    def build_system_prompt(
        self,
        channel: str,
        chat_id: str,
        memory_context: str = "",
        memories: list[MemoryItem] | None = None,
    ) -> str:
        parts = [IDENTITY.format(workspace=self.workspace)]

        for name, content in self.bootstrap.items():
            parts.append(f"## {name}\n\n{content}")

        parts.append(f"## Current Conversation\n\nchannel={channel}, chat_id={chat_id}")

        if memory_context.strip():
            parts.append(f"## Memory\n\n{memory_context.strip()}")

        if memories:
            lines = "\n".join(f"- {m.text} ({m.kind})" for m in memories)
            parts.append(f"## Relevant Memories\n\n{lines}")

        return "\n\n---\n\n".join(parts)

    def build_messages(
        self,
        history: list[dict[str, str]],
        current_message: str,
        channel: str,
        chat_id: str,
        memory_context: str = "",
        memories: list[MemoryItem] | None = None,
    ) -> list[ChatMessage]:
        """
        System prompt, then prior turns in order, then the new user message.
        """
        messages = [
            ChatMessage(
                role="system",
                content=self.build_system_prompt(channel, chat_id, memory_context, memories),
            )
        ]
        for turn in history:
            messages.append(ChatMessage(role=turn["role"], content=turn["content"]))
        messages.append(ChatMessage(role="user", content=current_message))
        return messages
