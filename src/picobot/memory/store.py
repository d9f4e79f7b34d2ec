"""
File-based memory store.

The agent writes here through the write_memory tool and the
"remember ..." shortcut; the loop reads it back for context building.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal

from picobot.memory.storage import KeyValueStore

logger = logging.getLogger(__name__)

MEMORY_DIR = "memory"
LONG_TERM_KEY = f"{MEMORY_DIR}/MEMORY.md"

_TIMESTAMP_RE = re.compile(r"^\[[^\]]*\]\s+")
_DAILY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}\.md$")


@dataclass
class MemoryItem:
    """One memory line. kind "today" = daily note, "long" = long-term."""

    kind: Literal["today", "long"]
    text: str


def _split_lines(content: str, kind: Literal["today", "long"]) -> list[MemoryItem]:
    items = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        line = _TIMESTAMP_RE.sub("", line).strip()
        if line:
            items.append(MemoryItem(kind=kind, text=line))
    return items


class MemoryStore:
    """
    Memory with two tiers:

    1. Long-term: memory/MEMORY.md (overwritable)
    2. Daily: memory/YYYY-MM-DD.md (append-only, one timestamped line per note)
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self._clock = clock

    def _day_key(self, day: datetime) -> str:
        return f"{MEMORY_DIR}/{day.strftime('%Y-%m-%d')}.md"

    def append_today(self, text: str) -> None:
        """Append a timestamped line to today's notes."""
        text = text.strip()
        if not text:
            return
        now = self._clock()
        self.store.append(self._day_key(now), f"[{now.strftime('%H:%M:%S')}] {text}\n")
        logger.debug("Appended to daily memory: %s", text[:80])

    def read_today(self) -> str:
        """Read today's daily notes. Returns empty string if none."""
        return self.store.read(self._day_key(self._clock()))

    def read_long_term(self) -> str:
        """Read long-term memory. Returns empty string if none."""
        return self.store.read(LONG_TERM_KEY)

    def write_long_term(self, text: str) -> None:
        """Overwrite long-term memory."""
        self.store.write(LONG_TERM_KEY, text)

    def recent(self, days: int) -> list[MemoryItem]:
        """
        Daily-note entries from the last `days` days, newest day first.

        Timestamps are stripped from the returned text.
        """
        if days <= 0:
            return []
        today = self._clock()
        items: list[MemoryItem] = []
        for offset in range(days):
            content = self.store.read(self._day_key(today - timedelta(days=offset)))
            items.extend(_split_lines(content, "today"))
        return items

    def items(self) -> list[MemoryItem]:
        """Today's notes followed by long-term lines."""
        return _split_lines(self.read_today(), "today") + _split_lines(
            self.read_long_term(), "long"
        )

    def list_daily_keys(self) -> list[str]:
        """Daily note keys, newest first."""
        keys = [
            k
            for k in self.store.keys(f"{MEMORY_DIR}/")
            if _DAILY_RE.match(k.rsplit("/", 1)[-1])
        ]
        return sorted(keys, reverse=True)

    def get_recent_notes(self, days: int) -> str:
        """Raw daily notes of the last `days` days, one section per day."""
        today = self._clock()
        parts = []
        for offset in range(max(days, 0)):
            day = today - timedelta(days=offset)
            content = self.store.read(self._day_key(day))
            if content.strip():
                parts.append(f"## {day.strftime('%Y-%m-%d')}\n\n{content.strip()}")
        return "\n\n".join(parts)

    def get_memory_context(self) -> str:
        """
        Build memory context for the system prompt.

        Returns formatted string with long-term memory and today's notes.
        """
        parts = []

        long_term = self.read_long_term()
        if long_term.strip():
            parts.append(f"## Long-term Memory\n\n{long_term.strip()}")

        today = self.read_today()
        if today.strip():
            parts.append(
                f"## Today's Notes ({self._clock().strftime('%Y-%m-%d')})\n\n{today.strip()}"
            )

        return "\n\n---\n\n".join(parts)
