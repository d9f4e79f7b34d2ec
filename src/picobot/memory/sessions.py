"""
Persistent conversation sessions, one JSON document per conversation key.
"""

import json
import logging
from dataclasses import dataclass, field
from urllib.parse import quote

from picobot.memory.storage import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Ordered {role, content} history of one conversation."""

    key: str
    messages: list[dict[str, str]] = field(default_factory=list)

    def add_message(self, role: str, content: str) -> None:
        self.messages.append({"role": role, "content": content})

    def get_history(self, max_messages: int | None = None) -> list[dict[str, str]]:
        """Copy of the history, optionally only the last `max_messages`."""
        messages = self.messages
        if max_messages is not None:
            messages = messages[-max_messages:] if max_messages > 0 else []
        return [dict(m) for m in messages]


class SessionStore:
    """
    Load and persist sessions (conversation key → history).

    Sessions survive restarts so users don't lose conversation context.
    Never used for system-trigger channels.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._cache: dict[str, Session] = {}

    @staticmethod
    def storage_key(key: str) -> str:
        # percent-encoding keeps distinct keys in distinct files
        return f"sessions/{quote(key, safe='')}.json"

    def _load(self, key: str) -> Session | None:
        raw = self.store.read(self.storage_key(key))
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Could not load session %s: %s", key, e)
            return None
        messages = [
            {"role": str(m.get("role", "")), "content": str(m.get("content", ""))}
            for m in data.get("messages", [])
            if isinstance(m, dict)
        ]
        return Session(key=key, messages=messages)

    def get_or_create(self, key: str) -> Session:
        """Return the cached or persisted session, or a new empty one."""
        session = self._cache.get(key)
        if session is None:
            session = self._load(key) or Session(key=key)
            self._cache[key] = session
        return session

    def save(self, session: Session) -> None:
        """Overwrite the persisted copy of the session."""
        payload = json.dumps(
            {"key": session.key, "messages": session.messages},
            indent=2,
            ensure_ascii=False,
        )
        try:
            self.store.write(self.storage_key(session.key), payload)
        except OSError as e:
            logger.error("Could not save session %s: %s", session.key, e)
        self._cache[session.key] = session

    def delete(self, key: str) -> None:
        """Forget a session in memory and on disk."""
        self._cache.pop(key, None)
        try:
            self.store.delete(self.storage_key(key))
        except OSError as e:
            logger.error("Could not delete session %s: %s", key, e)

    def __contains__(self, key: str) -> bool:
        return key in self._cache or self.store.exists(self.storage_key(key))
