"""Sessions, memory notes, and memory ranking."""

from picobot.memory.ranker import LLMRanker
from picobot.memory.sessions import Session, SessionStore
from picobot.memory.storage import FileStore, InMemoryStore, KeyValueStore
from picobot.memory.store import MemoryItem, MemoryStore

__all__ = [
    "FileStore",
    "InMemoryStore",
    "KeyValueStore",
    "LLMRanker",
    "MemoryItem",
    "MemoryStore",
    "Session",
    "SessionStore",
]
