"""
Relevance ranking of memory items, using the chat provider as the scorer.
"""

import json
import logging
import re

from picobot.memory.store import MemoryItem
from picobot.providers.base import ChatMessage, LLMProvider

logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"\[[\s\d,]*\]")

RANK_PROMPT = """Rank the numbered memories by how relevant they are to the query.
Reply with only a JSON array of memory numbers, most relevant first, containing at most {top_k} numbers.

Query: {query}

Memories:
{memories}"""


class LLMRanker:
    """
    Ask the model to pick the top-K memories for a query.

    No provider call is made when there is nothing to choose between
    (no items, or K covers all of them).
    """

    def __init__(self, provider: LLMProvider, model: str | None = None):
        self.provider = provider
        self.model = model

    async def rank(
        self, query: str, items: list[MemoryItem], top_k: int
    ) -> list[MemoryItem]:
        if not items or top_k <= 0:
            return []
        if top_k >= len(items):
            return list(items)

        memories = "\n".join(f"{i + 1}. {item.text}" for i, item in enumerate(items))
        prompt = RANK_PROMPT.format(top_k=top_k, query=query, memories=memories)

        try:
            resp = await self.provider.chat(
                [ChatMessage(role="user", content=prompt)], tools=None, model=self.model
            )
        except Exception as e:
            logger.warning("Memory ranking failed, using recency order: %s", e)
            return items[:top_k]

        indices = self._parse_indices(resp.content, len(items))
        if not indices:
            logger.debug("Unparseable ranking reply: %r", resp.content[:200])
            return items[:top_k]
        return [items[i] for i in indices[:top_k]]

    @staticmethod
    def _parse_indices(reply: str, count: int) -> list[int]:
        """1-based numbers from the reply → unique 0-based indices in range."""
        match = _ARRAY_RE.search(reply or "")
        if not match:
            return []
        try:
            numbers = json.loads(match.group(0))
        except json.JSONDecodeError:
            return []

        seen: list[int] = []
        for n in numbers:
            if isinstance(n, int) and 1 <= n <= count and (n - 1) not in seen:
                seen.append(n - 1)
        return seen
