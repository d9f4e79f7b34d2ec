"""
Tool: web

Fetches a URL and returns its text.
"""

import re
from typing import Any

import httpx

from picobot.tools.base import Tool, ToolError

MAX_CHARS = 20_000

_SCRIPT_RE = re.compile(r"<(script|style)[^>]*>.*?</\1>", re.DOTALL | re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\n\s*\n+")


def html_to_text(html: str) -> str:
    text = _SCRIPT_RE.sub("", html)
    text = _TAG_RE.sub("", text)
    return _SPACE_RE.sub("\n\n", text).strip()


class WebTool(Tool):
    name = "web"
    description = "Fetch a URL (http or https) and return its text content."
    parameters = {
        "type": "object",
        "properties": {
            "url": {"type": "string", "description": "The URL to fetch"},
        },
        "required": ["url"],
    }

    def __init__(self, timeout_s: float = 30, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout_s = timeout_s
        self._transport = transport

    async def execute(self, args: dict[str, Any]) -> str:
        url = str(args.get("url") or "").strip()
        if not url.startswith(("http://", "https://")):
            raise ToolError("url must start with http:// or https://")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                resp = await client.get(url, headers={"User-Agent": "picobot/0.1"})
        except httpx.HTTPError as e:
            raise ToolError(f"fetch failed: {e}") from e

        if resp.status_code >= 400:
            raise ToolError(f"HTTP {resp.status_code} from {url}")

        text = resp.text
        if "html" in resp.headers.get("content-type", ""):
            text = html_to_text(text)
        if len(text) > MAX_CHARS:
            text = text[:MAX_CHARS] + "\n... (truncated)"
        return text
