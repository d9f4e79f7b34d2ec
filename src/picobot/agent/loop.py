"""
Agent loop: the single consumer of the hub's inbound queue.

Each inbound message becomes one turn: context assembly, then a bounded
provider/tool iteration driven as an explicit state machine, then an
outbound reply.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from picobot.agent.context import ContextBuilder
from picobot.bus import InboundMessage, MessageHub, OutboundMessage
from picobot.cron.service import CronService
from picobot.memory.ranker import LLMRanker
from picobot.memory.sessions import Session, SessionStore
from picobot.memory.storage import FileStore
from picobot.memory.store import MemoryItem, MemoryStore
from picobot.providers.base import ChatMessage, LLMProvider, ProviderError, ToolCall
from picobot.tools import (
    CreateSkillTool,
    CronTool,
    DeleteSkillTool,
    ExecTool,
    FilesystemTool,
    ListSkillsTool,
    MessageTool,
    ReadSkillTool,
    SkillManager,
    ToolRegistry,
    WebTool,
    WriteMemoryTool,
)

logger = logging.getLogger(__name__)

REMEMBER_RE = re.compile(r"^remember(?:\s+to)?\s+(.+)$", re.IGNORECASE)

# Background triggers: processed statelessly, never persisted
SYSTEM_CHANNELS = frozenset({"heartbeat", "cron"})

REMEMBER_REPLY = "OK, I've remembered that."
ERROR_REPLY = "Sorry, I encountered an error while processing your request."
NO_RESPONSE_REPLY = "I've completed processing but have no response to give."


def is_system_channel(channel: str) -> bool:
    return channel in SYSTEM_CHANNELS


class TurnState(Enum):
    AWAITING_PROVIDER = "awaiting_provider"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    FAILED = "failed"


@dataclass
class Turn:
    """In-progress state of one turn. Owned by the loop for its duration."""

    messages: list[ChatMessage]
    tool_definitions: list[dict[str, Any]] = field(default_factory=list)
    state: TurnState = TurnState.AWAITING_PROVIDER
    iterations: int = 0
    pending: list[ToolCall] = field(default_factory=list)
    final_content: str = ""
    last_tool_result: str = ""
    tool_results: int = 0
    error: Exception | None = None

    @property
    def finished(self) -> bool:
        return self.state in (TurnState.DONE, TurnState.FAILED)

    def reply(self) -> str:
        """Final content, else the last tool result, else a placeholder."""
        if self.final_content:
            return self.final_content
        if self.last_tool_result:
            return self.last_tool_result
        return NO_RESPONSE_REPLY


def default_tools(
    hub: MessageHub,
    memory: MemoryStore,
    workspace: Path,
    cron: CronService | None = None,
    exec_timeout_s: float = 60,
) -> ToolRegistry:
    """Registry with the built-in tools."""
    registry = ToolRegistry()
    registry.register(MessageTool(hub))
    registry.register(FilesystemTool(workspace))
    registry.register(ExecTool(workspace, timeout_s=exec_timeout_s))
    registry.register(WebTool())
    registry.register(WriteMemoryTool(memory))
    skills = SkillManager(workspace)
    registry.register(CreateSkillTool(skills))
    registry.register(ListSkillsTool(skills))
    registry.register(ReadSkillTool(skills))
    registry.register(DeleteSkillTool(skills))
    if cron is not None:
        registry.register(CronTool(cron))
    return registry


class AgentLoop:
    """
    Core processing loop.

    Holds a provider, an explicit tool registry, sessions, memory, and the
    context builder. Messages are processed strictly one at a time.
    """

    def __init__(
        self,
        hub: MessageHub,
        provider: LLMProvider,
        tools: ToolRegistry,
        sessions: SessionStore,
        memory: MemoryStore,
        context: ContextBuilder,
        ranker: LLMRanker | None = None,
        model: str | None = None,
        max_iterations: int = 100,
        memory_top_k: int = 5,
        recent_days: int = 3,
        max_history: int | None = 50,
    ):
        self.hub = hub
        self.provider = provider
        self.tools = tools
        self.sessions = sessions
        self.memory = memory
        self.context = context
        self.ranker = ranker
        self.model = model or provider.default_model
        self.max_iterations = max(max_iterations, 1)
        self.memory_top_k = memory_top_k
        self.recent_days = recent_days
        self.max_history = max_history
        self._running = False

    @classmethod
    def from_workspace(
        cls,
        hub: MessageHub,
        provider: LLMProvider,
        workspace: Path,
        model: str | None = None,
        max_iterations: int = 100,
        cron: CronService | None = None,
        exec_timeout_s: float = 60,
        memory_top_k: int = 5,
        recent_days: int = 3,
    ) -> "AgentLoop":
        """
        Wire an agent loop onto a workspace directory.

        Raises:
            OSError: if the workspace cannot be created
        """
        workspace = Path(workspace).expanduser().resolve()
        store = FileStore(workspace)
        memory = MemoryStore(store)
        model = model or provider.default_model
        return cls(
            hub=hub,
            provider=provider,
            tools=default_tools(hub, memory, workspace, cron, exec_timeout_s),
            sessions=SessionStore(store),
            memory=memory,
            context=ContextBuilder(workspace),
            ranker=LLMRanker(provider, model),
            model=model,
            max_iterations=max_iterations,
            memory_top_k=memory_top_k,
            recent_days=recent_days,
        )

    @property
    def running(self) -> bool:
        return self._running

    # -- turn state machine ------------------------------------------------

    async def step(self, turn: Turn) -> None:
        """Advance a turn by one transition."""
        if turn.state is TurnState.AWAITING_PROVIDER:
            await self._await_provider(turn)
        elif turn.state is TurnState.EXECUTING_TOOLS:
            await self._execute_tools(turn)
        else:
            raise RuntimeError(f"turn already finished ({turn.state.value})")

    async def _await_provider(self, turn: Turn) -> None:
        if turn.iterations >= self.max_iterations:
            logger.warning("Reached max iterations (%d) without a final reply", self.max_iterations)
            turn.state = TurnState.DONE
            return

        turn.iterations += 1
        try:
            resp = await self.provider.chat(
                turn.messages, tools=turn.tool_definitions, model=self.model
            )
        except Exception as e:
            logger.error("Provider error: %s", e)
            turn.error = e
            turn.final_content = ERROR_REPLY
            turn.state = TurnState.FAILED
            return

        if not resp.has_tool_calls:
            turn.final_content = resp.content
            turn.state = TurnState.DONE
            return

        turn.messages.append(
            ChatMessage(role="assistant", content=resp.content, tool_calls=list(resp.tool_calls))
        )
        turn.pending = list(resp.tool_calls)
        turn.state = TurnState.EXECUTING_TOOLS

    async def _execute_tools(self, turn: Turn) -> None:
        # Sequential, in the order the provider returned them
        for call in turn.pending:
            try:
                result = str(await self.tools.execute(call.name, call.arguments))
            except Exception as e:
                logger.warning("Tool %s failed: %s", call.name, e)
                result = f"(tool error) {e}"
            turn.last_tool_result = result
            turn.tool_results += 1
            turn.messages.append(
                ChatMessage(role="tool", content=result, tool_call_id=call.id)
            )
        turn.pending = []
        turn.state = TurnState.AWAITING_PROVIDER

    async def run_turn(self, messages: list[ChatMessage]) -> Turn:
        """Drive a turn from its initial prompt until DONE or FAILED."""
        turn = Turn(messages=messages, tool_definitions=self.tools.definitions())
        while not turn.finished:
            await self.step(turn)
        return turn

    # -- message handling --------------------------------------------------

    async def _build_messages(
        self,
        history: list[dict[str, str]],
        content: str,
        channel: str,
        chat_id: str,
    ) -> list[ChatMessage]:
        try:
            memory_context = self.memory.get_memory_context()
            candidates = self.memory.recent(self.recent_days)
        except OSError as e:
            logger.error("Could not read memory: %s", e)
            memory_context, candidates = "", []

        memories: list[MemoryItem] = []
        if self.ranker is not None:
            memories = await self.ranker.rank(content, candidates, self.memory_top_k)

        return self.context.build_messages(
            history, content, channel, chat_id, memory_context, memories
        )

    def _reply_to(self, msg: InboundMessage, content: str) -> OutboundMessage:
        channel, chat_id = msg.reply_address()
        return OutboundMessage(channel=channel, chat_id=chat_id, content=content)

    def _remember(self, msg: InboundMessage, note: str) -> OutboundMessage:
        try:
            self.memory.append_today(note)
        except OSError as e:
            logger.error("Error appending to memory: %s", e)

        if not is_system_channel(msg.channel):
            session = self.sessions.get_or_create(msg.session_key)
            session.add_message("user", msg.content)
            session.add_message("assistant", REMEMBER_REPLY)
            self.sessions.save(session)

        return self._reply_to(msg, REMEMBER_REPLY)

    async def process_message(self, msg: InboundMessage) -> OutboundMessage | None:
        """
        Process one inbound message and return the reply.

        Returns None for commands the channel has already acknowledged.
        """
        logger.info("Processing message from %s:%s", msg.channel, msg.sender_id)
        system = is_system_channel(msg.channel)

        if msg.command == "reset":
            if not system:
                self.sessions.delete(msg.session_key)
            logger.info("Session %s reset", msg.session_key)
            return None

        match = REMEMBER_RE.match(msg.content.strip())
        if match:
            return self._remember(msg, match.group(1))

        self.tools.set_context(msg.channel, msg.chat_id)

        if system:
            session = Session(key=msg.session_key)
        else:
            session = self.sessions.get_or_create(msg.session_key)

        messages = await self._build_messages(
            session.get_history(self.max_history), msg.content, msg.channel, msg.chat_id
        )
        turn = await self.run_turn(messages)
        reply = turn.reply()
        logger.debug(
            "Turn finished: state=%s iterations=%d tool_results=%d",
            turn.state.value,
            turn.iterations,
            turn.tool_results,
        )

        # Failed turns keep the apology; a cancelled turn never gets here
        if not system:
            session.add_message("user", msg.content)
            session.add_message("assistant", reply)
            self.sessions.save(session)

        return self._reply_to(msg, reply)

    async def run(self) -> None:
        """
        Continuously consume and process messages from the inbound queue.

        Runs until cancelled. Cancelling aborts the in-flight turn before it
        writes anything to its session.
        """
        self._running = True
        logger.info("Agent loop started")
        try:
            while True:
                msg = await self.hub.consume_inbound()
                try:
                    out = await self.process_message(msg)
                except Exception:
                    logger.exception(
                        "Failed to process message from %s:%s", msg.channel, msg.chat_id
                    )
                    continue
                if out is not None:
                    self.hub.publish_outbound(out)
        finally:
            self._running = False
            logger.info("Agent loop stopped")

    async def process_direct(
        self,
        content: str,
        timeout: float = 60.0,
        channel: str = "cli",
        chat_id: str = "direct",
    ) -> str:
        """
        Run one stateless turn outside the hub (CLI one-shot mode).

        Raises:
            ProviderError: if the provider failed
            TimeoutError: if the turn took longer than `timeout` seconds
        """
        self.tools.set_context(channel, chat_id)
        messages = await self._build_messages([], content, channel, chat_id)
        turn = await asyncio.wait_for(self.run_turn(messages), timeout)
        if turn.state is TurnState.FAILED:
            raise ProviderError(str(turn.error)) from turn.error
        return turn.reply()
