"""Tests for channel plumbing."""

import asyncio

import pytest

from picobot.bus import MessageHub, OutboundMessage
from picobot.channels import BaseChannel, ChannelManager
from picobot.channels.telegram import chunk_message


class FakeChannel(BaseChannel):
    """Records sent messages; can be told to fail on start."""

    def __init__(self, name, hub, config, fail_starts=0):
        super().__init__(name, hub, config)
        self.sent: list[OutboundMessage] = []
        self.fail_starts = fail_starts
        self.stopped = False

    async def start(self) -> None:
        if self.fail_starts:
            self.fail_starts -= 1
            raise ConnectionError("network down")
        self._running = True

    async def stop(self) -> None:
        self._running = False
        self.stopped = True

    async def send(self, msg: OutboundMessage) -> None:
        if msg.content == "explode":
            raise RuntimeError("send failed")
        self.sent.append(msg)


async def _wait_for(predicate, timeout=1.0):
    async def poll():
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(poll(), timeout)


class TestBaseChannel:

    def test_subscribes_on_construction(self):
        hub = MessageHub()
        FakeChannel("fake", hub, {})
        assert hub.channels == ["fake"]

    @pytest.mark.asyncio
    async def test_allow_list(self):
        hub = MessageHub()
        channel = FakeChannel("fake", hub, {"allow_from": [123]})

        assert not await channel._publish_inbound("999", "c", "hi")
        assert await channel._publish_inbound("123", "c", "hi", username="ada")

        msg = await hub.consume_inbound()
        assert (msg.channel, msg.sender_id, msg.chat_id) == ("fake", "123", "c")
        assert msg.metadata == {"username": "ada"}
        assert hub.inbound_depth == 0

    def test_empty_allow_list_allows_everyone(self):
        channel = FakeChannel("fake", MessageHub(), {})
        assert channel.is_allowed("anyone")


class TestChannelManager:

    def test_init_channel_skips_disabled(self):
        hub = MessageHub()
        manager = ChannelManager(hub)
        assert manager.init_channel("fake", FakeChannel, {"enabled": False}) is None
        assert hub.channels == []

    @pytest.mark.asyncio
    async def test_start_all_routes_replies(self):
        hub = MessageHub()
        manager = ChannelManager(hub, retry_base_s=0)
        channel = manager.init_channel("fake", FakeChannel, {"enabled": True})

        await manager.start_all()
        try:
            assert hub.routing
            assert channel.running
            hub.publish_outbound(OutboundMessage(channel="fake", chat_id="1", content="explode"))
            hub.publish_outbound(OutboundMessage(channel="fake", chat_id="1", content="hello"))
            await _wait_for(lambda: channel.sent)
            # a failing send does not stop the drain
            assert [m.content for m in channel.sent] == ["hello"]
        finally:
            await manager.stop_all()

        assert channel.stopped
        assert not hub.routing

    @pytest.mark.asyncio
    async def test_start_retries(self):
        hub = MessageHub()
        manager = ChannelManager(hub, retry_base_s=0)
        channel = FakeChannel("fake", hub, {"enabled": True}, fail_starts=2)
        manager.add_channel(channel)

        await manager.start_all()
        try:
            assert channel.running
            assert manager.get_status()["fake"] == {
                "running": True,
                "type": "FakeChannel",
                "pending": 0,
            }
        finally:
            await manager.stop_all()

    @pytest.mark.asyncio
    async def test_permanent_start_failure_still_routes(self):
        hub = MessageHub()
        manager = ChannelManager(hub, retry_base_s=0)
        channel = FakeChannel("fake", hub, {"enabled": True}, fail_starts=5)
        manager.add_channel(channel)

        await manager.start_all()
        try:
            assert not channel.running
            assert hub.routing
        finally:
            await manager.stop_all()


class TestChunkMessage:

    def test_short_message_untouched(self):
        assert chunk_message("hello") == ["hello"]

    def test_splits_on_paragraphs(self):
        text = "a" * 30 + "\n\n" + "b" * 30
        assert chunk_message(text, limit=40) == ["a" * 30, "b" * 30]

    def test_hard_split_without_spaces(self):
        chunks = chunk_message("x" * 95, limit=40)
        assert chunks == ["x" * 40, "x" * 40, "x" * 15]
        assert all(len(c) <= 40 for c in chunks)
