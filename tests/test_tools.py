"""Tests for the tool registry and built-in tools."""

import httpx
import pytest

from picobot.bus import MessageHub
from picobot.cron import CronService
from picobot.tools import (
    CronTool,
    ExecTool,
    FilesystemTool,
    MessageTool,
    ToolError,
    ToolRegistry,
    WebTool,
    WriteMemoryTool,
)
from picobot.tools.web import html_to_text

from conftest import EchoTool


class TestToolRegistry:

    @pytest.mark.asyncio
    async def test_execute_dispatches_by_name(self):
        reg = ToolRegistry()
        reg.register(EchoTool())
        assert await reg.execute("echo", {"text": "hi"}) == "echo: hi"

    @pytest.mark.asyncio
    async def test_unknown_tool_raises(self):
        with pytest.raises(ToolError, match="not found"):
            await ToolRegistry().execute("missing", {})

    @pytest.mark.asyncio
    async def test_none_arguments_become_empty_dict(self):
        reg = ToolRegistry()
        echo = EchoTool()
        reg.register(echo)
        await reg.execute("echo", None)
        assert echo.received == [{}]

    def test_definitions(self):
        reg = ToolRegistry()
        reg.register(EchoTool())
        [schema] = reg.definitions()
        assert schema["type"] == "function"
        assert schema["function"]["name"] == "echo"
        assert schema["function"]["parameters"]["properties"]["text"] == {"type": "string"}

    def test_register_unregister(self):
        reg = ToolRegistry()
        reg.register(EchoTool())
        assert "echo" in reg and len(reg) == 1
        reg.unregister("echo")
        assert reg.names == []

    def test_set_context_reaches_contextual_tools(self):
        reg = ToolRegistry()
        tool = MessageTool(MessageHub())
        reg.register(tool)
        reg.register(EchoTool())
        reg.set_context("telegram", "5")
        assert (tool.channel, tool.chat_id) == ("telegram", "5")


class TestMessageTool:

    @pytest.mark.asyncio
    async def test_sends_to_current_chat(self):
        hub = MessageHub()
        tool = MessageTool(hub)
        tool.set_context("telegram", "42")

        result = await tool.execute({"content": "hello"})

        assert result == "Message sent to telegram:42"
        assert hub.outbound_depth == 1

    @pytest.mark.asyncio
    async def test_explicit_target(self):
        hub = MessageHub()
        tool = MessageTool(hub)
        tool.set_context("cron", "job:x")
        assert await tool.execute({"content": "hi", "channel": "telegram", "chat_id": 7}) == (
            "Message sent to telegram:7"
        )

    @pytest.mark.asyncio
    async def test_full_outbound_is_an_error(self):
        hub = MessageHub(outbound_size=1)
        tool = MessageTool(hub)
        tool.set_context("telegram", "1")
        await tool.execute({"content": "a"})
        with pytest.raises(ToolError, match="queue full"):
            await tool.execute({"content": "b"})

    @pytest.mark.asyncio
    async def test_missing_content(self):
        with pytest.raises(ToolError):
            await MessageTool(MessageHub()).execute({})


class TestWriteMemoryTool:

    @pytest.mark.asyncio
    async def test_today(self, memory):
        await WriteMemoryTool(memory).execute({"target": "today", "content": "gym at 6"})
        assert "gym at 6" in memory.read_today()

    @pytest.mark.asyncio
    async def test_long_appends_by_default(self, memory):
        memory.write_long_term("# Long-term Memory\n")
        tool = WriteMemoryTool(memory)
        await tool.execute({"target": "long", "content": "likes tea"})
        assert memory.read_long_term() == "# Long-term Memory\nlikes tea\n"

    @pytest.mark.asyncio
    async def test_long_replace(self, memory):
        memory.write_long_term("old")
        await WriteMemoryTool(memory).execute(
            {"target": "long", "content": "new", "append": False}
        )
        assert memory.read_long_term() == "new"

    @pytest.mark.asyncio
    async def test_bad_target(self, memory):
        with pytest.raises(ToolError):
            await WriteMemoryTool(memory).execute({"target": "forever", "content": "x"})


class TestFilesystemTool:

    @pytest.mark.asyncio
    async def test_write_read_list(self, tmp_path):
        tool = FilesystemTool(tmp_path)
        await tool.execute({"action": "write", "path": "notes/a.txt", "content": "hello"})
        assert await tool.execute({"action": "read", "path": "notes/a.txt"}) == "hello"
        assert await tool.execute({"action": "list", "path": "."}) == "notes/"

    @pytest.mark.asyncio
    async def test_path_escape_rejected(self, tmp_path):
        tool = FilesystemTool(tmp_path / "ws")
        with pytest.raises(ToolError, match="escapes"):
            await tool.execute({"action": "read", "path": "../../etc/passwd"})

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(ToolError, match="no such file"):
            await FilesystemTool(tmp_path).execute({"action": "read", "path": "nope.txt"})


class TestExecTool:

    @pytest.mark.asyncio
    async def test_runs_in_workspace(self, tmp_path):
        (tmp_path / "marker.txt").write_text("x")
        out = await ExecTool(tmp_path).execute({"command": "ls"})
        assert "marker.txt" in out

    @pytest.mark.asyncio
    async def test_nonzero_exit_reported(self, tmp_path):
        out = await ExecTool(tmp_path).execute({"command": "exit 3"})
        assert out.startswith("(exit 3)")

    @pytest.mark.asyncio
    async def test_blocked_command(self, tmp_path):
        with pytest.raises(ToolError, match="blocked"):
            await ExecTool(tmp_path).execute({"command": "rm -rf /"})

    @pytest.mark.asyncio
    async def test_timeout(self, tmp_path):
        with pytest.raises(ToolError, match="timed out"):
            await ExecTool(tmp_path, timeout_s=0.1).execute({"command": "sleep 5"})


class TestWebTool:

    @pytest.mark.asyncio
    async def test_fetches_and_strips_html(self):
        def handler(request):
            return httpx.Response(
                200,
                headers={"content-type": "text/html"},
                text="<html><script>x()</script><p>Hello <b>world</b></p></html>",
            )

        tool = WebTool(transport=httpx.MockTransport(handler))
        assert await tool.execute({"url": "https://example.com"}) == "Hello world"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        tool = WebTool(transport=httpx.MockTransport(lambda r: httpx.Response(404)))
        with pytest.raises(ToolError, match="HTTP 404"):
            await tool.execute({"url": "https://example.com/missing"})

    @pytest.mark.asyncio
    async def test_rejects_non_http(self):
        with pytest.raises(ToolError):
            await WebTool().execute({"url": "file:///etc/passwd"})

    def test_html_to_text(self):
        assert html_to_text("<style>a{}</style><h1>Title</h1>\n\n\n<p>Body</p>") == "Title\n\nBody"


class TestCronTool:

    @pytest.mark.asyncio
    async def test_add_uses_current_chat(self):
        cron = CronService(MessageHub())
        tool = CronTool(cron)
        tool.set_context("telegram", "42")

        result = await tool.execute({
            "name": "stretch",
            "message": "stand up",
            "schedule_type": "every",
            "schedule_value": 3600,
        })

        assert "scheduled" in result
        job = cron.jobs["stretch"]
        assert (job.channel, job.chat_id, job.deliver) == ("telegram", "42", True)
        assert job.schedule_value == "3600"

    @pytest.mark.asyncio
    async def test_list_and_remove(self):
        cron = CronService(MessageHub())
        tool = CronTool(cron)
        assert await tool.execute({"action": "list"}) == "No scheduled tasks"

        cron.add_job("daily", "standup", "cron", "0 9 * * *")
        assert "daily: cron 0 9 * * *" in await tool.execute({"action": "list"})

        assert await tool.execute({"action": "remove", "name": "daily"}) == "Task 'daily' removed"
        with pytest.raises(ToolError):
            await tool.execute({"action": "remove", "name": "daily"})

    @pytest.mark.asyncio
    async def test_invalid_schedule(self):
        tool = CronTool(CronService(MessageHub()))
        with pytest.raises(ToolError, match="invalid"):
            await tool.execute({
                "name": "bad",
                "message": "x",
                "schedule_type": "cron",
                "schedule_value": "not a cron",
            })
