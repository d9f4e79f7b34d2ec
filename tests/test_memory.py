"""Tests for key-value storage and the memory store."""

from datetime import datetime
from pathlib import Path

import pytest

from picobot.memory import FileStore, InMemoryStore, MemoryItem, MemoryStore

from conftest import FIXED_NOW


class TestFileStore:

    def test_read_missing_is_empty(self, tmp_path):
        assert FileStore(tmp_path).read("nothing/here.md") == ""

    def test_write_creates_parents_and_overwrites(self, tmp_path):
        fs = FileStore(tmp_path)
        fs.write("a/b/c.txt", "one")
        fs.write("a/b/c.txt", "two")
        assert (tmp_path / "a" / "b" / "c.txt").read_text() == "two"
        assert fs.keys() == ["a/b/c.txt"]

    def test_append(self, tmp_path):
        fs = FileStore(tmp_path)
        fs.append("log.txt", "x\n")
        fs.append("log.txt", "y\n")
        assert fs.read("log.txt") == "x\ny\n"

    def test_keys_filters_prefix(self, tmp_path):
        fs = FileStore(tmp_path)
        fs.write("memory/2026-03-14.md", "a")
        fs.write("memory/MEMORY.md", "b")
        fs.write("sessions/x.json", "{}")
        assert fs.keys("memory/") == ["memory/2026-03-14.md", "memory/MEMORY.md"]

    def test_delete_missing_is_noop(self, tmp_path):
        fs = FileStore(tmp_path)
        fs.delete("gone.txt")
        assert not fs.exists("gone.txt")

    def test_key_cannot_escape_root(self, tmp_path):
        fs = FileStore(tmp_path / "root")
        with pytest.raises(ValueError):
            fs.write("../outside.txt", "nope")


class TestInMemoryStore:

    def test_basic_operations(self):
        s = InMemoryStore({"k": "v"})
        s.append("k", "w")
        s.write("other", "x")
        assert s.read("k") == "vw"
        assert s.keys() == ["k", "other"]
        s.delete("k")
        assert not s.exists("k")
        assert s.read("k") == ""


class TestMemoryStore:

    def test_append_today_is_timestamped(self, memory, store):
        memory.append_today("buy milk")
        assert store.read("memory/2026-03-14.md") == "[09:30:00] buy milk\n"
        assert memory.read_today() == "[09:30:00] buy milk\n"

    def test_append_today_ignores_blank(self, memory, store):
        memory.append_today("   ")
        assert store.keys() == []

    def test_appends_accumulate(self, memory):
        memory.append_today("one")
        memory.append_today("two")
        assert [i.text for i in memory.recent(1)] == ["one", "two"]

    def test_long_term_overwrite(self, memory):
        memory.write_long_term("first")
        memory.write_long_term("second")
        assert memory.read_long_term() == "second"

    def test_recent_is_newest_day_first(self, store):
        store.write("memory/2026-03-12.md", "[08:00:00] older\n")
        store.write("memory/2026-03-13.md", "[08:00:00] yesterday\n")
        store.write("memory/2026-03-14.md", "# heading\n[08:00:00] today\n")
        memory = MemoryStore(store, clock=lambda: FIXED_NOW)

        assert [i.text for i in memory.recent(2)] == ["today", "yesterday"]
        assert all(i.kind == "today" for i in memory.recent(3))
        assert memory.recent(0) == []

    def test_items_combines_tiers(self, memory):
        memory.append_today("note")
        memory.write_long_term("# Long-term Memory\n\nlikes tea\n")
        assert memory.items() == [
            MemoryItem(kind="today", text="note"),
            MemoryItem(kind="long", text="likes tea"),
        ]

    def test_list_daily_keys_newest_first(self, store):
        store.write("memory/2026-03-01.md", "a")
        store.write("memory/2026-03-10.md", "b")
        store.write("memory/MEMORY.md", "c")
        memory = MemoryStore(store, clock=lambda: FIXED_NOW)
        assert memory.list_daily_keys() == ["memory/2026-03-10.md", "memory/2026-03-01.md"]

    def test_get_recent_notes_sections(self, store):
        store.write("memory/2026-03-13.md", "[10:00:00] call mom\n")
        memory = MemoryStore(store, clock=lambda: datetime(2026, 3, 14, 12, 0, 0))
        notes = memory.get_recent_notes(2)
        assert notes == "## 2026-03-13\n\n[10:00:00] call mom"

    def test_memory_context(self, memory):
        assert memory.get_memory_context() == ""

        memory.write_long_term("likes tea")
        memory.append_today("dentist")
        ctx = memory.get_memory_context()

        assert ctx.startswith("## Long-term Memory\n\nlikes tea")
        assert "## Today's Notes (2026-03-14)" in ctx
        assert "dentist" in ctx
        assert "\n\n---\n\n" in ctx


class TestFileStoreFailures:

    def test_failed_replace_leaves_no_temp_file(self, tmp_path, monkeypatch):
        fs = FileStore(tmp_path)
        fs.write("sessions/a.json", "old")

        def broken_replace(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", broken_replace)
        with pytest.raises(OSError):
            fs.write("sessions/a.json", "new")
        monkeypatch.undo()

        assert fs.read("sessions/a.json") == "old"
        assert list(tmp_path.rglob("*.tmp")) == []
