"""Tests for the cron service."""

from datetime import datetime, timedelta

import pytest

from picobot.bus import MessageHub
from picobot.cron import CRON_CHANNEL, CronJob, CronService


class TestComputeNextRun:

    def test_every(self):
        now = datetime(2026, 3, 14, 9, 0, 0)
        job = CronJob(name="j", message="m", schedule_type="every", schedule_value="90")
        assert CronService.compute_next_run(job, now) == now + timedelta(seconds=90)

    def test_at_in_past_is_none(self):
        job = CronJob(name="j", message="m", schedule_type="at", schedule_value="2020-01-01T00:00:00")
        assert CronService.compute_next_run(job, datetime(2026, 1, 1)) is None

    def test_cron_expression(self):
        job = CronJob(name="j", message="m", schedule_type="cron", schedule_value="0 9 * * *")
        assert CronService.compute_next_run(job, datetime(2026, 3, 14, 9, 30)) == datetime(
            2026, 3, 15, 9, 0
        )

    @pytest.mark.parametrize(
        "schedule_type,value",
        [("every", "soon"), ("every", "0"), ("cron", "every day"), ("at", "tomorrow")],
    )
    def test_invalid(self, schedule_type, value):
        job = CronJob(name="j", message="m", schedule_type=schedule_type, schedule_value=value)
        assert CronService.compute_next_run(job) is None


class TestCronService:

    def test_add_invalid_raises(self):
        with pytest.raises(ValueError):
            CronService(MessageHub()).add_job("x", "m", "every", "-5")

    def test_build_message_with_delivery(self):
        cron = CronService(MessageHub())
        job = cron.add_job("water", "water the plants", "every", "60", True, "telegram", "42")
        msg = cron.build_message(job)

        assert msg.channel == CRON_CHANNEL
        assert msg.chat_id == "job:water"
        assert msg.content.startswith("[Scheduled task fired] water the plants")
        assert msg.metadata == {"job": "water", "reply_channel": "telegram", "reply_chat_id": "42"}

    def test_build_message_without_delivery(self):
        cron = CronService(MessageHub())
        job = cron.add_job("quiet", "tidy up", "every", "60")
        assert cron.build_message(job).metadata == {"job": "quiet"}

    @pytest.mark.asyncio
    async def test_tick_fires_due_jobs(self):
        hub = MessageHub()
        cron = CronService(hub)
        cron.add_job("every", "ping", "every", "60")
        later = datetime.now() + timedelta(seconds=120)

        assert await cron.tick(later) == ["every"]
        msg = await hub.consume_inbound()
        assert msg.chat_id == "job:every"
        assert cron.jobs["every"].next_run_at == later + timedelta(seconds=60)

    @pytest.mark.asyncio
    async def test_at_jobs_fire_once(self):
        hub = MessageHub()
        cron = CronService(hub)
        run_at = datetime.now() + timedelta(minutes=5)
        cron.add_job("once", "dentist", "at", run_at.isoformat())

        assert await cron.tick(run_at + timedelta(seconds=1)) == ["once"]
        assert await cron.tick(run_at + timedelta(hours=1)) == []
        assert not cron.jobs["once"].enabled
        assert hub.inbound_depth == 1

    @pytest.mark.asyncio
    async def test_not_due_yet(self):
        hub = MessageHub()
        cron = CronService(hub)
        cron.add_job("later", "x", "every", "3600")
        assert await cron.tick() == []
        assert hub.inbound_depth == 0

    @pytest.mark.asyncio
    async def test_start_stop(self):
        cron = CronService(MessageHub(), interval_s=3600)
        await cron.start()
        await cron.stop()
        assert cron._task is None
