"""Scheduled tasks."""

from picobot.cron.service import CRON_CHANNEL, CronService
from picobot.cron.types import CronJob

__all__ = ["CRON_CHANNEL", "CronJob", "CronService"]
