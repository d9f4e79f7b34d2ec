"""Periodic heartbeat trigger."""

from picobot.heartbeat.service import HEARTBEAT_CHANNEL, HeartbeatService

__all__ = ["HEARTBEAT_CHANNEL", "HeartbeatService"]
