"""Chat channels."""

from picobot.channels.base import BaseChannel
from picobot.channels.manager import ChannelManager

__all__ = ["BaseChannel", "ChannelManager"]
