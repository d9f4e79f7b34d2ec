"""Configuration management."""

from picobot.config.schema import Config
from picobot.config.loader import load_config, save_config
from picobot.config.onboard import initialize_workspace, onboard

__all__ = ["Config", "load_config", "save_config", "initialize_workspace", "onboard"]
