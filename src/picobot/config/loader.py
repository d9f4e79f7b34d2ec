"""
Reading and writing ~/.picobot/config.json.

Values from the file are passed to `Config` as init arguments, so they win
over PICOBOT_* environment variables; a missing file means env + defaults.
"""

import json
import logging
from pathlib import Path

from picobot.config.schema import Config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.picobot/config.json").expanduser()


def load_config(path: Path | None = None) -> Config:
    """
    Load and validate the config file.

    Raises:
        OSError: if the file exists but cannot be read
        ValueError: if it is not valid JSON, or (as pydantic.ValidationError)
            does not match the schema
    """
    path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        logger.debug("No config at %s, using defaults", path)
        return Config()

    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return Config(**data)


def save_config(config: Config, path: Path | None = None) -> None:
    """Write the config as indented JSON, creating the directory if needed."""
    path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.model_dump(mode="json"), indent=2), encoding="utf-8")
