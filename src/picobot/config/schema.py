"""
Configuration schema using Pydantic v2.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AgentDefaults(BaseModel):
    """Defaults for the agent loop."""

    workspace: Path = Field(default=Path("~/.picobot/workspace"), validate_default=True)
    model: str = ""  # empty = provider default
    max_tokens: int = 8192
    temperature: float = 0.7
    max_tool_iterations: int = 100
    heartbeat_interval_s: int = 60
    request_timeout_s: int = 60
    memory_top_k: int = 5
    recent_days: int = 3

    @field_validator("workspace")
    @classmethod
    def expand_workspace(cls, v: str) -> Path:
        """Expand ~ in workspace path."""
        return Path(v).expanduser().resolve()

    @field_validator("max_tool_iterations")
    @classmethod
    def positive_iterations(cls, v: int) -> int:
        return v if v > 0 else 100


class AgentsConfig(BaseModel):
    defaults: AgentDefaults = Field(default_factory=AgentDefaults)


class HubConfig(BaseModel):
    """Queue sizes for the message hub."""

    inbound_size: int = 200
    outbound_size: int = 100
    subscriber_size: int = 100


class TelegramConfig(BaseModel):
    """Telegram channel configuration."""

    enabled: bool = False
    token: str = ""
    allow_from: list[str] = Field(default_factory=list)


class ChannelConfigs(BaseModel):
    """All channel configurations."""

    telegram: TelegramConfig = Field(default_factory=TelegramConfig)


class ProviderConfig(BaseModel):
    """OpenAI-compatible endpoint credentials."""

    api_key: str = ""
    api_base: str = "https://openrouter.ai/api/v1"


class ProvidersConfig(BaseModel):
    openai: ProviderConfig | None = None


class ToolsConfig(BaseModel):
    exec_timeout_s: int = 60


class Config(BaseSettings):
    """
    Root configuration.

    Loads from ~/.picobot/config.json and environment variables
    with PICOBOT_ prefix.
    """

    agents: AgentsConfig = Field(default_factory=AgentsConfig)
    hub: HubConfig = Field(default_factory=HubConfig)
    channels: ChannelConfigs = Field(default_factory=ChannelConfigs)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)

    model_config = SettingsConfigDict(
        env_prefix="PICOBOT_",
        env_nested_delimiter="__",
    )

    @property
    def workspace(self) -> Path:
        return self.agents.defaults.workspace
