"""
First-run setup: default config file and workspace bootstrap files.
"""

from pathlib import Path

from picobot.config.loader import DEFAULT_CONFIG_PATH, load_config, save_config
from picobot.config.schema import (
    AgentDefaults,
    AgentsConfig,
    Config,
    ProviderConfig,
    ProvidersConfig,
)


BOOTSTRAP_FILES: dict[str, str] = {
    "SOUL.md": """# Soul

I am picobot, a personal AI assistant.

## Personality

- Helpful and friendly
- Concise and to the point
- Curious and eager to learn

## Values

- Accuracy over speed
- User privacy and safety
- Transparency in actions
""",
    "AGENTS.md": """# Agent Instructions

You are a helpful AI assistant. Be concise, accurate, and friendly.

## Guidelines

- Explain what you're doing before taking actions
- Ask for clarification when the request is ambiguous
- Use tools to help accomplish tasks
- Remember important information using the write_memory tool

## Memory

- Use write_memory with target "today" for daily notes
- Use write_memory with target "long" for long-term information
- Do NOT just say you'll remember something: actually call write_memory

## Skills

- Skills are reusable procedures stored in skills/<name>/SKILL.md
- Run list_skills before creating one, to avoid duplicates
- Create or update a skill with create_skill

## Safety

- Never execute dangerous commands (rm -rf, mkfs, dd, shutdown)
- Ask for confirmation before destructive file operations
- Do not expose API keys or credentials in responses
""",
    "USER.md": """# User Profile

Information about the user to help personalize interactions.

- **Name**: (your name)
- **Timezone**: (your timezone, e.g., UTC+8)
- **Language**: (preferred language)
""",
    "TOOLS.md": """# Available Tools

- `filesystem`: read, write, and list files in the workspace
- `exec`: run a shell command in the workspace (with timeout)
- `web`: fetch the text of a URL
- `message`: send a message to the current or another chat
- `write_memory`: persist notes ("today") or long-term facts ("long")
- `cron`: add, list, or remove scheduled tasks
- `create_skill`: save a reusable procedure (name, description, content)
- `list_skills`: list the skills in skills/
- `read_skill`: read one skill by name
- `delete_skill`: delete one skill by name
""",
    "HEARTBEAT.md": """# Heartbeat

<!-- This file is checked periodically. Add tasks here that should run on a schedule. -->

## Periodic Tasks

<!-- Add tasks below. The agent will process them on each heartbeat check. -->
""",
    "memory/MEMORY.md": """# Long-term Memory
""",
}


def default_config() -> Config:
    """Config written by `picobot onboard`."""
    return Config(
        agents=AgentsConfig(defaults=AgentDefaults()),
        providers=ProvidersConfig(
            openai=ProviderConfig(api_key="sk-or-v1-REPLACE_ME"),
        ),
    )


def initialize_workspace(base_path: Path) -> list[Path]:
    """
    Create the workspace, its skills/ directory and any missing bootstrap files.

    Existing files are never overwritten.

    Returns:
        Paths of the files that were created.
    """
    base_path = Path(base_path).expanduser()
    base_path.mkdir(parents=True, exist_ok=True)

    created = []
    for name, content in BOOTSTRAP_FILES.items():
        path = base_path / name
        if path.exists():
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        created.append(path)

    (base_path / "skills").mkdir(exist_ok=True)
    return created


def onboard(config_path: Path | None = None) -> tuple[Path, Path]:
    """
    Write the default config (if absent) and initialize its workspace.

    Returns:
        (config path, workspace path)
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if path.exists():
        config = load_config(path)
    else:
        config = default_config()
        save_config(config, path)

    initialize_workspace(config.workspace)
    return path, config.workspace
