"""
Tools: create_skill, list_skills, read_skill, delete_skill

Skills are reusable procedures the agent writes for itself, one
skills/<name>/SKILL.md per skill, confined to the workspace.
"""

import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from picobot.tools.base import Tool, ToolError

SKILLS_DIR = "skills"
SKILL_FILE = "SKILL.md"

_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")
_FRONTMATTER_RE = re.compile(r"\A---\n(.*?)\n---\n?", re.DOTALL)


@dataclass
class SkillInfo:
    name: str
    description: str


class SkillManager:
    """Create, list, read and delete skills under <workspace>/skills."""

    def __init__(self, workspace: Path):
        self.root = (Path(workspace).expanduser() / SKILLS_DIR).resolve()

    def _skill_dir(self, name: str) -> Path:
        if not _NAME_RE.match(name or ""):
            raise ToolError(
                f"invalid skill name '{name}': use letters, digits, '-' or '_'"
            )
        path = (self.root / name).resolve()
        if not path.is_relative_to(self.root):
            raise ToolError(f"skill path escapes workspace: {name}")
        return path

    @staticmethod
    def _description(text: str) -> str:
        match = _FRONTMATTER_RE.match(text)
        if not match:
            return ""
        for line in match.group(1).splitlines():
            key, _, value = line.partition(":")
            if key.strip() == "description":
                return value.strip()
        return ""

    def create(self, name: str, description: str, content: str) -> Path:
        """Write (or overwrite) skills/<name>/SKILL.md with a frontmatter header."""
        skill_dir = self._skill_dir(name)
        skill_dir.mkdir(parents=True, exist_ok=True)
        path = skill_dir / SKILL_FILE
        description = " ".join(description.split())
        header = f"---\nname: {name}\ndescription: {description}\n---\n\n"
        path.write_text(header + content.strip() + "\n", encoding="utf-8")
        return path

    def list_skills(self) -> list[SkillInfo]:
        if not self.root.is_dir():
            return []
        skills = []
        for path in sorted(self.root.iterdir()):
            skill_file = path / SKILL_FILE
            if not skill_file.is_file():
                continue
            text = skill_file.read_text(encoding="utf-8", errors="replace")
            skills.append(SkillInfo(name=path.name, description=self._description(text)))
        return skills

    def read(self, name: str) -> str:
        path = self._skill_dir(name) / SKILL_FILE
        if not path.is_file():
            raise ToolError(f"no skill named '{name}'")
        return path.read_text(encoding="utf-8", errors="replace")

    def delete(self, name: str) -> None:
        skill_dir = self._skill_dir(name)
        if not skill_dir.is_dir():
            raise ToolError(f"no skill named '{name}'")
        shutil.rmtree(skill_dir)


_NAME_PARAM = {"type": "string", "description": "Skill name (used as the folder name)"}


class CreateSkillTool(Tool):
    name = "create_skill"
    description = "Create or update a reusable skill in the skills/ directory."
    parameters = {
        "type": "object",
        "properties": {
            "name": _NAME_PARAM,
            "description": {"type": "string", "description": "Brief description"},
            "content": {"type": "string", "description": "The skill's markdown content"},
        },
        "required": ["name", "description", "content"],
    }

    def __init__(self, skills: SkillManager):
        self.skills = skills

    async def execute(self, args: dict[str, Any]) -> str:
        name = str(args.get("name") or "")
        content = str(args.get("content") or "")
        if not content.strip():
            raise ToolError("content is required")
        self.skills.create(name, str(args.get("description") or ""), content)
        return f"Skill '{name}' saved"


class ListSkillsTool(Tool):
    name = "list_skills"
    description = "List all available skills with their descriptions."

    def __init__(self, skills: SkillManager):
        self.skills = skills

    async def execute(self, args: dict[str, Any]) -> str:
        skills = self.skills.list_skills()
        if not skills:
            return "No skills yet"
        return "\n".join(
            f"- {s.name}: {s.description}" if s.description else f"- {s.name}"
            for s in skills
        )


class ReadSkillTool(Tool):
    name = "read_skill"
    description = "Read a skill's content."
    parameters = {
        "type": "object",
        "properties": {"name": _NAME_PARAM},
        "required": ["name"],
    }

    def __init__(self, skills: SkillManager):
        self.skills = skills

    async def execute(self, args: dict[str, Any]) -> str:
        return self.skills.read(str(args.get("name") or ""))


class DeleteSkillTool(Tool):
    name = "delete_skill"
    description = "Delete a skill from the skills/ directory."
    parameters = {
        "type": "object",
        "properties": {"name": _NAME_PARAM},
        "required": ["name"],
    }

    def __init__(self, skills: SkillManager):
        self.skills = skills

    async def execute(self, args: dict[str, Any]) -> str:
        name = str(args.get("name") or "")
        self.skills.delete(name)
        return f"Skill '{name}' deleted"
