"""
Key-value text storage behind sessions and memory.

Keys are slash-separated relative paths ("memory/MEMORY.md").
FileStore maps them onto a workspace directory; InMemoryStore keeps
them in a dict for tests and one-off runs.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class KeyValueStore(ABC):
    """Minimal text store: read, overwrite, append, delete, list."""

    @abstractmethod
    def read(self, key: str) -> str:
        """Return the value, or an empty string if the key does not exist."""
        ...

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Replace the value."""
        ...

    @abstractmethod
    def append(self, key: str, value: str) -> None:
        """Append to the value, creating it if needed."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """Sorted keys starting with prefix."""
        ...


class FileStore(KeyValueStore):
    """Files under a root directory."""

    def __init__(self, root: Path):
        self.root = Path(root).expanduser().resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise ValueError(f"key escapes store root: {key}")
        return path

    def read(self, key: str) -> str:
        path = self._path(key)
        if not path.exists():
            return ""
        return path.read_text(encoding="utf-8")

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        # atomic replace
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(path)
        finally:
            tmp.unlink(missing_ok=True)

    def append(self, key: str, value: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(value)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def keys(self, prefix: str = "") -> list[str]:
        found = []
        for path in self.root.rglob("*"):
            if not path.is_file() or path.name.endswith(".tmp"):
                continue
            key = path.relative_to(self.root).as_posix()
            if key.startswith(prefix):
                found.append(key)
        return sorted(found)


class InMemoryStore(KeyValueStore):
    """Dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str:
        return self._data.get(key, "")

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def append(self, key: str, value: str) -> None:
        self._data[key] = self._data.get(key, "") + value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def exists(self, key: str) -> bool:
        return key in self._data

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))
