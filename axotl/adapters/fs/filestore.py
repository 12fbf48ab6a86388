import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class FileSystemStore:
    """Uploads live under one base directory; stored paths are relative to it."""

    def __init__(self, base_path: str):
        self.base_path = Path(base_path).resolve()
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, path: str) -> Path:
        target = (self.base_path / path).resolve()
        if not target.is_relative_to(self.base_path):
            raise ValueError(f"Path traversal attempt detected: {path}")
        return target

    def save(self, name: str, data: bytes) -> str:
        target = self._safe_path(name)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)
        logger.debug("Stored %d bytes at %s", len(data), target)
        return target.relative_to(self.base_path).as_posix()

    def get(self, path: str) -> bytes:
        target = self._safe_path(path)
        if not target.exists():
            raise FileNotFoundError(f"File not found: {path}")
        with open(target, "rb") as f:
            return f.read()

    def exists(self, path: str) -> bool:
        try:
            return self._safe_path(path).is_file()
        except ValueError:
            return False

    def delete(self, path: str) -> None:
        target = self._safe_path(path)
        if target.exists():
            os.remove(target)
