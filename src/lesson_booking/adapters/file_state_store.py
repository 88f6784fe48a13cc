"""File-backed key-value store for storefront snapshots."""

import logging
from dataclasses import dataclass
from pathlib import Path

from lesson_booking.services.persistence import StateStore

_logger = logging.getLogger(__name__)


@dataclass
class FileStateStore(StateStore):
    """Stores each key as a JSON file inside a directory."""

    directory: Path

    def _path(self, key: str) -> Path:
        safe_key = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in key)
        return self.directory / f"{safe_key}.json"

    def get(self, key: str) -> str | None:
        """Return the file contents for a key, if readable."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            _logger.warning("Failed to read state file %s: %s", path, exc)
            return None

    def set(self, key: str, value: str) -> None:
        """Write a value atomically via a temp file."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
