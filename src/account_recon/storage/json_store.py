"""Opaque key-value store persisted as a single JSON document."""

from pathlib import Path
from typing import Any, Optional
import json
import logging
import os

from ..utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    Key-value store backed by one JSON file.

    Values must be JSON-serializable. Writes go to a sibling temp file that
    replaces the original, so a crash never leaves a half-written file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: dict[str, Any] = self._read()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            logger.debug(f"State file {self.path} does not exist yet")
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read state file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"State file {self.path} does not contain an object")
        return data

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        return list(self._data)

    def update(self, values: dict[str, Any]) -> None:
        self._data.update(values)

    def as_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def flush(self) -> None:
        """Write every key to disk."""
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write state file {self.path}: {e}") from e

        logger.debug(f"Saved state to {self.path}")
