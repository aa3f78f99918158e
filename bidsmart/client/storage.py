"""Small persistent key-value store for client state.

Values are strings kept in a single JSON file. Every read and write is best
effort: a missing, unreadable or corrupt file behaves like an empty store, and
a failed write is logged and otherwise ignored.
"""

import json
import os
from pathlib import Path
from typing import Dict, Optional, Union

from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_STORAGE_PATH = Path.home() / ".bidsmart" / "local_storage.json"


class LocalStorage:
    """JSON file backed string store."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or os.environ.get("BIDSMART_STORAGE_PATH") or DEFAULT_STORAGE_PATH)

    def _read(self) -> Dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            LOGGER.warning(f"Ignoring unreadable storage file {self.path}: {str(e)}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            LOGGER.warning(f"Could not write storage file {self.path}: {str(e)}")

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def get_json(self, key: str) -> Optional[object]:
        """Decode a stored JSON value, or None if absent or malformed."""
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            LOGGER.warning(f"Ignoring malformed value stored under {key}")
            return None

    def set_json(self, key: str, value: object) -> None:
        self.set_item(key, json.dumps(value))
