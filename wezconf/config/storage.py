"""
Persisted state records for the settings store.

Each record is a JSON document in the user's config directory. Only the
settings store writes here.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

STATE_RECORD = "state"
MAPPINGS_RECORD = "mappings"


def get_config_dir() -> Path:
    """
    Get platform-specific configuration directory.

    Returns:
        Path to configuration directory (not created)
    """
    if os.name == 'nt':  # Windows
        base = os.environ.get('APPDATA', os.path.expanduser('~'))
    else:  # Linux/macOS
        base = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
    return Path(base) / 'wezconf'


class StateStorage:
    """
    Key-value record store backed by JSON files.

    Path:
        Linux/macOS: ~/.config/wezconf/<record>.json
        Windows: %APPDATA%\\wezconf\\<record>.json
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir is not None else get_config_dir()

    def _path(self, record: str) -> Path:
        return self.config_dir / f"{record}.json"

    def read(self, record: str) -> Optional[Any]:
        """
        Read a record.

        Returns:
            Decoded JSON value, or None if the record is missing or unreadable
        """
        path = self._path(record)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to read {path}: {e}")
            return None

    def write(self, record: str, data: Any):
        """Write a record, creating the config directory if needed."""
        path = self._path(record)
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            logger.debug(f"Saved {record} to {path}")
        except OSError as e:
            logger.error(f"Failed to save {path}: {e}")

    def remove(self, record: str):
        """Remove a record; missing records are ignored."""
        path = self._path(record)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to remove {path}: {e}")


class MemoryStorage(StateStorage):
    """In-memory record store for sessions that must not touch disk."""

    def __init__(self):
        super().__init__(config_dir=Path("."))
        self._records = {}

    def read(self, record: str) -> Optional[Any]:
        data = self._records.get(record)
        return json.loads(data) if data is not None else None

    def write(self, record: str, data: Any):
        self._records[record] = json.dumps(data)

    def remove(self, record: str):
        self._records.pop(record, None)

    def __contains__(self, record: str) -> bool:
        return record in self._records
