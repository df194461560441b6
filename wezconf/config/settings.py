"""
Preferences management for wezconf.

Handles loading, saving, and accessing application preferences.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .defaults import DEFAULT_SETTINGS
from .storage import get_config_dir

logger = logging.getLogger(__name__)


class Settings:
    """
    Application preferences manager.

    Preferences are stored as JSON next to the persisted editor state.

    Path:
        Linux/macOS: ~/.config/wezconf/settings.json
        Windows: %APPDATA%\\wezconf\\settings.json
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize preferences manager.

        Args:
            config_dir: Directory holding settings.json (platform default if None)
        """
        self.config_dir = Path(config_dir) if config_dir is not None else get_config_dir()
        self.config_file = self.config_dir / "settings.json"
        self._settings: Dict[str, Any] = {}
        self.load()

    def load(self):
        """
        Load preferences from file.

        If file doesn't exist or is invalid, uses default settings.
        """
        self._settings = copy.deepcopy(DEFAULT_SETTINGS)

        if not self.config_file.exists():
            logger.info("No preferences file found, using defaults")
            return

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded_settings = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load preferences: {e}, using defaults")
            return

        if not isinstance(loaded_settings, dict):
            logger.error("Preferences file is not a JSON object, using defaults")
            return

        # Merge with defaults (in case new preferences were added)
        self._deep_update(self._settings, loaded_settings)
        logger.info(f"Loaded preferences from {self.config_file}")

    def save(self):
        """Save current preferences to file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self._settings, f, indent=2)
            logger.info(f"Saved preferences to {self.config_file}")
        except OSError as e:
            logger.error(f"Failed to save preferences: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get preference value.

        Supports nested keys with dot notation: "import.fetch_timeout"

        Args:
            key: Preference key (use dots for nested values)
            default: Default value if key not found

        Returns:
            Preference value or default
        """
        value = self._settings
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any):
        """
        Set preference value.

        Supports nested keys with dot notation: "window.width"
        """
        keys = key.split('.')
        target = self._settings

        for k in keys[:-1]:
            if k not in target or not isinstance(target[k], dict):
                target[k] = {}
            target = target[k]

        target[keys[-1]] = value

    @staticmethod
    def _deep_update(base: dict, updates: dict):
        """Recursively update base dict with values from updates dict."""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                Settings._deep_update(base[key], value)
            else:
                base[key] = value
