"""
Configuration management for wezconf.

This module handles application preferences and the persisted records
that back the settings store.
"""

from .settings import Settings
from .defaults import DEFAULT_SETTINGS
from .storage import StateStorage, MemoryStorage, STATE_RECORD, MAPPINGS_RECORD

__all__ = [
    "Settings",
    "DEFAULT_SETTINGS",
    "StateStorage",
    "MemoryStorage",
    "STATE_RECORD",
    "MAPPINGS_RECORD",
]
