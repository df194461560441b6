"""
Core state handling for wezconf.

This module provides the business logic behind the editor:
- The setting and key-binding catalogs
- The settings store
- Importing existing wezterm.lua files
- Share-link encoding and conflict resolution
"""

from .schema import SettingDefinition, SettingType, CATEGORIES, SETTINGS_MAP
from .mappings import KeyMapping, ACTION_GROUPS, MODIFIERS, KEY_GROUPS
from .store import SettingsStore, Subscription, is_valid
from .config_parser import ConfigTextParser, parse_config
from .codec import DecodedState, CompactDecodeError, encode_token, decode_token
from .url_state import UrlStateResolver, LoadOutcome, build_share_url
from .remote_config import FetchResult, fetch_config_text, to_raw_github_url

__all__ = [
    "SettingDefinition",
    "SettingType",
    "CATEGORIES",
    "SETTINGS_MAP",
    "KeyMapping",
    "ACTION_GROUPS",
    "MODIFIERS",
    "KEY_GROUPS",
    "SettingsStore",
    "Subscription",
    "is_valid",
    "ConfigTextParser",
    "parse_config",
    "DecodedState",
    "CompactDecodeError",
    "encode_token",
    "decode_token",
    "UrlStateResolver",
    "LoadOutcome",
    "build_share_url",
    "FetchResult",
    "fetch_config_text",
    "to_raw_github_url",
]
