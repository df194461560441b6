"""
WezTerm setting definitions.

This module holds the static catalog of settings the editor knows about.
Each setting carries a stable share id (``sid``) that is written into
shared URLs, so ids are assigned once and never reused or changed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class SettingType(str, Enum):
    """Value type of a setting. Values are always stored as strings."""
    STRING = "string"
    FLOAT = "float"
    INT = "int"
    ENUM = "enum"
    BOOL = "bool"


@dataclass(frozen=True)
class SettingDefinition:
    """
    Represents a single WezTerm setting.

    Attributes:
        key: Setting name as used in wezterm.lua (``config.<key>``)
        sid: Stable share id used in the compact URL encoding
        label: Short human-readable label
        type: Value type
        default: Default value, string-encoded
        min: Lower bound for numeric types
        max: Upper bound for numeric types
        step: Suggested increment for numeric editors
        options: Allowed values for enum types
        description: Longer help text
    """
    key: str
    sid: int
    label: str
    type: SettingType
    default: str
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    options: Tuple[str, ...] = ()
    description: str = ""

    @property
    def is_numeric(self) -> bool:
        return self.type in (SettingType.INT, SettingType.FLOAT)


@dataclass(frozen=True)
class Category:
    """An ordered group of settings."""
    id: str
    title: str
    settings: Tuple[SettingDefinition, ...] = field(default_factory=tuple)


def _string(key, sid, label, default="", description=""):
    return SettingDefinition(key, sid, label, SettingType.STRING, default,
                             description=description)


def _float(key, sid, label, default, min=None, max=None, step=None, description=""):
    return SettingDefinition(key, sid, label, SettingType.FLOAT, default,
                             min=min, max=max, step=step, description=description)


def _int(key, sid, label, default, min=None, max=None, description=""):
    return SettingDefinition(key, sid, label, SettingType.INT, default,
                             min=min, max=max, description=description)


def _enum(key, sid, label, default, options, description=""):
    return SettingDefinition(key, sid, label, SettingType.ENUM, default,
                             options=tuple(options), description=description)


def _bool(key, sid, label, default):
    return SettingDefinition(key, sid, label, SettingType.BOOL, default)


CATEGORIES: Tuple[Category, ...] = (
    Category("color_scheme", "Color Scheme", (
        _enum("color_scheme", 0, "Color scheme", "", [],
              description="Built-in color scheme name. Leave empty for default."),
    )),
    Category("fonts", "Fonts", (
        _string("font_family", 1, "Font family",
                description="Generates wezterm.font() call"),
        _float("font_size", 2, "Font size", "12.0", min=1, max=72, step=0.5),
        _float("line_height", 3, "Line height", "1.0", min=0.5, max=3.0, step=0.05),
        _float("cell_width", 4, "Cell width", "1.0", min=0.5, max=2.0, step=0.05),
        _enum("bold_brightens_ansi_colors", 5, "Bold brightens ANSI", "BrightAndBold",
              ["BrightAndBold", "BrightOnly", "No"]),
        _enum("freetype_load_target", 6, "FreeType load target", "Normal",
              ["Normal", "Light", "Mono", "HorizontalLcd"]),
        _string("harfbuzz_features", 7, "HarfBuzz features",
                description="Comma-separated, e.g. calt=1, liga=1"),
    )),
    Category("cursor", "Cursor", (
        _enum("default_cursor_style", 10, "Style", "SteadyBlock", [
            "SteadyBlock",
            "BlinkingBlock",
            "SteadyUnderline",
            "BlinkingUnderline",
            "SteadyBar",
            "BlinkingBar",
        ]),
        _int("cursor_blink_rate", 11, "Blink rate", "800", min=0,
             description="Milliseconds. 0 = no blink"),
        _bool("force_reverse_video_cursor", 12, "Reverse video cursor", "false"),
        _float("cursor_thickness", 13, "Thickness", "1.0", min=0.1, max=5.0, step=0.1,
               description="Pixels"),
        _int("animation_fps", 14, "Animation FPS", "10", min=1, max=120),
    )),
    Category("window", "Window", (
        _enum("window_decorations", 20, "Decorations", "FULL",
              ["FULL", "NONE", "TITLE", "RESIZE", "TITLE | RESIZE"]),
        _float("window_background_opacity", 21, "Background opacity", "1.0",
               min=0, max=1, step=0.05),
        _int("macos_window_background_blur", 22, "macOS bg blur", "0", min=0, max=100,
             description="macOS background blur radius"),
        _float("text_background_opacity", 23, "Text bg opacity", "1.0",
               min=0, max=1, step=0.05),
        _int("window_padding_left", 24, "Padding left", "0", min=0,
             description="Grouped as window_padding in Lua output"),
        _int("window_padding_right", 25, "Padding right", "0", min=0),
        _int("window_padding_top", 26, "Padding top", "0", min=0),
        _int("window_padding_bottom", 27, "Padding bottom", "0", min=0),
        _int("initial_cols", 28, "Initial columns", "80", min=1),
        _int("initial_rows", 29, "Initial rows", "24", min=1),
        _enum("window_close_confirmation", 30, "Close confirmation", "AlwaysPrompt",
              ["AlwaysPrompt", "NeverPrompt"]),
        _bool("adjust_window_size_when_changing_font_size", 31,
              "Adjust size on font change", "true"),
        _int("max_fps", 32, "Max FPS", "60", min=1, max=255),
    )),
    Category("tab_bar", "Tab Bar", (
        _bool("enable_tab_bar", 40, "Enable tab bar", "true"),
        _bool("hide_tab_bar_if_only_one_tab", 41, "Hide if one tab", "false"),
        _bool("tab_bar_at_bottom", 42, "Tab bar at bottom", "false"),
        _bool("use_fancy_tab_bar", 43, "Fancy tab bar", "true"),
        _int("tab_max_width", 44, "Tab max width", "16", min=1),
        _bool("show_tab_index_in_tab_bar", 45, "Show tab index", "true"),
        _bool("show_new_tab_button_in_tab_bar", 46, "Show new tab button", "true"),
    )),
    Category("terminal", "Terminal", (
        _int("scrollback_lines", 50, "Scrollback lines", "3500", min=0),
        _bool("enable_scroll_bar", 51, "Scroll bar", "false"),
        _string("term", 52, "TERM", "xterm-256color"),
        _bool("automatically_reload_config", 53, "Auto-reload config", "true"),
        _enum("exit_behavior", 54, "Exit behavior", "CloseOnCleanExit",
              ["CloseOnCleanExit", "Hold", "Close"]),
        _enum("exit_behavior_messaging", 55, "Exit messaging", "Verbose",
              ["Verbose", "Brief", "None"]),
        _string("default_prog", 56, "Default program",
                description="Comma-separated args, e.g. /bin/bash,-l"),
        _string("default_cwd", 57, "Default CWD"),
        _enum("front_end", 58, "Front end", "OpenGL", ["OpenGL", "WebGpu", "Software"]),
    )),
)

# Enum settings that accept any typed value instead of a fixed option list.
FREE_FORM_ENUM_KEYS = frozenset({"color_scheme"})


def _build_index(categories) -> Tuple[Dict[str, SettingDefinition], Dict[int, str]]:
    """
    Index settings by key and by share id.

    Raises:
        ValueError: If a key or share id is declared twice
    """
    by_key: Dict[str, SettingDefinition] = {}
    by_sid: Dict[int, str] = {}
    for category in categories:
        for setting in category.settings:
            if setting.key in by_key:
                raise ValueError(f"Duplicate setting key: {setting.key}")
            if setting.sid in by_sid:
                raise ValueError(
                    f"Share id {setting.sid} used by both "
                    f"'{by_sid[setting.sid]}' and '{setting.key}'"
                )
            by_key[setting.key] = setting
            by_sid[setting.sid] = setting.key
    return by_key, by_sid


# Declaration order is preserved: category order, then setting order.
SETTINGS_MAP, SID_TO_KEY = _build_index(CATEGORIES)


def get_setting(key: str) -> Optional[SettingDefinition]:
    """Look up a setting definition by key."""
    return SETTINGS_MAP.get(key)


def all_settings() -> List[SettingDefinition]:
    """Return every setting in registry declaration order."""
    return list(SETTINGS_MAP.values())
