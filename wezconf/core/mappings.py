"""
Key binding catalog.

Defines the actions that can be bound to keys, the legal key and modifier
tokens, and the ``KeyMapping`` record held by the settings store. Like
setting share ids, action ids (``aid``) are written into shared URLs and
must never be reassigned.
"""

import string
import uuid
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional, Set, Tuple


@dataclass
class KeyMapping:
    """
    A single key binding.

    Attributes:
        mods: Pipe-joined modifiers, e.g. "CTRL|SHIFT"
        key: Key token, a catalog key name or a single character
        action: Action value; unknown actions are kept verbatim
        id: Session-local identifier, never persisted or shared
    """
    mods: str = ""
    key: str = ""
    action: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def triple(self) -> Tuple[str, str, str]:
        return (self.mods, self.key, self.action)

    def to_dict(self) -> dict:
        """Persisted form; ids are regenerated on load."""
        return {"mods": self.mods, "key": self.key, "action": self.action}


@dataclass(frozen=True)
class ActionDef:
    """An action that can be bound to a key."""
    aid: int
    value: str
    label: str
    lua: str  # Lua expression that binds this action in wezterm.lua


@dataclass(frozen=True)
class ActionGroup:
    label: str
    actions: Tuple[ActionDef, ...]


ACTION_GROUPS: Tuple[ActionGroup, ...] = (
    ActionGroup("Clipboard", (
        ActionDef(1, "CopyTo", "Copy to clipboard", "wezterm.action.CopyTo 'Clipboard'"),
        ActionDef(2, "PasteFrom", "Paste from clipboard", "wezterm.action.PasteFrom 'Clipboard'"),
    )),
    ActionGroup("Panes", (
        ActionDef(3, "SplitHorizontal", "Split horizontal",
                  "wezterm.action.SplitHorizontal { domain = 'CurrentPaneDomain' }"),
        ActionDef(4, "SplitVertical", "Split vertical",
                  "wezterm.action.SplitVertical { domain = 'CurrentPaneDomain' }"),
        ActionDef(5, "CloseCurrentPane", "Close pane",
                  "wezterm.action.CloseCurrentPane { confirm = true }"),
        ActionDef(6, "ActivatePaneDirection-Left", "Focus pane left",
                  "wezterm.action.ActivatePaneDirection 'Left'"),
        ActionDef(7, "ActivatePaneDirection-Right", "Focus pane right",
                  "wezterm.action.ActivatePaneDirection 'Right'"),
        ActionDef(8, "ActivatePaneDirection-Up", "Focus pane up",
                  "wezterm.action.ActivatePaneDirection 'Up'"),
        ActionDef(9, "ActivatePaneDirection-Down", "Focus pane down",
                  "wezterm.action.ActivatePaneDirection 'Down'"),
        ActionDef(10, "TogglePaneZoomState", "Toggle pane zoom",
                  "wezterm.action.TogglePaneZoomState"),
    )),
    ActionGroup("Tabs", (
        ActionDef(11, "SpawnTab", "New tab", "wezterm.action.SpawnTab 'CurrentPaneDomain'"),
        ActionDef(12, "CloseCurrentTab", "Close tab",
                  "wezterm.action.CloseCurrentTab { confirm = true }"),
        ActionDef(13, "ActivateTabRelative-1", "Next tab", "wezterm.action.ActivateTabRelative(1)"),
        ActionDef(14, "ActivateTabRelative--1", "Previous tab",
                  "wezterm.action.ActivateTabRelative(-1)"),
        ActionDef(15, "MoveTabRelative-1", "Move tab right", "wezterm.action.MoveTabRelative(1)"),
        ActionDef(16, "MoveTabRelative--1", "Move tab left", "wezterm.action.MoveTabRelative(-1)"),
    )),
    ActionGroup("Window", (
        ActionDef(17, "ToggleFullScreen", "Toggle fullscreen", "wezterm.action.ToggleFullScreen"),
        ActionDef(18, "SpawnWindow", "New window", "wezterm.action.SpawnWindow"),
    )),
    ActionGroup("Font Size", (
        ActionDef(19, "IncreaseFontSize", "Increase font", "wezterm.action.IncreaseFontSize"),
        ActionDef(20, "DecreaseFontSize", "Decrease font", "wezterm.action.DecreaseFontSize"),
        ActionDef(21, "ResetFontSize", "Reset font size", "wezterm.action.ResetFontSize"),
    )),
    ActionGroup("Scrolling", (
        ActionDef(22, "ScrollByPage-1", "Scroll page up", "wezterm.action.ScrollByPage(-1)"),
        ActionDef(23, "ScrollByPage+1", "Scroll page down", "wezterm.action.ScrollByPage(1)"),
        ActionDef(24, "ScrollByLine--1", "Scroll line up", "wezterm.action.ScrollByLine(-1)"),
        ActionDef(25, "ScrollByLine-1", "Scroll line down", "wezterm.action.ScrollByLine(1)"),
        ActionDef(26, "ScrollToTop", "Scroll to top", "wezterm.action.ScrollToTop"),
        ActionDef(27, "ScrollToBottom", "Scroll to bottom", "wezterm.action.ScrollToBottom"),
    )),
    ActionGroup("Search", (
        ActionDef(28, "Search", "Search", "wezterm.action.Search 'CurrentSelectionOrEmptyString'"),
    )),
    ActionGroup("Misc", (
        ActionDef(29, "ShowDebugOverlay", "Debug overlay", "wezterm.action.ShowDebugOverlay"),
        ActionDef(30, "ActivateCopyMode", "Copy mode", "wezterm.action.ActivateCopyMode"),
        ActionDef(31, "QuickSelect", "Quick select", "wezterm.action.QuickSelect"),
        ActionDef(32, "ShowLauncher", "Show launcher", "wezterm.action.ShowLauncher"),
        ActionDef(33, "ReloadConfiguration", "Reload config", "wezterm.action.ReloadConfiguration"),
    )),
)

ACTION_TO_ID: Dict[str, int] = {}
ID_TO_ACTION: Dict[int, str] = {}

for _group in ACTION_GROUPS:
    for _action in _group.actions:
        if _action.aid in ID_TO_ACTION:
            raise ValueError(f"Duplicate action id: {_action.aid}")
        ACTION_TO_ID[_action.value] = _action.aid
        ID_TO_ACTION[_action.aid] = _action.value

ACTION_VALUES: FrozenSet[str] = frozenset(ACTION_TO_ID)

# Actions whose string argument is part of the action value
# (``ActivatePaneDirection 'Left'`` -> "ActivatePaneDirection-Left").
DIRECTIONAL_ACTIONS: FrozenSet[str] = frozenset({"ActivatePaneDirection"})


def is_known_action(value: str) -> bool:
    return value in ACTION_VALUES


# Canonical order; build_mods() always emits modifiers in this order.
MODIFIERS: Tuple[str, ...] = ("CTRL", "SHIFT", "ALT", "SUPER", "LEADER")
_MODIFIER_SET = frozenset(MODIFIERS)


@dataclass(frozen=True)
class KeyGroup:
    label: str
    keys: Tuple[Tuple[str, str], ...]  # (value, label)


KEY_GROUPS: Tuple[KeyGroup, ...] = (
    KeyGroup("Letters", tuple((ch, ch) for ch in string.ascii_lowercase)),
    KeyGroup("Numbers", tuple((d, d) for d in string.digits)),
    KeyGroup("Function", tuple((f"F{i}", f"F{i}") for i in range(1, 13))),
    KeyGroup("Navigation", (
        ("UpArrow", "Up"),
        ("DownArrow", "Down"),
        ("LeftArrow", "Left"),
        ("RightArrow", "Right"),
        ("Home", "Home"),
        ("End", "End"),
        ("PageUp", "Page Up"),
        ("PageDown", "Page Down"),
        ("Insert", "Insert"),
        ("Delete", "Delete"),
    )),
    KeyGroup("Whitespace", (
        ("Return", "Enter"),
        ("Escape", "Escape"),
        ("Tab", "Tab"),
        ("Backspace", "Backspace"),
        ("Space", "Space"),
    )),
    KeyGroup("Punctuation", (
        ("-", "- minus"),
        ("=", "= equal"),
        ("[", "[ bracket"),
        ("]", "] bracket"),
        ("\\", "\\ backslash"),
        (";", "; semicolon"),
        ("'", "' apostrophe"),
        ("`", "` grave"),
        (",", ", comma"),
        (".", ". period"),
        ("/", "/ slash"),
        ("|", "| pipe"),
    )),
)

ALL_KEY_VALUES: FrozenSet[str] = frozenset(
    value for group in KEY_GROUPS for value, _ in group.keys
)


def parse_mods(mods: str) -> Set[str]:
    """
    Parse a pipe-joined modifier string.

    Unknown tokens are dropped; matching is case-insensitive.
    """
    result: Set[str] = set()
    if not mods:
        return result
    for part in mods.split("|"):
        token = part.strip().upper()
        if token in _MODIFIER_SET:
            result.add(token)
    return result


def build_mods(modifiers: Iterable[str]) -> str:
    """Join modifiers in canonical order."""
    selected = set(modifiers)
    return "|".join(mod for mod in MODIFIERS if mod in selected)


def is_structured_key(key: str) -> bool:
    """
    Check whether a key token is one the editor can represent.

    Empty keys, catalog key names and single characters qualify.
    """
    if not key:
        return True
    return key in ALL_KEY_VALUES or len(key) == 1


def new_mapping(mods: str, key: str, action: str,
                mapping_id: Optional[str] = None) -> KeyMapping:
    """Create a mapping, assigning a fresh session id when none is given."""
    if mapping_id:
        return KeyMapping(mods=mods, key=key, action=action, id=mapping_id)
    return KeyMapping(mods=mods, key=key, action=action)
