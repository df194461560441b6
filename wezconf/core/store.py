"""
Settings store.

Holds the current value of every WezTerm setting (as strings) and the
ordered list of key mappings. Every accepted change is persisted and
announced through the ``changed`` signal.
"""

import dataclasses
import logging
import re
from typing import Callable, Iterable, List, Mapping, Optional, Tuple, Union

from PySide6.QtCore import QObject, Signal

from ..config.storage import MAPPINGS_RECORD, STATE_RECORD, StateStorage
from .mappings import KeyMapping, new_mapping
from .schema import FREE_FORM_ENUM_KEYS, SETTINGS_MAP, SettingDefinition, SettingType

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r'^-?\d+$', re.ASCII)
_FLOAT_RE = re.compile(r'^-?\d+(\.\d+)?$', re.ASCII)

MappingLike = Union[KeyMapping, Tuple[str, str, str], Mapping[str, str]]


def is_valid(setting: SettingDefinition, value: str) -> bool:
    """
    Check a string value against its setting definition.

    Invalid values are never rejected by the store; this check only decides
    what is shown as invalid and what is left out of shared and generated
    output.
    """
    if setting.type in (SettingType.INT, SettingType.FLOAT):
        pattern = _INT_RE if setting.type == SettingType.INT else _FLOAT_RE
        text = value.strip()
        if not pattern.match(text):
            return False
        number = int(text) if setting.type == SettingType.INT else float(text)
        if setting.min is not None and number < setting.min:
            return False
        if setting.max is not None and number > setting.max:
            return False
        return True
    if setting.type == SettingType.ENUM:
        if setting.key in FREE_FORM_ENUM_KEYS:
            return True
        return value in setting.options
    if setting.type == SettingType.BOOL:
        return value in ("true", "false")
    return True


def values_equal(setting: SettingDefinition, a: str, b: str) -> bool:
    """
    Compare two values, numerically for int and float settings.

    Only plain decimal literals compare numerically; forms such as "8_0",
    "inf" or "1e3" are never equal to a different string.
    """
    if a == b:
        return True
    if setting.is_numeric:
        a, b = a.strip(), b.strip()
        if _FLOAT_RE.match(a) and _FLOAT_RE.match(b):
            return float(a) == float(b)
    return False


class Subscription:
    """Handle returned by ``SettingsStore.subscribe``."""

    def __init__(self, store: "SettingsStore", handler: Callable[[], None]):
        self._store = store
        self._handler = handler
        self.active = True

    def cancel(self):
        """Stop receiving change notifications. Safe to call twice."""
        if not self.active:
            return
        self.active = False
        self._store.changed.disconnect(self._handler)


class SettingsStore(QObject):
    """
    Single source of truth for the editor state.

    Construct one store per session. Values are strings; validation is
    advisory (see ``is_valid``). Defaults are never persisted, so only
    changed settings land in storage.

    Change notification is synchronous: every slot connected to ``changed``
    runs, in connection order, before the mutating call returns. There is
    no batching and no re-entrancy guard.
    """

    changed = Signal()

    def __init__(self, storage: Optional[StateStorage] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._storage = storage if storage is not None else StateStorage()
        self._values = {key: setting.default for key, setting in SETTINGS_MAP.items()}
        self._mappings: List[KeyMapping] = []
        self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self):
        """Overlay persisted changes on top of the defaults."""
        saved = self._storage.read(STATE_RECORD)
        if isinstance(saved, dict):
            for key, value in saved.items():
                if key in SETTINGS_MAP and isinstance(value, str):
                    self._values[key] = value
                else:
                    logger.debug(f"Ignoring persisted entry '{key}'")

        saved_mappings = self._storage.read(MAPPINGS_RECORD)
        if isinstance(saved_mappings, list):
            for item in saved_mappings:
                if not isinstance(item, dict):
                    continue
                self._mappings.append(new_mapping(
                    str(item.get("mods", "")),
                    str(item.get("key", "")),
                    str(item.get("action", "")),
                ))

        logger.info(
            f"Loaded {len(self._changed_values())} changed settings and "
            f"{len(self._mappings)} mappings"
        )

    def _changed_values(self) -> dict:
        return {
            key: value for key, value in self._values.items()
            if not values_equal(SETTINGS_MAP[key], value, SETTINGS_MAP[key].default)
        }

    def _save_values(self):
        changed = self._changed_values()
        if changed:
            self._storage.write(STATE_RECORD, changed)
        else:
            self._storage.remove(STATE_RECORD)

    def _save_mappings(self):
        if self._mappings:
            self._storage.write(MAPPINGS_RECORD, [m.to_dict() for m in self._mappings])
        else:
            self._storage.remove(MAPPINGS_RECORD)

    def _notify(self):
        self.changed.emit()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, handler: Callable[[], None]) -> Subscription:
        """
        Call ``handler`` after every change.

        A handler that mutates the store triggers a nested notification
        round before the outer one finishes; avoiding loops is up to the
        caller.
        """
        self.changed.connect(handler)
        return Subscription(self, handler)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get(self, key: str) -> str:
        """Current value of a setting, or "" for unknown keys."""
        return self._values.get(key, "")

    def set(self, key: str, value: str):
        """
        Set a setting value.

        No-op if the value is string-identical to the current one. The value
        is not validated here.
        """
        if key not in SETTINGS_MAP:
            logger.debug(f"Ignoring unknown setting '{key}'")
            return
        if self._values[key] == value:
            return
        self._values[key] = value
        self._save_values()
        self._notify()

    @staticmethod
    def is_valid(setting: SettingDefinition, value: str) -> bool:
        return is_valid(setting, value)

    def changed_entries(self) -> List[Tuple[str, str]]:
        """
        Settings that differ from their default and are valid.

        Returns:
            (key, value) pairs in registry declaration order
        """
        entries = []
        for key, setting in SETTINGS_MAP.items():
            value = self._values[key]
            if not values_equal(setting, value, setting.default) and is_valid(setting, value):
                entries.append((key, value))
        return entries

    def has_local_changes(self) -> bool:
        return bool(self._mappings) or bool(self.changed_entries())

    def reset(self):
        """Restore defaults, drop all mappings and clear persisted state."""
        for key, setting in SETTINGS_MAP.items():
            self._values[key] = setting.default
        self._mappings.clear()
        self._storage.remove(STATE_RECORD)
        self._storage.remove(MAPPINGS_RECORD)
        logger.info("Reset all settings to defaults")
        self._notify()

    # ------------------------------------------------------------------
    # Mappings
    # ------------------------------------------------------------------

    @property
    def mappings(self) -> Tuple[KeyMapping, ...]:
        """Copies of the current mappings, in order."""
        return tuple(dataclasses.replace(m) for m in self._mappings)

    def add_mapping(self, mapping: KeyMapping) -> KeyMapping:
        mapping = self._coerce_mapping(mapping)
        self._mappings.append(mapping)
        self._save_mappings()
        self._notify()
        return dataclasses.replace(mapping)

    def update_mapping(self, mapping_id: str, **patch: str):
        """
        Update fields of one mapping.

        Args:
            mapping_id: Session id of the mapping
            **patch: Any of mods, key, action

        Raises:
            TypeError: If patch names a field other than mods, key or action
        """
        unknown = set(patch) - {"mods", "key", "action"}
        if unknown:
            raise TypeError(f"Unknown mapping fields: {', '.join(sorted(unknown))}")
        mapping = self._find_mapping(mapping_id)
        if mapping is None:
            return
        for name, value in patch.items():
            setattr(mapping, name, value)
        self._save_mappings()
        self._notify()

    def remove_mapping(self, mapping_id: str):
        mapping = self._find_mapping(mapping_id)
        if mapping is None:
            return
        self._mappings.remove(mapping)
        self._save_mappings()
        self._notify()

    def replace_mappings(self, items: Iterable[MappingLike]):
        """Replace the whole mapping list, keeping the given order."""
        self._mappings = [self._coerce_mapping(item) for item in items]
        self._save_mappings()
        self._notify()

    def _find_mapping(self, mapping_id: str) -> Optional[KeyMapping]:
        for mapping in self._mappings:
            if mapping.id == mapping_id:
                return mapping
        return None

    @staticmethod
    def _coerce_mapping(item: MappingLike) -> KeyMapping:
        if isinstance(item, KeyMapping):
            return new_mapping(item.mods, item.key, item.action, item.id or None)
        if isinstance(item, Mapping):
            return new_mapping(
                str(item.get("mods", "")),
                str(item.get("key", "")),
                str(item.get("action", "")),
                item.get("id") or None,
            )
        mods, key, action = item
        return new_mapping(mods, key, action)

    # ------------------------------------------------------------------
    # Bulk load
    # ------------------------------------------------------------------

    def load_snapshot(
        self,
        settings: Mapping[str, str],
        mappings: Iterable[MappingLike],
        reset_first: bool = False,
    ):
        """
        Apply a decoded state in one step.

        Args:
            settings: Setting values to overlay; unknown keys are skipped
            mappings: Mappings to install; with reset_first=False an empty
                sequence leaves the current mappings alone
            reset_first: Restore every default and drop all mappings first
        """
        items = [self._coerce_mapping(item) for item in mappings]
        if reset_first:
            for key, setting in SETTINGS_MAP.items():
                self._values[key] = setting.default
            self._mappings = []
        for key, value in settings.items():
            if key in SETTINGS_MAP:
                self._values[key] = value
        if items or reset_first:
            self._mappings = items
        self._save_values()
        self._save_mappings()
        self._notify()
