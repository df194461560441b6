"""Dialog windows for wezconf."""

from .conflict_dialog import UrlConflictDialog
from .import_dialog import ImportDialog

__all__ = ["UrlConflictDialog", "ImportDialog"]
