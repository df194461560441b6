"""
Main application window for wezconf.

Shows the settings that differ from WezTerm's defaults, the key bindings,
and the share link for the current state. Editing controls live
elsewhere; this window drives import, reset and shared-link handling.
"""

import logging
from typing import Optional

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit,
    QPushButton, QTableWidget, QTableWidgetItem, QHeaderView, QMessageBox,
    QDialog, QAbstractItemView,
)

from ..config import Settings
from ..core.config_parser import parse_config
from ..core.mappings import is_known_action, is_structured_key
from ..core.schema import SETTINGS_MAP
from ..core.store import SettingsStore
from ..core.url_state import LoadOutcome, UrlStateResolver, build_share_url
from .dialogs.conflict_dialog import UrlConflictDialog
from .dialogs.import_dialog import ImportDialog

logger = logging.getLogger(__name__)


def _read_only_table(headers) -> QTableWidget:
    table = QTableWidget(0, len(headers))
    table.setHorizontalHeaderLabels(headers)
    table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
    table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
    table.verticalHeader().setVisible(False)
    table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
    return table


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, store: SettingsStore, settings: Settings,
                 resolver: Optional[UrlStateResolver] = None):
        super().__init__()
        self.store = store
        self.settings = settings
        self.resolver = resolver or UrlStateResolver(store)

        self._init_ui()
        self._subscription = self.store.subscribe(self.refresh)
        self.refresh()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _init_ui(self):
        self.setWindowTitle("wezconf - WezTerm Config")
        self.resize(
            self.settings.get("window.width", 760),
            self.settings.get("window.height", 620),
        )

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout(central_widget)

        layout.addWidget(QLabel("<b>Changed settings</b>"))
        self.settings_table = _read_only_table(["Setting", "Value"])
        layout.addWidget(self.settings_table)

        layout.addWidget(QLabel("<b>Key bindings</b>"))
        self.mappings_table = _read_only_table(["Mods", "Key", "Action"])
        layout.addWidget(self.mappings_table)

        share_layout = QHBoxLayout()
        share_layout.addWidget(QLabel("Share link:"))
        self.share_edit = QLineEdit()
        self.share_edit.setReadOnly(True)
        share_layout.addWidget(self.share_edit)
        layout.addLayout(share_layout)

        button_layout = QHBoxLayout()
        button_layout.addStretch()

        self.import_button = QPushButton("Import...")
        self.import_button.clicked.connect(self._on_import)
        button_layout.addWidget(self.import_button)

        self.reset_button = QPushButton("Reset")
        self.reset_button.clicked.connect(self._on_reset)
        button_layout.addWidget(self.reset_button)

        layout.addLayout(button_layout)

        self.statusBar().showMessage("Ready")

    # ------------------------------------------------------------------
    # Store sync
    # ------------------------------------------------------------------

    def refresh(self):
        """Re-render tables and share link from the store."""
        entries = self.store.changed_entries()
        self.settings_table.setRowCount(len(entries))
        for row, (key, value) in enumerate(entries):
            self.settings_table.setItem(row, 0, QTableWidgetItem(SETTINGS_MAP[key].label))
            self.settings_table.setItem(row, 1, QTableWidgetItem(value))

        mappings = self.store.mappings
        self.mappings_table.setRowCount(len(mappings))
        for row, mapping in enumerate(mappings):
            for column, text in enumerate(mapping.triple()):
                self.mappings_table.setItem(row, column, QTableWidgetItem(text))
            # Values kept verbatim from an import or a shared link
            if not is_structured_key(mapping.key):
                self.mappings_table.item(row, 1).setToolTip("Custom key")
            if not is_known_action(mapping.action):
                self.mappings_table.item(row, 2).setToolTip("Custom action")

        self.share_edit.setText(
            build_share_url(self.store, self.settings.get("share_base_url", ""))
        )

    # ------------------------------------------------------------------
    # Shared links
    # ------------------------------------------------------------------

    def open_url(self, url: str) -> LoadOutcome:
        """Load shared state from ``url``, asking the user on conflict."""
        outcome = self.resolver.load(url)
        if outcome == LoadOutcome.CONFLICT:
            dialog = UrlConflictDialog(self.resolver.pending, self)
            accepted = dialog.exec() == QDialog.DialogCode.Accepted
            dialog.deleteLater()
            if accepted:
                self.resolver.accept_pending()
                self.statusBar().showMessage("Imported shared config")
            else:
                self.resolver.dismiss_pending()
                self.statusBar().showMessage("Kept local config")
        elif outcome == LoadOutcome.APPLIED:
            self.statusBar().showMessage("Loaded shared config")
        return outcome

    # ------------------------------------------------------------------
    # Import / reset
    # ------------------------------------------------------------------

    def import_text(self, text: str) -> int:
        """
        Apply a wezterm.lua to the store.

        Resets the store first when the ``import.reset_before_apply``
        preference is set.
        """
        if self.settings.get("import.reset_before_apply", True):
            self.store.reset()
        count = parse_config(text, self.store)
        self.statusBar().showMessage(f"Applied {count} settings")
        return count

    def _on_import(self):
        dialog = ImportDialog(self.settings.get("import.fetch_timeout", 10), self)
        accepted = dialog.exec() == QDialog.DialogCode.Accepted
        text = dialog.config_text()
        dialog.dispose()
        if accepted:
            self.import_text(text)

    def _on_reset(self):
        reply = QMessageBox.question(
            self, "Reset",
            "Reset all settings and key bindings to defaults?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.store.reset()
            self.statusBar().showMessage("Reset to defaults")

    def closeEvent(self, event):
        """Remember window size and stop listening to the store."""
        self.settings.set("window.width", self.width())
        self.settings.set("window.height", self.height())
        self.settings.save()
        self._subscription.cancel()
        super().closeEvent(event)
