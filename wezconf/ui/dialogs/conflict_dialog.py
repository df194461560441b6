"""
Dialog shown when a shared link conflicts with local changes.
"""

from typing import Optional

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel,
    QPushButton, QFrame, QWidget,
)

from ...core.codec import DecodedState
from ...core.schema import SETTINGS_MAP

# Settings listed by name before the summary switches to a count
_MAX_LISTED = 6


class UrlConflictDialog(QDialog):
    """
    Asks whether to import a shared config or keep the local one.

    Accepting means "import shared config"; rejecting keeps local state.
    """

    def __init__(self, shared: DecodedState, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.shared = shared
        self._init_ui()

    def _init_ui(self):
        self.setWindowTitle("Shared Config Found")
        self.setMinimumWidth(420)
        self.setModal(True)

        layout = QVBoxLayout(self)

        header = QLabel("Shared config found")
        header.setStyleSheet("font-size: 14px; font-weight: bold; padding: 4px;")
        layout.addWidget(header)

        divider = QFrame()
        divider.setFrameShape(QFrame.Shape.HLine)
        divider.setFrameShadow(QFrame.Shadow.Sunken)
        layout.addWidget(divider)

        desc = QLabel(
            "A shared config was found in the URL. "
            "Import it or keep your current settings?"
        )
        desc.setWordWrap(True)
        layout.addWidget(desc)

        self._summary_label = QLabel(self.summary_text())
        self._summary_label.setStyleSheet("padding: 8px; font-family: monospace;")
        layout.addWidget(self._summary_label)

        note = QLabel("Importing replaces all of your current settings and key bindings.")
        note.setStyleSheet("color: gray; font-size: 11px;")
        note.setWordWrap(True)
        layout.addWidget(note)

        layout.addSpacing(12)

        button_layout = QHBoxLayout()
        button_layout.addStretch()

        self._keep_button = QPushButton("Keep mine")
        self._keep_button.clicked.connect(self.reject)
        button_layout.addWidget(self._keep_button)

        self._import_button = QPushButton("Import shared config")
        self._import_button.setDefault(True)
        self._import_button.clicked.connect(self.accept)
        button_layout.addWidget(self._import_button)

        layout.addLayout(button_layout)

    def summary_text(self) -> str:
        """Short description of what the shared config contains."""
        lines = []
        keys = list(self.shared.settings)
        for key in keys[:_MAX_LISTED]:
            setting = SETTINGS_MAP.get(key)
            label = setting.label if setting else key
            lines.append(f"{label}: {self.shared.settings[key]}")
        if len(keys) > _MAX_LISTED:
            lines.append(f"... and {len(keys) - _MAX_LISTED} more settings")
        count = len(self.shared.mappings)
        if count:
            lines.append(f"Key bindings: {count}")
        return "\n".join(lines) if lines else "No changed settings"
