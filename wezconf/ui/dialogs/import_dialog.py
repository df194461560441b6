"""
Dialog for importing an existing wezterm.lua.

The text can be pasted, read from a file, or fetched from GitHub.
"""

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, QThread, Signal
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit,
    QPlainTextEdit, QPushButton, QTabWidget, QWidget, QFileDialog,
)

from ...core.remote_config import (
    FetchResult, UNSUPPORTED_URL, fetch_config_text, to_raw_github_url,
)

logger = logging.getLogger(__name__)

PASTE_TAB, FILE_TAB, URL_TAB = range(3)


class _FetchWorker(QObject):
    """Downloads a config file in a background thread."""

    finished = Signal(object)  # emits FetchResult

    def __init__(self, url: str, timeout: float):
        super().__init__()
        self.url = url
        self.timeout = timeout

    def run(self):
        self.finished.emit(fetch_config_text(self.url, timeout=self.timeout))


class ImportDialog(QDialog):
    """
    Collects wezterm.lua text from one of three sources.

    After ``exec()`` returns Accepted, ``config_text()`` holds the text.
    Parsing is left to the caller.
    """

    def __init__(self, fetch_timeout: float = 10, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.fetch_timeout = fetch_timeout
        self._text = ""
        self._worker: Optional[_FetchWorker] = None
        self._worker_thread: Optional[QThread] = None
        self._pending_result: Optional[FetchResult] = None
        self._disposed = False
        self._init_ui()

    def _init_ui(self):
        self.setWindowTitle("Import wezterm.lua")
        self.setMinimumWidth(480)
        self.setModal(True)

        layout = QVBoxLayout(self)

        self.tabs = QTabWidget()

        self.paste_edit = QPlainTextEdit()
        self.paste_edit.setPlaceholderText("Paste your wezterm.lua here...")
        self.tabs.addTab(self.paste_edit, "Paste")

        file_panel = QWidget()
        file_layout = QHBoxLayout(file_panel)
        self.file_edit = QLineEdit()
        self.file_edit.setPlaceholderText("/path/to/wezterm.lua")
        file_layout.addWidget(self.file_edit)
        browse_button = QPushButton("Browse...")
        browse_button.clicked.connect(self._on_browse)
        file_layout.addWidget(browse_button)
        self.tabs.addTab(file_panel, "File")

        url_panel = QWidget()
        url_layout = QVBoxLayout(url_panel)
        self.url_edit = QLineEdit()
        self.url_edit.setPlaceholderText("https://github.com/user/repo/blob/main/wezterm.lua")
        url_layout.addWidget(self.url_edit)
        url_layout.addStretch()
        self.tabs.addTab(url_panel, "URL")

        layout.addWidget(self.tabs)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: red; font-size: 11px;")
        layout.addWidget(self.status_label)

        button_layout = QHBoxLayout()
        button_layout.addStretch()

        cancel_button = QPushButton("Cancel")
        cancel_button.clicked.connect(self.reject)
        button_layout.addWidget(cancel_button)

        self.apply_button = QPushButton("Apply")
        self.apply_button.setDefault(True)
        self.apply_button.clicked.connect(self._on_apply)
        button_layout.addWidget(self.apply_button)

        layout.addLayout(button_layout)

    def config_text(self) -> str:
        return self._text

    def dispose(self):
        """
        Schedule the dialog for deletion.

        A fetch still in flight is allowed to finish first; its result is
        dropped.
        """
        self._disposed = True
        if self._worker_thread is not None:
            self._worker_thread.finished.connect(self.deleteLater)
        else:
            self.deleteLater()

    def _on_browse(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Open wezterm.lua", "", "Lua files (*.lua);;Text files (*.txt);;All files (*)"
        )
        if path:
            self.file_edit.setText(path)

    def _on_apply(self):
        """Collect text from the active tab."""
        self.status_label.setText("")
        index = self.tabs.currentIndex()

        if index == PASTE_TAB:
            text = self.paste_edit.toPlainText()
            if not text.strip():
                return
            self._finish(text)

        elif index == FILE_TAB:
            path = self.file_edit.text().strip()
            if not path:
                return
            try:
                text = Path(path).read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.error(f"Failed to read {path}: {e}")
                self.status_label.setText(f"Could not read file: {e.strerror or e}")
                return
            self._finish(text)

        elif index == URL_TAB:
            url = self.url_edit.text().strip()
            if not url:
                return
            if to_raw_github_url(url) is None:
                self.status_label.setText(UNSUPPORTED_URL)
                return
            self._start_fetch(url)

    def _finish(self, text: str):
        self._text = text
        self.accept()

    # ------------------------------------------------------------------
    # Background fetch
    # ------------------------------------------------------------------

    def _start_fetch(self, url: str):
        worker = _FetchWorker(url, self.fetch_timeout)
        thread = QThread()
        worker.moveToThread(thread)

        thread.started.connect(worker.run)
        worker.finished.connect(self._store_result)
        worker.finished.connect(thread.quit)
        thread.finished.connect(self._on_thread_finished)

        self._worker = worker
        self._worker_thread = thread
        self._pending_result = None
        self.apply_button.setEnabled(False)
        self.apply_button.setText("Fetching...")

        thread.start()

    def _store_result(self, result: FetchResult):
        """Stash the result so _on_thread_finished can use it."""
        self._pending_result = result

    def _on_thread_finished(self):
        """Clean up worker and thread after the thread has fully stopped."""
        result = self._pending_result
        self._pending_result = None

        if self._worker is not None:
            self._worker.deleteLater()
            self._worker = None
        if self._worker_thread is not None:
            self._worker_thread.deleteLater()
            self._worker_thread = None

        if result is not None and not self._disposed:
            self._on_fetch_finished(result)

    def _on_fetch_finished(self, result: FetchResult):
        self.apply_button.setEnabled(True)
        self.apply_button.setText("Apply")
        if result.success:
            self._finish(result.text)
        else:
            self.status_label.setText(result.error)
