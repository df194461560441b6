"""Tests for the Qt shell (conflict dialog, import dialog, main window).

These tests use pytest-qt and are skipped when PySide6 cannot be imported.
"""

import threading

import pytest
from unittest.mock import patch

from wezconf.core.codec import DecodedState, encode_token
from wezconf.core.mappings import new_mapping
from wezconf.core.remote_config import FetchResult, UNSUPPORTED_URL
from wezconf.core.url_state import LoadOutcome

# Guard: skip Qt-dependent tests if PySide6 is not importable
# (CI without Qt system libs).
try:
    import shiboken6
    from PySide6.QtCore import QEvent
    from PySide6.QtWidgets import QApplication, QDialog, QMessageBox
    _HAS_QT = True
except ImportError:
    _HAS_QT = False

needs_qt = pytest.mark.skipif(not _HAS_QT, reason="PySide6 not available")

BASE = "https://wez-conf.example.com/"


def _share_url(settings=(), mappings=()):
    return f"{BASE}#c={encode_token(list(settings), list(mappings))}"


# ---------------------------------------------------------------------------
# UrlConflictDialog
# ---------------------------------------------------------------------------

class TestUrlConflictDialog:

    @needs_qt
    def test_summary_lists_settings_and_bindings(self, qtbot):
        from wezconf.ui.dialogs import UrlConflictDialog
        shared = DecodedState({"font_size": "16", "term": "wezterm"}, [("", "a", "CopyTo")])
        dialog = UrlConflictDialog(shared)
        qtbot.addWidget(dialog)
        assert dialog.summary_text() == "Font size: 16\nTERM: wezterm\nKey bindings: 1"

    @needs_qt
    def test_summary_truncates_long_lists(self, qtbot):
        from wezconf.ui.dialogs import UrlConflictDialog
        settings = {key: "1" for key in (
            "initial_cols", "initial_rows", "max_fps", "tab_max_width",
            "animation_fps", "cursor_blink_rate", "scrollback_lines", "window_padding_left",
        )}
        dialog = UrlConflictDialog(DecodedState(settings, []))
        qtbot.addWidget(dialog)
        lines = dialog.summary_text().splitlines()
        assert len(lines) == 7
        assert lines[-1] == "... and 2 more settings"

    @needs_qt
    def test_summary_bindings_only(self, qtbot):
        from wezconf.ui.dialogs import UrlConflictDialog
        dialog = UrlConflictDialog(DecodedState({}, [("", "a", "CopyTo"), ("", "b", "PasteFrom")]))
        qtbot.addWidget(dialog)
        assert dialog.summary_text() == "Key bindings: 2"

    @needs_qt
    def test_buttons(self, qtbot):
        from wezconf.ui.dialogs import UrlConflictDialog
        dialog = UrlConflictDialog(DecodedState({"font_size": "16"}, []))
        qtbot.addWidget(dialog)

        with qtbot.waitSignal(dialog.accepted, timeout=1000):
            dialog._import_button.click()

        with qtbot.waitSignal(dialog.rejected, timeout=1000):
            dialog._keep_button.click()


# ---------------------------------------------------------------------------
# ImportDialog
# ---------------------------------------------------------------------------

class TestImportDialog:

    @needs_qt
    def test_paste(self, qtbot):
        from wezconf.ui.dialogs import ImportDialog
        dialog = ImportDialog()
        qtbot.addWidget(dialog)
        dialog.paste_edit.setPlainText("config.font_size = 14")
        with qtbot.waitSignal(dialog.accepted, timeout=1000):
            dialog.apply_button.click()
        assert dialog.config_text() == "config.font_size = 14"

    @needs_qt
    def test_empty_paste_does_nothing(self, qtbot):
        from wezconf.ui.dialogs import ImportDialog
        dialog = ImportDialog()
        qtbot.addWidget(dialog)
        with qtbot.assertNotEmitted(dialog.accepted):
            dialog.apply_button.click()
        assert dialog.config_text() == ""

    @needs_qt
    def test_file(self, qtbot, tmp_path):
        from wezconf.ui.dialogs.import_dialog import FILE_TAB, ImportDialog
        path = tmp_path / "wezterm.lua"
        path.write_text("config.term = 'wezterm'")
        dialog = ImportDialog()
        qtbot.addWidget(dialog)
        dialog.tabs.setCurrentIndex(FILE_TAB)
        dialog.file_edit.setText(str(path))
        dialog.apply_button.click()
        assert dialog.config_text() == "config.term = 'wezterm'"

    @needs_qt
    def test_missing_file_reports_error(self, qtbot, tmp_path):
        from wezconf.ui.dialogs.import_dialog import FILE_TAB, ImportDialog
        dialog = ImportDialog()
        qtbot.addWidget(dialog)
        dialog.tabs.setCurrentIndex(FILE_TAB)
        dialog.file_edit.setText(str(tmp_path / "missing.lua"))
        dialog.apply_button.click()
        assert dialog.status_label.text().startswith("Could not read file")

    @needs_qt
    def test_non_github_url_rejected(self, qtbot):
        from wezconf.ui.dialogs.import_dialog import URL_TAB, ImportDialog
        dialog = ImportDialog()
        qtbot.addWidget(dialog)
        dialog.tabs.setCurrentIndex(URL_TAB)
        dialog.url_edit.setText("https://example.com/wezterm.lua")
        with patch("wezconf.ui.dialogs.import_dialog.fetch_config_text") as mock_fetch:
            dialog.apply_button.click()
        mock_fetch.assert_not_called()
        assert dialog.status_label.text() == UNSUPPORTED_URL

    @needs_qt
    def test_url_fetch_success(self, qtbot):
        from wezconf.ui.dialogs.import_dialog import URL_TAB, ImportDialog
        dialog = ImportDialog(fetch_timeout=2)
        qtbot.addWidget(dialog)
        dialog.tabs.setCurrentIndex(URL_TAB)
        dialog.url_edit.setText("https://github.com/a/b/blob/main/wezterm.lua")

        result = FetchResult(success=True, text="config.font_size = 15", url="x")
        with patch("wezconf.ui.dialogs.import_dialog.fetch_config_text", return_value=result):
            with qtbot.waitSignal(dialog.accepted, timeout=5000):
                dialog.apply_button.click()

        assert dialog.config_text() == "config.font_size = 15"
        assert dialog.apply_button.isEnabled()

    @needs_qt
    def test_url_fetch_failure(self, qtbot):
        from wezconf.ui.dialogs.import_dialog import URL_TAB, ImportDialog
        dialog = ImportDialog()
        qtbot.addWidget(dialog)
        dialog.tabs.setCurrentIndex(URL_TAB)
        dialog.url_edit.setText("https://github.com/a/b/blob/main/wezterm.lua")

        result = FetchResult(success=False, error="Fetch failed (HTTP 404)")
        with patch("wezconf.ui.dialogs.import_dialog.fetch_config_text", return_value=result):
            dialog.apply_button.click()
            qtbot.waitUntil(lambda: dialog.status_label.text() != "", timeout=5000)

        assert dialog.status_label.text() == "Fetch failed (HTTP 404)"
        assert dialog.config_text() == ""
        assert dialog.apply_button.isEnabled()

    @needs_qt
    def test_dispose_deletes_idle_dialog(self, qtbot):
        from wezconf.ui.dialogs import ImportDialog
        dialog = ImportDialog()
        dialog.dispose()
        QApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)
        assert not shiboken6.isValid(dialog)

    @needs_qt
    def test_dispose_waits_for_running_fetch(self, qtbot):
        from wezconf.ui.dialogs.import_dialog import URL_TAB, ImportDialog
        dialog = ImportDialog()
        dialog.tabs.setCurrentIndex(URL_TAB)
        dialog.url_edit.setText("https://github.com/a/b/blob/main/wezterm.lua")
        accepted = []
        dialog.accepted.connect(lambda: accepted.append(1))
        release = threading.Event()

        def slow_fetch(url, timeout):
            release.wait(5)
            return FetchResult(success=True, text="config.font_size = 15", url=url)

        def deleted():
            QApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)
            return not shiboken6.isValid(dialog)

        with patch("wezconf.ui.dialogs.import_dialog.fetch_config_text", side_effect=slow_fetch):
            dialog.apply_button.click()
            dialog.dispose()
            assert not deleted()
            release.set()
            qtbot.waitUntil(deleted, timeout=5000)

        assert accepted == []


# ---------------------------------------------------------------------------
# MainWindow
# ---------------------------------------------------------------------------

@pytest.fixture
def window_factory(qtbot, tmp_path, store):
    """Build a MainWindow over the shared store with preferences in tmp_path."""
    def make(**prefs):
        from wezconf.config import Settings
        from wezconf.ui import MainWindow
        settings = Settings(tmp_path)
        settings.set("share_base_url", BASE)
        for key, value in prefs.items():
            settings.set(key.replace("__", "."), value)
        window = MainWindow(store, settings)
        qtbot.addWidget(window)
        return window
    return make


class TestMainWindow:

    @needs_qt
    def test_refresh_on_change(self, window_factory, store):
        window = window_factory()
        assert window.settings_table.rowCount() == 0
        assert window.share_edit.text() == BASE

        store.set("font_size", "14")
        store.add_mapping(new_mapping("CTRL", "t", "SpawnTab"))

        assert window.settings_table.rowCount() == 1
        assert window.settings_table.item(0, 0).text() == "Font size"
        assert window.settings_table.item(0, 1).text() == "14"
        assert window.mappings_table.rowCount() == 1
        assert window.mappings_table.item(0, 2).text() == "SpawnTab"
        assert window.share_edit.text().startswith(BASE + "#c=")

    @needs_qt
    def test_import_resets_by_default(self, window_factory, store):
        store.set("term", "wezterm")
        window = window_factory()
        assert window.import_text("config.font_size = 14") == 1
        assert store.get("term") == "xterm-256color"
        assert store.get("font_size") == "14"

    @needs_qt
    def test_import_without_reset(self, window_factory, store):
        store.set("term", "wezterm")
        window = window_factory(import__reset_before_apply=False)
        window.import_text("config.font_size = 14")
        assert store.get("term") == "wezterm"

    @needs_qt
    def test_open_url_applies(self, window_factory, store):
        window = window_factory()
        assert window.open_url(_share_url([("font_size", "16")])) == LoadOutcome.APPLIED
        assert store.get("font_size") == "16"

    @needs_qt
    def test_open_url_conflict_accept(self, window_factory, store):
        from wezconf.ui.dialogs.conflict_dialog import UrlConflictDialog
        store.set("term", "wezterm")
        window = window_factory()
        with patch.object(UrlConflictDialog, "exec", return_value=QDialog.DialogCode.Accepted):
            outcome = window.open_url(_share_url([("font_size", "16")]))
        assert outcome == LoadOutcome.CONFLICT
        assert store.get("font_size") == "16"
        assert store.get("term") == "xterm-256color"

    @needs_qt
    def test_open_url_conflict_keep(self, window_factory, store):
        from wezconf.ui.dialogs.conflict_dialog import UrlConflictDialog
        store.set("term", "wezterm")
        window = window_factory()
        with patch.object(UrlConflictDialog, "exec", return_value=QDialog.DialogCode.Rejected):
            window.open_url(_share_url([("font_size", "16")]))
        assert store.get("font_size") == "12.0"
        assert store.get("term") == "wezterm"
        assert not window.resolver.has_pending

    @needs_qt
    def test_reset_confirmed(self, window_factory, store):
        store.set("font_size", "14")
        window = window_factory()
        with patch.object(QMessageBox, "question", return_value=QMessageBox.StandardButton.Yes):
            window.reset_button.click()
        assert store.get("font_size") == "12.0"

    @needs_qt
    def test_reset_declined(self, window_factory, store):
        store.set("font_size", "14")
        window = window_factory()
        with patch.object(QMessageBox, "question", return_value=QMessageBox.StandardButton.No):
            window.reset_button.click()
        assert store.get("font_size") == "14"

    @needs_qt
    def test_close_saves_size_and_unsubscribes(self, window_factory, store, tmp_path):
        from wezconf.config import Settings
        window = window_factory()
        window.show()
        window.resize(800, 500)
        window.close()

        assert Settings(tmp_path).get("window.width") == window.width()
        store.set("font_size", "14")
        assert window.settings_table.rowCount() == 0

    @needs_qt
    def test_custom_mapping_values_flagged(self, window_factory, store):
        window = window_factory()
        store.replace_mappings([("CTRL", "t", "SpawnTab"), ("", "mapped:a", "Mystery")])
        assert window.mappings_table.item(0, 1).toolTip() == ""
        assert window.mappings_table.item(0, 2).toolTip() == ""
        assert window.mappings_table.item(1, 1).toolTip() == "Custom key"
        assert window.mappings_table.item(1, 2).toolTip() == "Custom action"

    @needs_qt
    def test_closed_dialogs_are_deleted(self, window_factory):
        from wezconf.ui.dialogs.conflict_dialog import UrlConflictDialog
        from wezconf.ui.dialogs.import_dialog import ImportDialog
        window = window_factory()
        with patch.object(ImportDialog, "exec", return_value=QDialog.DialogCode.Rejected):
            for _ in range(3):
                window.import_button.click()
        window.store.set("term", "wezterm")
        with patch.object(UrlConflictDialog, "exec", return_value=QDialog.DialogCode.Rejected):
            window.open_url(_share_url([("font_size", "16")]))

        QApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)
        assert window.findChildren(ImportDialog) == []
        assert window.findChildren(UrlConflictDialog) == []
