"""Tests for preferences, state records and logging setup."""

import json
import logging
from contextlib import contextmanager

import pytest

from wezconf.config import DEFAULT_SETTINGS, MemoryStorage, Settings, StateStorage
from wezconf.config.storage import get_config_dir
from wezconf.utils import get_log_dir, setup_logging


# ---------------------------------------------------------------------------
# Settings (application preferences)
# ---------------------------------------------------------------------------

class TestSettings:

    def test_defaults_when_missing(self, tmp_path):
        settings = Settings(tmp_path)
        assert settings.get("import.reset_before_apply") is True
        assert settings.get("share_base_url") == DEFAULT_SETTINGS["share_base_url"]

    def test_dotted_get_default(self, tmp_path):
        settings = Settings(tmp_path)
        assert settings.get("import.nope", 42) == 42
        assert settings.get("log_level.deeper", "x") == "x"

    def test_set_creates_nested(self, tmp_path):
        settings = Settings(tmp_path)
        settings.set("ui.theme.name", "dark")
        assert settings.get("ui.theme.name") == "dark"

    def test_save_and_reload(self, tmp_path):
        settings = Settings(tmp_path)
        settings.set("window.width", 1024)
        settings.save()

        reloaded = Settings(tmp_path)
        assert reloaded.get("window.width") == 1024
        assert reloaded.get("window.height") == 620

    def test_partial_file_merged_with_defaults(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"import": {"fetch_timeout": 3}}))
        settings = Settings(tmp_path)
        assert settings.get("import.fetch_timeout") == 3
        assert settings.get("import.reset_before_apply") is True

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_invalid_file_uses_defaults(self, tmp_path, content):
        (tmp_path / "settings.json").write_text(content)
        settings = Settings(tmp_path)
        assert settings.get("log_level") == "INFO"

    def test_defaults_not_mutated(self, tmp_path):
        settings = Settings(tmp_path)
        settings.set("import.fetch_timeout", 99)
        assert DEFAULT_SETTINGS["import"]["fetch_timeout"] == 10


# ---------------------------------------------------------------------------
# State records
# ---------------------------------------------------------------------------

class TestStateStorage:

    def test_write_read(self, tmp_path):
        storage = StateStorage(tmp_path / "nested")
        storage.write("state", {"font_size": "14"})
        assert (tmp_path / "nested" / "state.json").exists()
        assert storage.read("state") == {"font_size": "14"}

    def test_missing_record(self, tmp_path):
        assert StateStorage(tmp_path).read("state") is None

    def test_corrupt_record(self, tmp_path):
        (tmp_path / "state.json").write_text("{nope")
        assert StateStorage(tmp_path).read("state") is None

    def test_remove(self, tmp_path):
        storage = StateStorage(tmp_path)
        storage.write("mappings", [])
        storage.remove("mappings")
        storage.remove("mappings")
        assert not (tmp_path / "mappings.json").exists()

    def test_memory_storage_copies(self):
        storage = MemoryStorage()
        data = {"a": "1"}
        storage.write("state", data)
        data["a"] = "2"
        assert storage.read("state") == {"a": "1"}
        assert "state" in storage

    def test_config_dir_from_xdg(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_dir() == tmp_path / "wezconf"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

@contextmanager
def _preserved_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        yield
    finally:
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)


class TestLogging:

    def test_console_only(self):
        with _preserved_root_logger():
            logger = setup_logging("debug", log_file=False)
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1

    def test_unknown_level_falls_back_to_info(self):
        with _preserved_root_logger():
            assert setup_logging("chatty", log_file=False).level == logging.INFO

    def test_log_file_created(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
        with _preserved_root_logger():
            setup_logging("INFO", log_file=True)
        assert get_log_dir() == tmp_path / "wezconf" / "logs"
        assert list(get_log_dir().glob("wezconf_*.log"))
