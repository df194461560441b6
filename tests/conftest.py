"""Shared fixtures for wezconf tests."""

import os

import pytest

# Qt widget tests run headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from wezconf.config import MemoryStorage
from wezconf.core.store import SettingsStore


@pytest.fixture
def storage():
    """In-memory record store."""
    return MemoryStorage()


@pytest.fixture
def store(storage):
    """Fresh settings store backed by in-memory storage."""
    return SettingsStore(storage)
