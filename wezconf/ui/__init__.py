"""Qt user interface for wezconf."""

from .main_window import MainWindow

__all__ = ["MainWindow"]
