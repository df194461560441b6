"""
wezconf - Main entry point.

Launches the Qt application, optionally opening a shared link.
"""

import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication

from . import __version__
from .config import Settings, StateStorage
from .core import SettingsStore, UrlStateResolver
from .utils import setup_logging


def _parse_args(argv):
    parser = argparse.ArgumentParser(prog="wezconf", description="WezTerm configuration editor")
    parser.add_argument("url", nargs="?", default="",
                        help="shared link to open (https://...#c=<token>)")
    parser.add_argument("--log-level", default=None,
                        help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    parser.add_argument("--no-log-file", action="store_true",
                        help="log to the console only")
    return parser.parse_known_args(argv)


def main(argv=None):
    """Main entry point for wezconf."""
    argv = sys.argv[1:] if argv is None else argv
    args, qt_args = _parse_args(argv)

    settings = Settings()
    setup_logging(
        log_level=args.log_level or settings.get("log_level", "INFO"),
        log_file=not args.no_log_file,
    )
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info(f"wezconf v{__version__} starting...")
    logger.info("=" * 60)

    app = QApplication([sys.argv[0]] + qt_args)
    app.setApplicationName("wezconf")
    app.setOrganizationName("wezconf")

    # One store per session
    store = SettingsStore(StateStorage(settings.config_dir))
    resolver = UrlStateResolver(store)

    from .ui import MainWindow
    window = MainWindow(store, settings, resolver)
    window.show()

    if args.url:
        window.open_url(args.url)

    exit_code = app.exec()

    logger.info("wezconf exiting")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
