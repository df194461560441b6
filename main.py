#!/usr/bin/env python3
"""
wezconf - Main entry point.

Launches the Qt application.
"""

import sys

from wezconf.main import main


if __name__ == "__main__":
    sys.exit(main())
