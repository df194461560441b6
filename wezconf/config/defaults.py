"""
Default preferences for wezconf.

These are the default values used when no user preferences exist.
They configure the application itself, not the WezTerm settings it edits.
"""

DEFAULT_SETTINGS = {
    "version": "1.0.0",

    # Base URL that share links are built on
    "share_base_url": "https://wez-conf.balintb.com/",

    # Logging
    "log_level": "INFO",

    # Importing an existing wezterm.lua
    "import": {
        "reset_before_apply": True,
        "fetch_timeout": 10,
    },

    # Window settings
    "window": {
        "width": 760,
        "height": 620,
    },
}
