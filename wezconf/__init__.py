"""
wezconf - WezTerm configuration editor.

Keeps a WezTerm configuration state, imports existing wezterm.lua files,
and shares the state through compact URL fragments.
"""

__version__ = "1.0.0"
