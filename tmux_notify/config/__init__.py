"""Configuration for tmux-notify."""

from tmux_notify.config.loader import get_default_db_path, load_settings, resolve_db_path
from tmux_notify.config.schema import CountMode, Settings

__all__ = [
    "CountMode",
    "Settings",
    "get_default_db_path",
    "load_settings",
    "resolve_db_path",
]
