"""tmux-notify - per-pane notification store for tmux."""

__version__ = "0.1.0"
__logo__ = "🔔"
