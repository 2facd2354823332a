"""Queries against the running tmux server."""

from tmux_notify.tmux.windows import TmuxWindowResolver

__all__ = ["TmuxWindowResolver"]
