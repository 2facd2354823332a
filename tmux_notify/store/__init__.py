"""Persistent notification storage."""

from tmux_notify.store.notifications import (
    Notification,
    NotificationState,
    NotificationStore,
    reset_store,
)

__all__ = ["Notification", "NotificationState", "NotificationStore", "reset_store"]
