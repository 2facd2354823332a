"""Error types raised by the notification store."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager


class NotifyError(Exception):
    """Base class for every error tmux-notify reports to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PathResolutionError(NotifyError):
    """Raised when no home or data directory can be resolved for the store."""


class ConfigError(NotifyError):
    """Raised when TMUX_NOTIFY_* settings fail validation."""


class StoreIoError(NotifyError):
    """Raised when the store file cannot be opened, read or written."""


class StoreBusyError(StoreIoError):
    """Raised when another process held the write lock past the busy timeout."""


def _is_busy(exc: sqlite3.Error) -> bool:
    text = str(exc).lower()
    return "locked" in text or "busy" in text


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise sqlite3 and OS errors from *action* as store errors."""
    try:
        yield
    except sqlite3.OperationalError as e:
        if _is_busy(e):
            raise StoreBusyError(f"{action}: database is busy ({e})") from e
        raise StoreIoError(f"{action}: {e}") from e
    except sqlite3.Error as e:
        raise StoreIoError(f"{action}: {e}") from e
    except OSError as e:
        raise StoreIoError(f"{action}: {e}") from e
