"""SQLite-backed notification store keyed by tmux pane."""

import os
import sqlite3
import time
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger

from tmux_notify.errors import StoreIoError, translate_errors

DEFAULT_BUSY_TIMEOUT = 5.0

# Files SQLite may leave next to the database in WAL or rollback mode
SIDECAR_SUFFIXES = ("-wal", "-shm", "-journal")


class NotificationState(str, Enum):
    """Read state of a pane's notification."""

    UNREAD = "unread"
    READ = "read"


@dataclass
class Notification:
    """A single pane's notification as stored."""

    pane: str
    title: str
    message: str
    state: NotificationState
    created_at: int

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["state"] = self.state.value
        return d


class NotificationStore:
    """One-row-per-pane notification table shared by concurrent processes.

    Every connection waits up to ``busy_timeout`` seconds for another
    process's write lock before failing with ``StoreBusyError``. Each
    mutation is a single statement, committed on its own.
    """

    def __init__(
        self,
        db_path: str | Path,
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        self._db_path = Path(db_path).expanduser()
        self._clock = clock
        logger.debug(f"Notification store: db_path={self._db_path}")
        try:
            with translate_errors("open store"):
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
                self._conn = sqlite3.connect(str(self._db_path), timeout=busy_timeout)
                self._conn.row_factory = sqlite3.Row
                self._conn.execute(f"PRAGMA busy_timeout={int(busy_timeout * 1000)}")
                self._conn.execute("PRAGMA journal_mode=WAL")
                self._create_tables()
        except StoreIoError as e:
            parent = self._db_path.parent
            logger.error(
                f"Notification store init failed: path={self._db_path}, "
                f"parent_exists={parent.exists()}, "
                f"parent_writable={os.access(parent, os.W_OK)}, "
                f"error={e}"
            )
            raise

        try:
            os.chmod(self._db_path, 0o600)
        except OSError as e:
            logger.debug(f"Could not restrict permissions on {self._db_path}: {e}")

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _create_tables(self) -> None:
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS notifications (
                pane TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                message TEXT NOT NULL,
                state TEXT DEFAULT 'unread',
                created_at INTEGER DEFAULT (strftime('%s', 'now'))
            );

            CREATE INDEX IF NOT EXISTS idx_state ON notifications(state);
        """)
        self._conn.commit()

    def _now(self) -> int:
        return int(self._clock())

    def _execute(self, action: str, sql: str, params: Iterable[Any] = ()) -> int:
        """Run one mutating statement in its own transaction, return rowcount."""
        with translate_errors(action):
            with self._conn:
                cursor = self._conn.execute(sql, tuple(params))
        return cursor.rowcount

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "NotificationStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # --- Writes ---

    def add(self, pane: str, title: str, message: str) -> None:
        """Insert or replace the notification for *pane*.

        New content always lands as unread with a fresh ``created_at``.
        Re-adding identical title and message keeps the stored state and
        timestamp, so an acknowledged notification is not resurrected.
        """
        self._execute(
            "add notification",
            """INSERT INTO notifications (pane, title, message, state, created_at)
            VALUES (?, ?, ?, 'unread', ?)
            ON CONFLICT(pane) DO UPDATE SET
                state = CASE
                    WHEN notifications.title IS NOT excluded.title
                      OR notifications.message IS NOT excluded.message
                    THEN 'unread'
                    ELSE notifications.state
                END,
                created_at = CASE
                    WHEN notifications.title IS NOT excluded.title
                      OR notifications.message IS NOT excluded.message
                    THEN MAX(excluded.created_at, notifications.created_at)
                    ELSE notifications.created_at
                END,
                title = excluded.title,
                message = excluded.message""",
            (pane, title, message, self._now()),
        )
        logger.debug(f"Upserted notification for pane {pane}")

    def mark_read(self, pane: str) -> int:
        """Mark *pane*'s notification read. Returns rows updated (0 or 1)."""
        updated = self._execute(
            "mark read",
            "UPDATE notifications SET state = ? WHERE pane = ?",
            (NotificationState.READ.value, pane),
        )
        logger.debug(f"mark_read pane={pane} updated={updated}")
        return updated

    def dismiss(self, pane: str) -> int:
        """Delete *pane*'s notification. Returns rows deleted (0 or 1)."""
        deleted = self._execute(
            "dismiss",
            "DELETE FROM notifications WHERE pane = ?",
            (pane,),
        )
        logger.debug(f"dismiss pane={pane} deleted={deleted}")
        return deleted

    def cleanup(self, retention_hours: int) -> int:
        """Delete notifications created more than *retention_hours* ago."""
        cutoff = self._now() - retention_hours * 3600
        deleted = self._execute(
            "cleanup",
            "DELETE FROM notifications WHERE created_at < ?",
            (cutoff,),
        )
        if deleted:
            logger.debug(f"Cleaned up {deleted} notifications older than {retention_hours}h")
        return deleted

    def prune(self, valid_panes: Iterable[str]) -> int:
        """Delete notifications for panes not in *valid_panes*.

        An empty *valid_panes* means no pane is valid and deletes every
        notification, the same as a row-level reset.
        """
        panes = sorted(set(valid_panes))
        if not panes:
            deleted = self._execute("prune", "DELETE FROM notifications")
        else:
            placeholders = ", ".join("?" for _ in panes)
            deleted = self._execute(
                "prune",
                f"DELETE FROM notifications WHERE pane NOT IN ({placeholders})",
                panes,
            )
        if deleted:
            logger.debug(f"Pruned {deleted} notifications for stale panes")
        return deleted

    # --- Reads ---

    def query(self) -> list[Notification]:
        """Return every notification, newest first."""
        with translate_errors("query"):
            rows = self._conn.execute(
                "SELECT pane, title, message, state, created_at FROM notifications "
                "ORDER BY created_at DESC, pane ASC"
            ).fetchall()
        return [self._row_to_notification(r) for r in rows]

    def count_unread(self) -> int:
        """Return the number of unread notifications."""
        with translate_errors("count"):
            row = self._conn.execute(
                "SELECT COUNT(*) FROM notifications WHERE state = ?",
                (NotificationState.UNREAD.value,),
            ).fetchone()
        return row[0] if row else 0

    def unread_panes(self) -> list[str]:
        """Return the panes that have an unread notification."""
        with translate_errors("list unread panes"):
            rows = self._conn.execute(
                "SELECT pane FROM notifications WHERE state = ? ORDER BY pane",
                (NotificationState.UNREAD.value,),
            ).fetchall()
        return [r["pane"] for r in rows]

    @staticmethod
    def _row_to_notification(row: sqlite3.Row) -> Notification:
        try:
            return Notification(
                pane=row["pane"],
                title=row["title"],
                message=row["message"],
                state=NotificationState(row["state"]),
                created_at=int(row["created_at"]),
            )
        except (TypeError, ValueError) as e:
            raise StoreIoError(f"query: unexpected row for pane {row['pane']}: {e}") from e


def reset_store(db_path: str | Path) -> bool:
    """Delete the store file at *db_path* without opening it.

    Returns False when there was nothing to delete. SQLite sidecar files
    are removed alongside the database.
    """
    path = Path(db_path).expanduser()
    if not path.exists():
        logger.debug(f"Reset skipped, no store at {path}")
        return False

    with translate_errors("reset"):
        path.unlink()
        for suffix in SIDECAR_SUFFIXES:
            sidecar = path.with_name(path.name + suffix)
            if sidecar.exists():
                sidecar.unlink()

    logger.debug(f"Removed store at {path}")
    return True
