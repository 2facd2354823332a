"""CLI commands for tmux-notify.

Every command prints exactly one line on stdout: a JSON object with
``"ok": true`` on success, or ``{"ok": false, "error": ...}`` with exit
status 1 on failure. ``count`` is the exception and prints a bare integer.
"""

import asyncio
import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from tmux_notify import __logo__, __version__
from tmux_notify.config import CountMode, Settings, load_settings, resolve_db_path
from tmux_notify.errors import NotifyError
from tmux_notify.store import NotificationState, NotificationStore, reset_store
from tmux_notify.tmux import TmuxWindowResolver

app = typer.Typer(
    name="tmux-notify",
    help=f"{__logo__} tmux-notify - Notification storage for tmux",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        typer.echo(f"tmux-notify v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.callback()
def main(
    ctx: typer.Context,
    db_path: Path = typer.Option(
        None,
        "--db-path",
        help="Custom database path (default: $XDG_DATA_HOME/tmux-notify/notifications.db)",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output to stderr"),
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
):
    """tmux-notify - Notification storage for tmux."""
    _configure_logging(verbose)
    with _envelope():
        ctx.obj = load_settings(db_path=db_path)


# ============================================================================
# Output helpers
# ============================================================================


def _emit(payload: dict[str, Any]) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False))


@contextmanager
def _envelope() -> Iterator[None]:
    """Render store errors as the JSON error line and exit non-zero."""
    try:
        yield
    except NotifyError as e:
        logger.debug(f"Command failed: {type(e).__name__}: {e}")
        _emit({"ok": False, "error": e.message})
        raise typer.Exit(1)


def _open_store(settings: Settings) -> NotificationStore:
    return NotificationStore(
        resolve_db_path(settings.db_path),
        busy_timeout=settings.busy_timeout,
    )


def _parse_pane_list(value: str) -> set[str]:
    return {p.strip() for p in value.split(",") if p.strip()}


# ============================================================================
# Commands
# ============================================================================


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t", help="Notification title"),
    message: str = typer.Option(..., "--message", "-m", help="Notification message"),
    pane: str = typer.Option(..., "--pane", "-p", help="Pane ID (e.g., %5)"),
    retention: int = typer.Option(
        None, "--retention", min=0, help="Retention hours for cleanup (default: 24)"
    ),
):
    """Add or replace a notification for a pane."""
    settings: Settings = ctx.obj
    hours = settings.retention_hours if retention is None else retention
    with _envelope():
        with _open_store(settings) as store:
            store.add(pane, title, message)
            cleaned = store.cleanup(hours)
    _emit({"ok": True, "cleaned": cleaned})


@app.command()
def query(
    ctx: typer.Context,
    pretty: bool = typer.Option(False, "--pretty", help="Render a table instead of JSON"),
):
    """Query all notifications, newest first."""
    with _envelope():
        with _open_store(ctx.obj) as store:
            notifications = store.query()

    if not pretty:
        _emit({"ok": True, "notifications": [n.to_dict() for n in notifications]})
        return

    if not notifications:
        console.print("No notifications.")
        return

    table = Table(title="Notifications")
    table.add_column("Pane", style="cyan")
    table.add_column("State")
    table.add_column("Created", width=19)
    table.add_column("Title")
    table.add_column("Message")

    for n in notifications:
        state = (
            "[bold yellow]unread[/bold yellow]"
            if n.state == NotificationState.UNREAD
            else "[dim]read[/dim]"
        )
        created = datetime.fromtimestamp(n.created_at).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(n.pane, state, created, n.title, n.message[:80])

    console.print(table)


@app.command()
def count(
    ctx: typer.Context,
    mode: CountMode = typer.Option(
        None,
        "--mode",
        case_sensitive=False,
        help="windows: distinct tmux windows with unread panes; panes: unread rows",
    ),
):
    """Print the unread count as a bare integer."""
    settings: Settings = ctx.obj
    mode = mode or settings.count_mode
    with _envelope():
        with _open_store(settings) as store:
            if mode == CountMode.PANES:
                typer.echo(str(store.count_unread()))
                return
            panes = store.unread_panes()

    resolver = TmuxWindowResolver(timeout=settings.tmux_timeout)
    typer.echo(str(asyncio.run(resolver.count_windows(panes))))


@app.command("mark-read")
def mark_read(
    ctx: typer.Context,
    pane: str = typer.Argument(..., help="Pane ID to mark as read"),
):
    """Mark the notification for a pane as read."""
    with _envelope():
        with _open_store(ctx.obj) as store:
            updated = store.mark_read(pane)
    _emit({"ok": True, "updated": updated})


@app.command()
def dismiss(
    ctx: typer.Context,
    pane: str = typer.Argument(..., help="Pane ID to dismiss"),
):
    """Dismiss (delete) the notification for a pane."""
    with _envelope():
        with _open_store(ctx.obj) as store:
            deleted = store.dismiss(pane)
    _emit({"ok": True, "deleted": deleted})


@app.command()
def cleanup(
    ctx: typer.Context,
    retention: int = typer.Option(
        None, "--retention", min=0, help="Retention hours (default: 24)"
    ),
):
    """Delete notifications older than the retention window."""
    settings: Settings = ctx.obj
    hours = settings.retention_hours if retention is None else retention
    with _envelope():
        with _open_store(settings) as store:
            deleted = store.cleanup(hours)
    _emit({"ok": True, "deleted": deleted})


@app.command()
def prune(
    ctx: typer.Context,
    valid_panes: str = typer.Option(
        ...,
        "--valid-panes",
        help='Comma-separated list of live pane IDs (e.g., "%1,%2,%3"). '
        "An empty list deletes every notification.",
    ),
):
    """Prune notifications for panes that no longer exist."""
    with _envelope():
        with _open_store(ctx.obj) as store:
            pruned = store.prune(_parse_pane_list(valid_panes))
    _emit({"ok": True, "pruned": pruned})


@app.command()
def reset(ctx: typer.Context):
    """Reset (delete) the entire notification database."""
    settings: Settings = ctx.obj
    with _envelope():
        db_path = resolve_db_path(settings.db_path)
        removed = reset_store(db_path)

    if removed:
        _emit({"ok": True, "path": str(db_path)})
    else:
        _emit({"ok": True, "message": "database does not exist"})
