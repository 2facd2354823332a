"""Configuration schema using Pydantic."""

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CountMode(str, Enum):
    """How ``count`` aggregates unread notifications."""

    WINDOWS = "windows"  # distinct tmux windows with an unread pane
    PANES = "panes"  # plain unread row count


class Settings(BaseSettings):
    """Root configuration, read from ``TMUX_NOTIFY_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="TMUX_NOTIFY_")

    db_path: Path | None = None  # None = platform data directory
    retention_hours: int = Field(default=24, ge=0)
    busy_timeout: float = Field(default=5.0, gt=0)  # seconds to wait on a locked db
    count_mode: CountMode = CountMode.WINDOWS
    tmux_timeout: float = Field(default=2.0, gt=0)  # per-pane window lookup
