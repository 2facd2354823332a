"""Settings loading and store path resolution."""

import os
import sys
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from tmux_notify.config.schema import Settings
from tmux_notify.errors import ConfigError, PathResolutionError

APP_DIR_NAME = "tmux-notify"
DB_FILE_NAME = "notifications.db"


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, letting non-None *overrides* win."""
    try:
        settings = Settings()
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    updates = {k: v for k, v in overrides.items() if v is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    return settings


def _home_dir() -> Path | None:
    try:
        home = Path.home()
    except (KeyError, RuntimeError):
        return None
    # Path.home() falls back to "~" unexpanded on some platforms
    if not str(home) or str(home) == "~":
        return None
    return home


def _platform_data_dir() -> Path | None:
    xdg = os.environ.get("XDG_DATA_HOME", "")
    if xdg and Path(xdg).is_absolute():
        return Path(xdg)

    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata)

    home = _home_dir()
    if home is None:
        return None
    if sys.platform == "darwin":
        return home / "Library" / "Application Support"
    return home / ".local" / "share"


def get_default_db_path() -> Path:
    """Return the default store location.

    Tries the platform data directory first, then ``~/.local/share``.

    Raises:
        PathResolutionError: If neither a data nor a home directory resolves.
    """
    data_dir = _platform_data_dir()
    if data_dir is not None:
        return data_dir / APP_DIR_NAME / DB_FILE_NAME

    home = _home_dir()
    if home is not None:
        return home / ".local" / "share" / APP_DIR_NAME / DB_FILE_NAME

    raise PathResolutionError(
        "Could not determine home directory. Set HOME or use --db-path"
    )


def resolve_db_path(override: str | Path | None = None) -> Path:
    """Resolve the store path, preferring an explicit *override*."""
    if override is not None:
        path = Path(override).expanduser()
    else:
        path = get_default_db_path()
    logger.debug(f"Resolved store path: {path}")
    return path
