"""Resolve panes to their tmux windows."""

import asyncio
import shutil
from collections.abc import Iterable
from typing import NamedTuple

from loguru import logger

DEFAULT_TIMEOUT = 2.0
WINDOW_ID_FORMAT = "#{window_id}"


class TmuxWindowResolver:
    """Looks up the window that owns a pane via ``tmux display-message``.

    Any failure (tmux missing, unknown pane, timeout) resolves to None so
    callers can drop the pane instead of failing.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, tmux_bin: str = "tmux"):
        self._timeout = timeout
        self._tmux_bin = tmux_bin

    def available(self) -> bool:
        return shutil.which(self._tmux_bin) is not None

    async def window_id(self, pane: str) -> str | None:
        """Return the window id (``@3``) containing *pane*, or None."""
        try:
            result = await self._run_tmux("display-message", "-p", "-t", pane, WINDOW_ID_FORMAT)
        except (OSError, asyncio.TimeoutError) as e:
            logger.warning(f"tmux lookup for pane {pane} failed: {e!r}")
            return None

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            logger.debug(f"tmux has no window for pane {pane}: {stderr}")
            return None

        window = result.stdout.decode("utf-8", errors="replace").strip()
        return window or None

    async def count_windows(self, panes: Iterable[str]) -> int:
        """Count distinct windows holding at least one of *panes*."""
        panes = list(panes)
        if not panes:
            return 0
        if not self.available():
            logger.warning(f"{self._tmux_bin} not found on PATH, excluding {len(panes)} panes")
            return 0

        windows = await asyncio.gather(*(self.window_id(p) for p in panes))
        return len({w for w in windows if w})

    async def _run_tmux(self, *args: str) -> "_TmuxResult":
        """Run a tmux client command against the user's default server."""
        process = await asyncio.create_subprocess_exec(
            self._tmux_bin,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), self._timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise
        return _TmuxResult(
            returncode=process.returncode or 0,
            stdout=stdout or b"",
            stderr=stderr or b"",
        )


class _TmuxResult(NamedTuple):
    returncode: int
    stdout: bytes
    stderr: bytes
