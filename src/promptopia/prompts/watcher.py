"""Prompts directory watcher.

Watches the prompts directory with ``watchfiles`` and calls a
zero-argument listener once per filesystem change, so the MCP server can
emit ``notifications/prompts/list_changed``. Bursts are not debounced
here; batching is left to the listener.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchfiles import awatch

logger = logging.getLogger(__name__)


class PromptDirectoryWatcher:
    """Background task that reports changes in the prompts directory.

    Args:
        prompts_dir: Directory to watch (recursively)
        on_change: Called with no arguments for every observed change.
            May be a plain function or a coroutine function.
    """

    def __init__(self, prompts_dir: Path | str, on_change: Callable[[], Any]) -> None:
        self.prompts_dir = Path(prompts_dir).expanduser()
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None

    @property
    def is_watching(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start watching, replacing any watch that is already running."""
        if self._task is not None:
            await self.stop()
        self._task = asyncio.create_task(self._watch_loop(), name="prompts-watcher")
        logger.info(f"Watching for changes in prompts directory: {self.prompts_dir}")

    async def stop(self) -> None:
        """Cancel the active watch, if any."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Prompts watcher stopped")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _watch_loop(self) -> None:
        try:
            async for changes in awatch(self.prompts_dir, recursive=True, watch_filter=None):
                for change, path in changes:
                    logger.debug(f"Prompts directory change detected: {change.name} - {path}")
                    await self._notify()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error watching prompts directory {self.prompts_dir}: {e}")

    async def _notify(self) -> None:
        try:
            result = self._on_change()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Error in prompts change listener: {e}")
