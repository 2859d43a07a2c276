"""Tests for the prompts directory watcher."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from watchfiles import Change

from promptopia.prompts.watcher import PromptDirectoryWatcher

pytestmark = pytest.mark.unit


def _fake_awatch(batches, hold_open=True):
    """Build an awatch replacement yielding the given change batches."""

    async def fake(*args, **kwargs):
        for batch in batches:
            yield batch
        if hold_open:
            await asyncio.Event().wait()

    return fake


async def _drain() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


class TestWatcherLifecycle:
    """Tests for start/stop state transitions."""

    @pytest.mark.asyncio
    async def test_starts_idle(self, prompts_dir: Path):
        watcher = PromptDirectoryWatcher(prompts_dir, MagicMock())
        assert watcher.is_watching is False

    @pytest.mark.asyncio
    async def test_start_and_stop(self, prompts_dir: Path):
        watcher = PromptDirectoryWatcher(prompts_dir, MagicMock())

        with patch("promptopia.prompts.watcher.awatch", _fake_awatch([])):
            await watcher.start()
            assert watcher.is_watching is True

            await watcher.stop()
            assert watcher.is_watching is False

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, prompts_dir: Path):
        watcher = PromptDirectoryWatcher(prompts_dir, MagicMock())
        await watcher.stop()

        with patch("promptopia.prompts.watcher.awatch", _fake_awatch([])):
            await watcher.start()
            await watcher.stop()
            await watcher.stop()

        assert watcher.is_watching is False

    @pytest.mark.asyncio
    async def test_restart_cancels_previous_watch(self, prompts_dir: Path):
        watcher = PromptDirectoryWatcher(prompts_dir, MagicMock())

        with patch("promptopia.prompts.watcher.awatch", _fake_awatch([])):
            await watcher.start()
            first_task = watcher._task

            await watcher.start()
            second_task = watcher._task

            assert first_task is not second_task
            assert first_task.cancelled()
            assert watcher.is_watching is True

            await watcher.stop()


class TestWatcherNotifications:
    """Tests for change delivery."""

    @pytest.mark.asyncio
    async def test_one_notification_per_change(self, prompts_dir: Path):
        listener = MagicMock(return_value=None)
        watcher = PromptDirectoryWatcher(prompts_dir, listener)
        batches = [
            {(Change.added, str(prompts_dir / "prompt-1.json"))},
            {
                (Change.modified, str(prompts_dir / "prompt-1.json")),
                (Change.deleted, str(prompts_dir / "notes.txt")),
            },
        ]

        with patch("promptopia.prompts.watcher.awatch", _fake_awatch(batches)):
            await watcher.start()
            await _drain()
            await watcher.stop()

        assert listener.call_count == 3
        listener.assert_called_with()

    @pytest.mark.asyncio
    async def test_async_listener_is_awaited(self, prompts_dir: Path):
        listener = AsyncMock()
        watcher = PromptDirectoryWatcher(prompts_dir, listener)
        batches = [{(Change.added, str(prompts_dir / "prompt-1.json"))}]

        with patch("promptopia.prompts.watcher.awatch", _fake_awatch(batches)):
            await watcher.start()
            await _drain()
            await watcher.stop()

        listener.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_listener_error_does_not_stop_watch(self, prompts_dir: Path):
        listener = MagicMock(side_effect=[RuntimeError("boom"), None])
        watcher = PromptDirectoryWatcher(prompts_dir, listener)
        batches = [
            {(Change.added, str(prompts_dir / "a.json"))},
            {(Change.added, str(prompts_dir / "b.json"))},
        ]

        with patch("promptopia.prompts.watcher.awatch", _fake_awatch(batches)):
            await watcher.start()
            await _drain()
            assert watcher.is_watching is True
            await watcher.stop()

        assert listener.call_count == 2

    @pytest.mark.asyncio
    async def test_watch_setup_error_is_logged_not_raised(self, prompts_dir: Path):
        async def failing(*args, **kwargs):
            raise FileNotFoundError("no such directory")
            yield  # pragma: no cover

        watcher = PromptDirectoryWatcher(prompts_dir / "missing", MagicMock())

        with (
            patch("promptopia.prompts.watcher.awatch", failing),
            patch("promptopia.prompts.watcher.logger") as mock_logger,
        ):
            await watcher.start()
            await _drain()

            assert watcher.is_watching is False
            mock_logger.error.assert_called_once()

        await watcher.stop()

    @pytest.mark.asyncio
    async def test_watches_recursively_without_filter(self, prompts_dir: Path):
        calls = []

        async def recording(*args, **kwargs):
            calls.append((args, kwargs))
            await asyncio.Event().wait()
            yield  # pragma: no cover

        watcher = PromptDirectoryWatcher(prompts_dir, MagicMock())
        with patch("promptopia.prompts.watcher.awatch", recording):
            await watcher.start()
            await _drain()
            await watcher.stop()

        args, kwargs = calls[0]
        assert args[0] == prompts_dir
        assert kwargs["recursive"] is True
        assert kwargs["watch_filter"] is None
