"""Pytest configuration and shared fixtures for Promptopia tests."""

import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from promptopia.config.app import PromptopiaConfig
from promptopia.storage.prompts import LocalPromptManager


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def prompts_dir(temp_dir: Path) -> Path:
    """Create an empty prompts directory."""
    path = temp_dir / "prompts"
    path.mkdir()
    return path


@pytest.fixture
def prompt_manager(prompts_dir: Path) -> LocalPromptManager:
    """Create a prompt manager backed by the temp prompts directory."""
    return LocalPromptManager(prompts_dir)


@pytest.fixture
def default_config(prompts_dir: Path) -> PromptopiaConfig:
    """Create a config pointing at the temp prompts directory, watcher off."""
    return PromptopiaConfig(prompts_dir=str(prompts_dir), watch_enabled=False)
