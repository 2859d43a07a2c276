"""Configuration for Promptopia."""

from promptopia.config.app import (
    LoggingSettings,
    PromptopiaConfig,
    load_config,
)

__all__ = ["LoggingSettings", "PromptopiaConfig", "load_config"]
