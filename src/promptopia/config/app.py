"""
Configuration management for Promptopia.

Provides YAML-based configuration with environment and CLI overrides,
configuration hierarchy (CLI > environment > YAML > defaults), and
validation.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_FILE = "~/.promptopia/config.yaml"

# Environment variable -> dotted config key
ENV_OVERRIDES: dict[str, str] = {
    "PROMPTS_DIR": "prompts_dir",
    "PROMPTOPIA_LOG_LEVEL": "logging.level",
}


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log record format (logging module syntax)",
    )
    file: str | None = Field(
        default=None,
        description="Optional log file path; logs always go to stderr as well",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        """Accept log levels in any case."""
        return v.lower() if isinstance(v, str) else v


class PromptopiaConfig(BaseModel):
    """Top-level Promptopia configuration."""

    prompts_dir: str = Field(
        default="./prompts",
        description="Directory where prompts are stored, one JSON file per prompt",
    )
    watch_enabled: bool = Field(
        default=True,
        description="Watch the prompts directory and notify clients of changes",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    @field_validator("prompts_dir")
    @classmethod
    def validate_prompts_dir(cls, v: str) -> str:
        """Validate prompts_dir is not blank."""
        if not v or not v.strip():
            raise ValueError("prompts_dir must not be empty")
        return v

    def get_prompts_path(self) -> Path:
        """Return prompts_dir as an absolute path."""
        return Path(self.prompts_dir).expanduser().resolve()


def load_yaml(config_file: str) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Returns an empty dict if the file does not exist or is empty.

    Raises:
        ValueError: If the YAML is invalid or is not a mapping
    """
    config_path = Path(config_file).expanduser()
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return data


def apply_overrides(
    config_dict: dict[str, Any],
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Apply overrides to a config dictionary.

    Keys may be dotted (e.g. "logging.level") to reach nested settings.
    None values are ignored.

    Args:
        config_dict: Configuration dictionary
        overrides: Dictionary of overrides

    Returns:
        Configuration dictionary with overrides applied
    """
    if overrides is None:
        return config_dict

    for key, value in overrides.items():
        if value is None:
            continue
        if "." in key:
            parts = key.split(".")
            current = config_dict
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = value
        else:
            config_dict[key] = value

    return config_dict


def env_overrides(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Collect overrides from environment variables."""
    env = os.environ if environ is None else environ
    return {key: env[name] for name, key in ENV_OVERRIDES.items() if env.get(name)}


def load_config(
    config_file: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> PromptopiaConfig:
    """
    Load configuration with hierarchy: CLI > environment > YAML > defaults.

    Args:
        config_file: Path to YAML config file (default: ~/.promptopia/config.yaml)
        cli_overrides: Dictionary of CLI argument overrides
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated PromptopiaConfig instance

    Raises:
        ValueError: If configuration is invalid
    """
    if config_file is None:
        config_file = DEFAULT_CONFIG_FILE

    config_dict = load_yaml(config_file)
    config_dict = apply_overrides(config_dict, env_overrides(environ))
    config_dict = apply_overrides(config_dict, cli_overrides)

    try:
        return PromptopiaConfig(**config_dict)
    except Exception as e:
        raise ValueError(
            f"Configuration validation failed: {e}\n"
            f"Please check your configuration file at {config_file}"
        ) from e
