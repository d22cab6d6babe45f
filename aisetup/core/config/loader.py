"""
Configuration loader — reads the optional aisetup config file.

The file is optional; without it the built-in desired state is used
unchanged. It is located in this order:

    1. --config on the command line
    2. $AISETUP_CONFIG
    3. ~/.config/aisetup/config.yml

An invalid file is the only condition that aborts a run, and it is
detected before anything is mutated.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AISETUP_CONFIG"
DEFAULT_CONFIG_PATH = Path(".config") / "aisetup" / "config.yml"


class ConfigError(Exception):
    """Raised when the config file is unreadable or invalid."""


class SetupConfig(BaseModel):
    """User overrides for the desired state."""

    model_config = {"extra": "forbid"}

    registry_path: str | None = None
    commands_source: str | None = None
    superclaude_command: list[str] | None = None
    env: dict[str, str] = Field(default_factory=dict)
    aliases: dict[str, str] = Field(default_factory=dict)
    skip_tools: list[str] = Field(default_factory=list)


def find_config_file(
    explicit: Path | None = None,
    home: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Locate the config file.

    An explicit path is returned even if it does not exist, so that
    ``load_config`` can report it. The other locations are only
    returned when present.
    """
    if explicit is not None:
        return explicit

    environ = os.environ if environ is None else environ
    from_env = environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser()

    candidate = (home or Path.home()) / DEFAULT_CONFIG_PATH
    return candidate if candidate.is_file() else None


def load_config(path: Path | None) -> SetupConfig:
    """Load and validate the config file.

    Args:
        path: Config file path, or None for defaults.

    Returns:
        Validated SetupConfig.

    Raises:
        ConfigError: If the file is missing (when given explicitly),
            unreadable, not YAML, or fails validation.
    """
    if path is None:
        return SetupConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return SetupConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = SetupConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info(
        "Loaded config %s (%d env values, %d alias overrides)",
        path, len(config.env), len(config.aliases),
    )
    return config
